# tests/test_vector_math.py
import math

import numpy as np
import pytest

from embedvault.errors import DimensionMismatchError, ZeroMagnitudeError
from embedvault.similarity_engine.vector_math import VectorOps


def test_cosine_identity(dispatcher):
    """A non-zero vector is perfectly similar to itself."""
    rng = np.random.default_rng(7)
    for dim in (1, 3, 17, 300, 1025):
        v = rng.standard_normal(dim).astype(np.float32)
        assert dispatcher.cosine(v, v) == pytest.approx(1.0, abs=1e-5)


def test_cosine_orthogonal(dispatcher):
    assert dispatcher.cosine([1, 0, 0], [0, 1, 0]) == pytest.approx(0.0, abs=1e-7)


def test_cosine_opposite(dispatcher):
    assert dispatcher.cosine([1, 0, 0], [-1, 0, 0]) == pytest.approx(-1.0, abs=1e-7)


@pytest.mark.parametrize("block_size", [1, 2, 4, 8, 16, 32, 64, 128])
def test_blocked_matches_generic(block_size):
    """Blocked kernel agrees with the scalar loop, including lengths that leave a tail."""
    rng = np.random.default_rng(block_size)
    for dim in (1, 7, 9, 63, 65, 129, 257, 1000):
        a = rng.standard_normal(dim).astype(np.float32)
        b = rng.standard_normal(dim).astype(np.float32)
        expected = VectorOps.dot_generic(a, b)
        actual = VectorOps.dot_blocked(a, b, block_size)
        assert actual == pytest.approx(expected, rel=1e-4, abs=1e-4)


@pytest.mark.parametrize("block_size", [0, -1, -64])
def test_blocked_non_positive_block_size_falls_back(block_size):
    """A non-positive block size behaves like the default instead of looping forever."""
    a = np.arange(100, dtype=np.float32)
    b = np.ones(100, dtype=np.float32)
    assert VectorOps.dot_blocked(a, b, block_size) == pytest.approx(4950.0)


def test_blocked_empty_vectors():
    empty = np.array([], dtype=np.float32)
    assert VectorOps.dot_blocked(empty, empty, 8) == 0.0


def test_norm():
    v = np.array([3, 4], dtype=np.float32)
    assert VectorOps.norm(v) == pytest.approx(5.0)
    assert VectorOps.norms(np.array([[3, 4], [0, 0]], dtype=np.float32)).tolist() == [5.0, 0.0]


def test_dispatcher_norm_matches_definition(dispatcher):
    v = [1.0, 2.0, 2.0]
    assert dispatcher.norm(v) == pytest.approx(math.sqrt(9.0))


def test_dot_length_mismatch(dispatcher):
    with pytest.raises(DimensionMismatchError) as exc_info:
        dispatcher.dot([1, 2, 3], [1, 2])
    assert exc_info.value.expected == 3
    assert exc_info.value.actual == 2


def test_cosine_length_mismatch(dispatcher):
    with pytest.raises(DimensionMismatchError):
        dispatcher.cosine([1, 2], [1, 2, 3])


def test_cosine_zero_magnitude(dispatcher):
    with pytest.raises(ZeroMagnitudeError):
        dispatcher.cosine([0, 0, 0], [1, 2, 3])
    with pytest.raises(ZeroMagnitudeError):
        dispatcher.cosine([1, 2, 3], [0, 0, 0])


def test_to_numpy_array_rejects_matrices():
    with pytest.raises(ValueError):
        VectorOps.to_numpy_array([[1, 2], [3, 4]])


def test_to_numpy_array_copy():
    source = np.array([1, 2, 3], dtype=np.float32)
    copied = VectorOps.to_numpy_array(source, copy=True)
    copied[0] = 99
    assert source[0] == 1
