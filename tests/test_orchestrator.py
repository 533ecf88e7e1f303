# tests/test_orchestrator.py
import math

import numpy as np
import pytest

from embedvault.errors import (
    BackendError,
    DimensionMismatchError,
    EmptyQueryError,
    EmptyStoreError,
    EmptyVectorError,
)
from embedvault.similarity_engine.orchestrator import SimilarityEngine
from embedvault.storage.memory_store import MemoryStore


@pytest.fixture
def engine(memory_store, dispatcher):
    return SimilarityEngine(memory_store, dispatcher=dispatcher)


@pytest.fixture
def abc_engine(engine):
    engine.add("a", [1, 0, 0])
    engine.add("b", [0, 1, 0])
    engine.add("c", [0.5, 0.5, 0])
    return engine


def test_top_k_order(abc_engine):
    """The best match comes first, the runner-up at cos 45 degrees."""
    results = abc_engine.search([1, 0, 0], 2)
    assert [r.id for r in results] == ["a", "c"]
    assert results[0].score == pytest.approx(1.0, abs=1e-6)
    assert results[1].score == pytest.approx(math.sqrt(0.5), abs=1e-4)


@pytest.mark.parametrize("k", [0, -1, 3, 10])
def test_k_bounds_return_all(abc_engine, k):
    results = abc_engine.search([1, 0, 0], k)
    assert [r.id for r in results] == ["a", "c", "b"]
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)


def test_results_carry_vector_copies(abc_engine, memory_store):
    result = abc_engine.search([1, 0, 0], 1)[0]
    np.testing.assert_array_equal(result.vector, [1, 0, 0])
    result.vector[0] = 42
    assert memory_store.get_vector("a")[0] == 1


def test_dimension_tolerance(engine):
    """Vectors of another dimension are skipped, not reported as errors."""
    engine.add("three", [1, 0, 0])
    engine.add("two", [1, 0])
    results = engine.search([1, 0, 0], 5)
    assert [r.id for r in results] == ["three"]


def test_no_surviving_candidates_is_empty_list(engine):
    engine.add("two", [1, 0])
    assert engine.search([1, 0, 0], 5) == []


def test_zero_vector_is_skipped(engine):
    engine.add("zero", [0, 0, 0])
    engine.add("x", [1, 1, 0])
    assert [r.id for r in engine.search([1, 0, 0], 0)] == ["x"]


def test_empty_query(abc_engine):
    with pytest.raises(EmptyQueryError):
        abc_engine.search([], 3)


def test_empty_store(engine):
    with pytest.raises(EmptyStoreError):
        engine.search([1, 0, 0], 3)


def test_add_empty_vector(engine):
    with pytest.raises(EmptyVectorError):
        engine.add("empty", [])


def test_add_respects_fixed_dimension(dispatcher):
    engine = SimilarityEngine(MemoryStore(dimension=3), dispatcher=dispatcher)
    with pytest.raises(DimensionMismatchError):
        engine.add("bad", [1, 2])


def test_backend_errors_propagate(dispatcher):
    class BrokenStore(MemoryStore):
        def get_all_vectors(self):
            raise BackendError("get_all_vectors", "disk on fire")

    engine = SimilarityEngine(BrokenStore(), dispatcher=dispatcher)
    with pytest.raises(BackendError):
        engine.search([1, 0], 1)


def test_engine_over_sqlite_store(sqlite_store, dispatcher):
    engine = SimilarityEngine(sqlite_store, dispatcher=dispatcher)
    engine.add("a", [1, 0, 0])
    engine.add("c", [0.5, 0.5, 0])
    engine.add("b", [0, 1, 0])
    assert [r.id for r in engine.search([1, 0, 0], 2)] == ["a", "c"]


def test_score_batch(engine):
    scores = engine.score_batch([1, 0, 0], [[2, 0, 0], [0, 3, 0], [1, 1, 0], [0, 0, 0]])
    assert scores.dtype == np.float32
    assert scores[:3].tolist() == pytest.approx([1.0, 0.0, math.sqrt(0.5)], abs=1e-5)
    assert np.isnan(scores[3])


def test_score_batch_empty_rows(engine):
    assert len(engine.score_batch([1, 0], [])) == 0


def test_score_batch_empty_query(engine):
    with pytest.raises(EmptyQueryError):
        engine.score_batch([], [[1]])
