# tests/test_vector_validation.py
import math

import pytest

from embedvault.utilities.vector_validation import parse_vector, validate_vector


def test_validate_vector():
    assert validate_vector([1, 2.5, -3]) == (True, "Valid")
    assert validate_vector([])[0] is False
    assert validate_vector([1, math.nan])[0] is False
    assert validate_vector([math.inf])[0] is False
    assert validate_vector([1, "2"])[0] is False
    assert validate_vector([True, 1.0])[0] is False


@pytest.mark.parametrize("tokens, expected", [
    (["1", "2", "3"], [1.0, 2.0, 3.0]),
    (["1,2,3"], [1.0, 2.0, 3.0]),
    (["1,", "2", ",3"], [1.0, 2.0, 3.0]),
    (["-0.5", "1e-3"], [-0.5, 0.001]),
])
def test_parse_vector(tokens, expected):
    assert parse_vector(tokens) == pytest.approx(expected)


def test_parse_vector_rejects_garbage():
    with pytest.raises(ValueError, match="Invalid number: x"):
        parse_vector(["1", "x"])


def test_parse_vector_rejects_empty_and_nan():
    with pytest.raises(ValueError):
        parse_vector([","])
    with pytest.raises(ValueError):
        parse_vector(["nan"])
