# tests/test_memory_store.py
import threading

import numpy as np
import pytest

from embedvault.errors import (
    BulkImportError,
    DimensionMismatchError,
    EmptyIdError,
    EmptyVectorError,
    NotFoundError,
)
from embedvault.storage.base import VectorStore, import_vectors
from embedvault.storage.memory_store import MemoryStore


class TestMemoryStore:
    """In-memory store behavior."""

    def test_is_a_vector_store(self, memory_store):
        assert isinstance(memory_store, VectorStore)

    def test_save_and_get(self, memory_store):
        memory_store.save_vector("x", [1.0, 2.0, 3.0])
        vector = memory_store.get_vector("x")
        assert vector.dtype == np.float32
        assert vector.tolist() == [1.0, 2.0, 3.0]
        assert "x" in memory_store
        assert len(memory_store) == 1

    def test_save_replaces(self, memory_store):
        memory_store.save_vector("x", [1, 2])
        memory_store.save_vector("x", [3, 4, 5])
        assert memory_store.get_vector("x").tolist() == [3, 4, 5]
        assert len(memory_store) == 1

    def test_missing_key(self, memory_store):
        with pytest.raises(NotFoundError) as exc_info:
            memory_store.get_vector("nope")
        assert isinstance(exc_info.value, KeyError)
        assert str(exc_info.value) == "Vector not found: nope"

    def test_empty_id(self, memory_store):
        with pytest.raises(EmptyIdError):
            memory_store.save_vector("", [1, 2])

    def test_empty_vector(self, memory_store):
        with pytest.raises(EmptyVectorError):
            memory_store.save_vector("x", [])

    def test_fixed_dimension(self):
        store = MemoryStore(dimension=3)
        store.save_vector("ok", [1, 2, 3])
        with pytest.raises(DimensionMismatchError) as exc_info:
            store.save_vector("bad", [1, 2])
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2
        assert "bad" not in store

    def test_negative_dimension_rejected(self):
        with pytest.raises(ValueError):
            MemoryStore(dimension=-1)


class TestDefensiveCopies:
    """Callers can never mutate stored state through a reference."""

    def test_input_is_copied(self, memory_store):
        source = np.array([1, 2, 3], dtype=np.float32)
        memory_store.save_vector("x", source)
        source[0] = 99
        assert memory_store.get_vector("x")[0] == 1

    def test_get_vector_returns_copy(self, memory_store):
        memory_store.save_vector("x", [1, 2, 3])
        memory_store.get_vector("x")[0] = 99
        assert memory_store.get_vector("x")[0] == 1

    def test_get_all_vectors_returns_copies(self, memory_store):
        memory_store.save_vector("x", [1, 2, 3])
        everything = memory_store.get_all_vectors()
        everything["x"][0] = 99
        everything["y"] = np.zeros(3)
        assert memory_store.get_vector("x")[0] == 1
        assert "y" not in memory_store


def test_concurrent_writers_and_readers():
    """Parallel saves and scans neither lose writes nor fail."""
    store = MemoryStore()
    errors = []

    def writer(offset):
        for i in range(200):
            store.save_vector(f"{offset}-{i}", [float(i), 1.0])

    def reader():
        try:
            for _ in range(50):
                for vector in store.get_all_vectors().values():
                    assert len(vector) == 2
        except AssertionError as e:
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(store) == 800


def test_context_manager_closes():
    with MemoryStore() as store:
        store.save_vector("x", [1])
    assert store.get_vector("x").tolist() == [1]


def test_import_vectors_names_failing_item():
    store = MemoryStore(dimension=2)
    progress = []
    with pytest.raises(BulkImportError) as exc_info:
        import_vectors(store, {"a": [1, 2], "b": [3, 4], "wide": [1, 2, 3], "c": [5, 6]},
                       progress=progress.append)

    error = exc_info.value
    assert error.vector_id == "wide"
    assert error.imported == 2
    assert isinstance(error.__cause__, DimensionMismatchError)
    assert progress == [1, 1]
    assert sorted(store.get_all_vectors()) == ["a", "b"]


def test_import_vectors_wraps_conversion_errors():
    store = MemoryStore()
    with pytest.raises(BulkImportError) as exc_info:
        import_vectors(store, {"a": [1, 2], "bad": [[1, 2], [3, 4]]})
    assert exc_info.value.vector_id == "bad"
    assert isinstance(exc_info.value.__cause__, ValueError)
    assert store.get_vector("a").tolist() == [1, 2]
