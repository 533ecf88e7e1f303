# embedvault/storage/memory_store.py
import logging
from typing import Dict

import numpy as np

from embedvault.errors import DimensionMismatchError, EmptyIdError, EmptyVectorError, NotFoundError
from embedvault.similarity_engine.vector_math import VectorLike, VectorOps
from embedvault.utilities.rw_lock import ReadWriteLock
from .base import VectorStore

logger = logging.getLogger(__name__)


class MemoryStore(VectorStore):
    """
    In-memory vector store.

    Writes take the exclusive lock, reads the shared one. Vectors are copied
    on the way in and on the way out, so callers never hold a reference to
    stored state.
    """

    def __init__(self, dimension: int = 0):
        """
        Args:
            dimension: Required vector length; 0 accepts any length
        """
        if dimension < 0:
            raise ValueError("Dimension must be 0 (unrestricted) or positive")
        self.dimension = dimension
        self._data: Dict[str, np.ndarray] = {}
        self._lock = ReadWriteLock()

    def save_vector(self, vector_id: str, vector: VectorLike) -> None:
        if not vector_id:
            raise EmptyIdError()
        vector = VectorOps.to_numpy_array(vector, copy=True)
        if len(vector) == 0:
            raise EmptyVectorError(vector_id)
        if self.dimension > 0 and len(vector) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(vector), vector_id=vector_id)

        with self._lock.write_lock():
            self._data[vector_id] = vector
        logger.debug("Saved vector %s (%d dims)", vector_id, len(vector))

    def get_vector(self, vector_id: str) -> np.ndarray:
        with self._lock.read_lock():
            vector = self._data.get(vector_id)
            if vector is None:
                raise NotFoundError(vector_id)
            return vector.copy()

    def get_all_vectors(self) -> Dict[str, np.ndarray]:
        with self._lock.read_lock():
            return {vector_id: vector.copy() for vector_id, vector in self._data.items()}

    def close(self) -> None:
        """Nothing to release for the in-memory store."""

    def __len__(self):
        with self._lock.read_lock():
            return len(self._data)

    def __contains__(self, vector_id):
        with self._lock.read_lock():
            return vector_id in self._data
