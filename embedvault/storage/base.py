# embedvault/storage/base.py
"""
Store capabilities.

VectorStore is the minimal capability the engine needs: raw vectors by id.
RichVectorStore adds metadata, precomputed norms and a store-local search.
A concrete store may implement either or both.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np

from embedvault.errors import BulkImportError, EmbedVaultError
from embedvault.similarity_engine.vector_math import VectorLike
from embedvault.types import SearchResult, VectorRecord

logger = logging.getLogger(__name__)


class _Closeable(ABC):

    @abstractmethod
    def close(self) -> None:
        """Release resources held by the store."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class VectorStore(_Closeable):
    """Minimal storage capability: raw vectors keyed by id."""

    @abstractmethod
    def save_vector(self, vector_id: str, vector: VectorLike) -> None:
        """Store a vector under `vector_id`, replacing any previous value."""

    @abstractmethod
    def get_vector(self, vector_id: str) -> np.ndarray:
        """Return a copy of the vector. Raises NotFoundError if absent."""

    @abstractmethod
    def get_all_vectors(self) -> Dict[str, np.ndarray]:
        """Return copies of every stored vector, keyed by id."""


class RichVectorStore(_Closeable):
    """Storage with metadata, precomputed norms and a built-in top-k search."""

    @abstractmethod
    def add(self, vector_id: str, vector: VectorLike,
            metadata: Optional[Dict[str, Any]] = None) -> float:
        """Store a vector with metadata. Returns the precomputed norm."""

    @abstractmethod
    def get(self, vector_id: str) -> VectorRecord:
        """Return vector, norm and metadata. Raises NotFoundError if absent."""

    @abstractmethod
    def search(self, query: VectorLike, k: int) -> List[SearchResult]:
        """Top-k cosine search over the stored records (k <= 0 returns all)."""


def import_vectors(store: VectorStore, vectors: Mapping[str, VectorLike],
                   progress: Optional[Callable[[int], None]] = None) -> int:
    """
    Save every vector in `vectors` into `store`.

    Stops at the first failing item and raises BulkImportError naming its id,
    whether the store rejected it or it could not be converted to a vector.
    Items saved before the failure stay written.

    Args:
        store: Any store with the minimal capability
        vectors: Mapping of id to vector
        progress: Optional callback, called with 1 after each saved vector

    Returns:
        Number of vectors imported
    """
    imported = 0
    for vector_id, vector in vectors.items():
        try:
            store.save_vector(vector_id, vector)
        except (EmbedVaultError, ValueError, TypeError) as e:
            raise BulkImportError(vector_id, e, imported) from e
        imported += 1
        if progress:
            progress(1)
    logger.info("Imported %d vectors", imported)
    return imported
