# embedvault/similarity_engine/orchestrator.py
import logging
import time
from typing import List, Optional, Sequence

import numpy as np

from embedvault.errors import EmptyQueryError, EmptyStoreError, EmptyVectorError
from embedvault.storage.base import VectorStore
from embedvault.types import SearchResult
from .batch_executor import BatchExecutor
from .kernel_dispatch import KernelDispatcher, default_dispatcher
from .vector_comparer import TopKSearch
from .vector_math import VectorLike, VectorOps

logger = logging.getLogger(__name__)


class SimilarityEngine:
    """High-level coordinator: stores vectors through a VectorStore and ranks them by cosine similarity."""

    def __init__(self,
                 store: VectorStore,
                 dispatcher: Optional[KernelDispatcher] = None,
                 executor: Optional[BatchExecutor] = None):
        """
        Initialize the engine.

        Args:
            store: Any store with the minimal capability
            dispatcher: Kernel dispatcher (default: process-wide)
            executor: Batch executor for score_batch (default: one bound to `dispatcher`)
        """
        self.store = store
        self.dispatcher = dispatcher or default_dispatcher()
        self.executor = executor or BatchExecutor(self.dispatcher)
        self.top_k = TopKSearch(self.dispatcher)

    def add(self, vector_id: str, vector: VectorLike) -> None:
        """Store a vector. Raises EmptyVectorError for a zero-length vector."""
        vector = VectorOps.to_numpy_array(vector)
        if len(vector) == 0:
            raise EmptyVectorError(vector_id)
        self.store.save_vector(vector_id, vector)

    def search(self, query: VectorLike, k: int) -> List[SearchResult]:
        """
        Exhaustive top-k cosine search over the whole store.

        Stored vectors whose dimension differs from the query are skipped, as
        are zero vectors and NaN scores. If nothing survives, the result is an
        empty list rather than an error.

        Args:
            query: Query vector
            k: Number of results; k <= 0 or k >= count returns everything

        Returns:
            Results sorted by score descending, each carrying a copy of its vector

        Raises:
            EmptyQueryError: query has zero length
            EmptyStoreError: the store holds no vectors
            BackendError: the store failed to list its vectors
        """
        query = VectorOps.to_numpy_array(query)
        if len(query) == 0:
            raise EmptyQueryError()

        vectors = self.store.get_all_vectors()
        if not vectors:
            raise EmptyStoreError()

        start_time = time.time()
        candidates = ((vector_id, vector, None, None) for vector_id, vector in vectors.items())
        results = self.top_k.rank(query, candidates, k, include_vectors=True)

        logger.debug("Ranked %d stored vectors in %.4fs; %d results",
                     len(vectors), time.time() - start_time, len(results))
        return results

    def score_batch(self, query: VectorLike, vectors: Sequence[VectorLike]) -> np.ndarray:
        """
        Cosine similarity of `query` against every row, via the batch executor.

        Rows must all have the query's length. A zero-norm row (or a zero
        query) scores NaN.

        Returns:
            float32 array of similarities, one per row
        """
        query = VectorOps.to_numpy_array(query)
        if len(query) == 0:
            raise EmptyQueryError()

        dots = self.executor.dot_batch(query, vectors)
        if len(dots) == 0:
            return dots

        rows = np.vstack([VectorOps.to_numpy_array(v) for v in vectors])
        denominators = VectorOps.norms(rows) * np.float32(self.dispatcher.norm(query))

        scores = np.full(len(dots), np.nan, dtype=VectorOps.DTYPE)
        nonzero = denominators != 0
        scores[nonzero] = dots[nonzero] / denominators[nonzero]
        return scores
