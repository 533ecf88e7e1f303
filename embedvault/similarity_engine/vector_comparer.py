# embedvault/similarity_engine/vector_comparer.py
"""
Exhaustive top-k similarity search.

Shared by the engine and by stores that scan their own records, so every
search path applies the same filtering and ordering rules:

- items whose dimension differs from the query are skipped
- items with a zero norm (cosine undefined) or a NaN score are skipped
- results are sorted by score descending; order among equal scores is unspecified
- k <= 0 or k >= count returns every surviving item
"""
import heapq
import itertools
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from .kernel_dispatch import KernelDispatcher, default_dispatcher
from .vector_math import VectorLike, VectorOps
from embedvault.types import SearchResult

# (id, vector, precomputed norm or None, metadata or None)
Candidate = Tuple[str, np.ndarray, Optional[float], Optional[Dict[str, Any]]]


class TopKSearch:
    """Brute-force cosine ranking with a bounded heap for small k."""

    def __init__(self, dispatcher: Optional[KernelDispatcher] = None):
        self.dispatcher = dispatcher or default_dispatcher()

    def score(self, query: np.ndarray, query_norm: float,
              vector: np.ndarray, vector_norm: Optional[float] = None) -> Optional[float]:
        """
        Cosine similarity of one candidate, or None if it must be skipped.

        Args:
            query: Query vector (float32)
            query_norm: Precomputed norm of the query
            vector: Candidate vector
            vector_norm: Precomputed candidate norm; computed when None

        Returns:
            Score, or None for a dimension mismatch, a zero norm or a NaN score
        """
        if len(vector) != len(query):
            return None
        if vector_norm is None:
            vector_norm = self.dispatcher.norm(vector)
        if query_norm == 0 or vector_norm == 0:
            return None

        score = self.dispatcher.dot(query, vector) / (query_norm * vector_norm)
        if math.isnan(score):
            return None
        return float(np.float32(score))

    def rank(self, query: VectorLike, candidates: Iterable[Candidate], k: int,
             include_vectors: bool = False) -> List[SearchResult]:
        """Score every candidate and return the top k, best first."""
        query = VectorOps.to_numpy_array(query)
        query_norm = self.dispatcher.norm(query)

        scored = []
        for item_id, vector, vector_norm, metadata in candidates:
            score = self.score(query, query_norm, vector, vector_norm)
            if score is None:
                continue
            scored.append(SearchResult(
                id=item_id,
                score=score,
                vector=vector.copy() if include_vectors else None,
                metadata=metadata,
            ))

        return self.select_top_k(scored, k)

    @staticmethod
    def select_top_k(candidates: List[SearchResult], k: int) -> List[SearchResult]:
        """
        Keep the k best candidates, sorted by score descending.

        A full sort is used when every candidate is returned. Otherwise a
        size-k min-heap is kept: a new candidate replaces the heap minimum
        only when it scores strictly higher.
        """
        n = len(candidates)
        if k <= 0 or k >= n:
            return sorted(candidates, key=lambda r: r.score, reverse=True)

        # Counter breaks ties so results themselves are never compared
        counter = itertools.count()
        heap = []
        for result in candidates:
            if len(heap) < k:
                heapq.heappush(heap, (result.score, next(counter), result))
            elif result.score > heap[0][0]:
                heapq.heapreplace(heap, (result.score, next(counter), result))

        heap.sort(key=lambda entry: entry[0], reverse=True)
        return [result for _, _, result in heap]
