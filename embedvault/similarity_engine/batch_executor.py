# embedvault/similarity_engine/batch_executor.py
"""
One query against many rows.

dot_batch returns raw dot products, not similarities; scaling by norms is
up to the caller. Small workloads run serially. Large ones fan out to a
fixed pool of worker threads that claim row indices from a shared queue
and write into disjoint slots of a pre-sized output array.
"""
import logging
import queue
import threading
from typing import List, Optional, Sequence

import numpy as np

from embedvault.errors import DimensionMismatchError
from .kernel_dispatch import KernelDispatcher, default_dispatcher
from .vector_math import VectorLike, VectorOps

logger = logging.getLogger(__name__)

MODES = ("auto", "serial", "parallel")


class BatchExecutor:
    """Serial or parallel evaluation of a query against a batch of rows."""

    def __init__(self, dispatcher: Optional[KernelDispatcher] = None):
        self.dispatcher = dispatcher or default_dispatcher()

    @property
    def config(self):
        return self.dispatcher.config

    def should_parallelize(self, dim: int, n: int, workers: int) -> bool:
        """Routing decision: parallel only for long vectors and enough rows per worker."""
        if dim < self.config.min_dim_for_parallel:
            return False
        if n < workers * self.config.min_batch_factor:
            return False
        return True

    def dot_batch(self, query: VectorLike, rows: Sequence[VectorLike], mode: str = "auto") -> np.ndarray:
        """
        Compute query . rows[i] for every row.

        Args:
            query: Query vector
            rows: Rows to score; each must have the query's length
            mode: 'auto' picks the path, 'serial' / 'parallel' force one

        Returns:
            float32 array where result[i] is the dot product with rows[i]
        """
        if mode not in MODES:
            raise ValueError(f"Invalid mode: {mode}")

        n = len(rows)
        if n == 0:
            return np.empty(0, dtype=VectorOps.DTYPE)

        query = VectorOps.to_numpy_array(query)
        matrix = self._prepare_rows(query, rows)
        workers = self.config.effective_workers()

        if mode == "serial" or (mode == "auto" and not self.should_parallelize(len(query), n, workers)):
            return self._dot_batch_serial(query, matrix)

        logger.debug("Parallel dot batch: %d rows x %d dims on %d workers", n, len(query), workers)
        return self._dot_batch_parallel(query, matrix, workers)

    def _prepare_rows(self, query: np.ndarray, rows: Sequence[VectorLike]) -> List[np.ndarray]:
        matrix = []
        for i, row in enumerate(rows):
            row = VectorOps.to_numpy_array(row)
            if len(row) != len(query):
                raise DimensionMismatchError(len(query), len(row), vector_id=f"row {i}")
            matrix.append(row)
        return matrix

    def _dot_batch_serial(self, query: np.ndarray, rows: List[np.ndarray]) -> np.ndarray:
        results = np.empty(len(rows), dtype=VectorOps.DTYPE)
        for i, row in enumerate(rows):
            results[i] = self.dispatcher.dot_blocked(query, row)
        return results

    def _dot_batch_parallel(self, query: np.ndarray, rows: List[np.ndarray], workers: int) -> np.ndarray:
        results = np.empty(len(rows), dtype=VectorOps.DTYPE)
        work = queue.SimpleQueue()
        for i in range(len(rows)):
            work.put(i)

        errors = []
        block_size = self.dispatcher.block_size

        def worker():
            while True:
                try:
                    i = work.get_nowait()
                except queue.Empty:
                    return
                try:
                    results[i] = VectorOps.dot_blocked(query, rows[i], block_size)
                except Exception as e:
                    errors.append(e)
                    return

        threads = [threading.Thread(target=worker, name=f"dot-batch-{w}", daemon=True)
                   for w in range(min(workers, len(rows)))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        if errors:
            raise errors[0]
        return results


def dot_batch(query: VectorLike, rows: Sequence[VectorLike]) -> np.ndarray:
    """dot_batch on the process-wide dispatcher."""
    return BatchExecutor().dot_batch(query, rows)
