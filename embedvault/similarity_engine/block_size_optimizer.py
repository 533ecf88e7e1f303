# embedvault/similarity_engine/block_size_optimizer.py
import logging
import os
import threading
import time
from typing import Callable, List, Mapping, Optional, Tuple

import numpy as np

from config import (
    BLOCK_SIZE_CANDIDATES,
    BLOCK_SIZE_ENV_VAR,
    DEFAULT_BLOCK_SIZE,
    TUNE_ITERATIONS,
    TUNE_SAMPLE_DIM,
)
from .vector_math import VectorOps

logger = logging.getLogger(__name__)


class BlockSizeOptimizer:
    """Micro-benchmark that picks the block size for the blocked dot kernel.

    The result is computed once and cached; later calls return the cached
    value without benchmarking again. A positive integer in the override
    variable short-circuits the benchmark entirely.
    """

    CANDIDATES = BLOCK_SIZE_CANDIDATES
    SAMPLE_DIM = TUNE_SAMPLE_DIM
    ITERATIONS = TUNE_ITERATIONS

    def __init__(self,
                 kernel: Callable[[np.ndarray, np.ndarray, int], float] = VectorOps.dot_blocked,
                 environ: Optional[Mapping[str, str]] = None,
                 timer: Callable[[], float] = time.perf_counter,
                 seed: Optional[int] = None,
                 iterations: Optional[int] = None):
        """
        Initialize the optimizer.

        Args:
            kernel: Blocked kernel to benchmark, called as kernel(a, b, block_size)
            environ: Source of the override variable (default: os.environ)
            timer: Monotonic clock used to time each candidate
            seed: Seed for the benchmark vectors
            iterations: Kernel calls per candidate (default: ITERATIONS)
        """
        self.kernel = kernel
        self.environ = os.environ if environ is None else environ
        self.timer = timer
        self.seed = seed
        self.iterations = iterations or self.ITERATIONS

        self.best_size = DEFAULT_BLOCK_SIZE
        self.optimized = False
        self.results: List[Tuple[int, float]] = []
        self._lock = threading.Lock()

    def read_override(self) -> Optional[int]:
        """Return the override block size if it parses as a positive integer."""
        raw = self.environ.get(BLOCK_SIZE_ENV_VAR)
        if raw is None or not raw.strip():
            return None
        try:
            value = int(raw.strip())
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", BLOCK_SIZE_ENV_VAR, raw)
            return None
        if value <= 0:
            logger.warning("Ignoring %s=%r: block size must be positive", BLOCK_SIZE_ENV_VAR, raw)
            return None
        return value

    def optimize(self) -> int:
        """Benchmark every candidate and return the fastest one (first seen wins ties)."""
        rng = np.random.default_rng(self.seed)
        vec_a = rng.random(self.SAMPLE_DIM, dtype=np.float32)
        vec_b = rng.random(self.SAMPLE_DIM, dtype=np.float32)

        results = []
        best_size = self.CANDIDATES[0]
        best_time = float("inf")

        for size in self.CANDIDATES:
            start_time = self.timer()
            for _ in range(self.iterations):
                self.kernel(vec_a, vec_b, size)
            elapsed = self.timer() - start_time

            results.append((size, elapsed))
            logger.debug("Block size %4d: %.6fs for %d iterations", size, elapsed, self.iterations)

            if elapsed < best_time:
                best_time = elapsed
                best_size = size

        self.results = results
        return best_size

    def tuned_block_size(self) -> int:
        """Return the tuned block size, running the benchmark on first use only."""
        if self.optimized:
            return self.best_size

        with self._lock:
            if self.optimized:
                return self.best_size

            override = self.read_override()
            if override is not None:
                self.best_size = override
                logger.info("Block size %d taken from %s", override, BLOCK_SIZE_ENV_VAR)
            else:
                self.best_size = self.optimize()
                logger.info("Auto-tuned block size: %d", self.best_size)

            self.optimized = True
            return self.best_size

    def reset(self):
        """Forget the cached result so the next call tunes again."""
        with self._lock:
            self.optimized = False
            self.best_size = DEFAULT_BLOCK_SIZE
            self.results = []


_shared_optimizer = BlockSizeOptimizer()

def get_shared_optimizer() -> BlockSizeOptimizer:
    """Process-wide optimizer instance."""
    return _shared_optimizer

def tuned_block_size() -> int:
    """Process-wide tuned block size (benchmarked once per process)."""
    return _shared_optimizer.tuned_block_size()
