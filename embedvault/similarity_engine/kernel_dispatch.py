# embedvault/similarity_engine/kernel_dispatch.py
"""
Selection of the dot product kernel for the running CPU.

A dispatcher binds its kernel lazily, exactly once, on the first call that
needs it: it first settles the block size (auto-tuned unless disabled),
then probes the CPU and picks one of two paths:

- accelerated: CPUs with AVX2/NEON always use the blocked kernel
  (placeholder for real vector instructions)
- adaptive: blocked kernel above GENERIC_KERNEL_MAX_DIM elements, scalar loop otherwise
"""
import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from config import (
    DEFAULT_BLOCK_SIZE,
    GENERIC_KERNEL_MAX_DIM,
    MIN_BATCH_FACTOR,
    MIN_DIM_FOR_PARALLEL,
    WORKER_COUNT,
)
from embedvault.errors import DimensionMismatchError, ZeroMagnitudeError
from embedvault.utilities.cpu_utils import available_workers, detect_vector_extension
from .block_size_optimizer import BlockSizeOptimizer, get_shared_optimizer
from .vector_math import VectorLike, VectorOps

logger = logging.getLogger(__name__)

KERNEL_ACCELERATED = "accelerated"
KERNEL_ADAPTIVE = "adaptive"


@dataclass
class KernelConfig:
    """Tuning parameters shared by single-pair and batch dot products."""
    block_size: int = DEFAULT_BLOCK_SIZE
    worker_count: int = WORKER_COUNT  # 0 = use all execution units
    min_dim_for_parallel: int = MIN_DIM_FOR_PARALLEL
    min_batch_factor: int = MIN_BATCH_FACTOR
    auto_tune: bool = True

    def effective_block_size(self) -> int:
        return self.block_size if self.block_size > 0 else DEFAULT_BLOCK_SIZE

    def effective_workers(self) -> int:
        return self.worker_count if self.worker_count > 0 else available_workers()


class KernelDispatcher:
    """Binds and runs the dot product kernel for this process."""

    def __init__(self,
                 config: Optional[KernelConfig] = None,
                 optimizer: Optional[BlockSizeOptimizer] = None,
                 capability_probe: Callable[[], Optional[str]] = detect_vector_extension):
        self.config = config or KernelConfig()
        self.optimizer = optimizer or get_shared_optimizer()
        self.capability_probe = capability_probe

        self._impl: Optional[Callable[[np.ndarray, np.ndarray], float]] = None
        self._kernel_name: Optional[str] = None
        self._lock = threading.Lock()

    def _ensure_initialized(self):
        if self._impl is not None:
            return

        with self._lock:
            if self._impl is not None:
                return

            if self.config.auto_tune:
                self.config.block_size = self.optimizer.tuned_block_size()

            extension = self.capability_probe()
            if extension is not None:
                name, impl = KERNEL_ACCELERATED, self._dot_accelerated
            else:
                name, impl = KERNEL_ADAPTIVE, self._dot_adaptive

            logger.info("Dot kernel: %s (vector extension: %s, block size: %d)",
                        name, extension or "none", self.config.effective_block_size())
            self._kernel_name = name
            # Assigned last: readers skip the lock once this is set
            self._impl = impl

    def _dot_accelerated(self, a: np.ndarray, b: np.ndarray) -> float:
        return VectorOps.dot_blocked(a, b, self.config.effective_block_size())

    def _dot_adaptive(self, a: np.ndarray, b: np.ndarray) -> float:
        if len(a) > GENERIC_KERNEL_MAX_DIM:
            return VectorOps.dot_blocked(a, b, self.config.effective_block_size())
        return VectorOps.dot_generic(a, b)

    @property
    def kernel_name(self) -> str:
        self._ensure_initialized()
        return self._kernel_name

    @property
    def block_size(self) -> int:
        self._ensure_initialized()
        return self.config.effective_block_size()

    def dot(self, a: VectorLike, b: VectorLike) -> float:
        """Dot product of two equal-length vectors."""
        a = VectorOps.to_numpy_array(a)
        b = VectorOps.to_numpy_array(b)
        if len(a) != len(b):
            raise DimensionMismatchError(len(a), len(b))
        self._ensure_initialized()
        return self._impl(a, b)

    def dot_blocked(self, a: np.ndarray, b: np.ndarray) -> float:
        """Blocked kernel with the tuned block size, no dispatch."""
        self._ensure_initialized()
        return VectorOps.dot_blocked(a, b, self.config.effective_block_size())

    def norm(self, vector: VectorLike) -> float:
        vector = VectorOps.to_numpy_array(vector)
        self._ensure_initialized()
        return float(np.float32(math.sqrt(self._impl(vector, vector))))

    def cosine(self, a: VectorLike, b: VectorLike) -> float:
        """Cosine similarity; raises ZeroMagnitudeError if either norm is zero."""
        a = VectorOps.to_numpy_array(a)
        b = VectorOps.to_numpy_array(b)
        if len(a) != len(b):
            raise DimensionMismatchError(len(a), len(b))
        norm_a = self.norm(a)
        norm_b = self.norm(b)
        if norm_a == 0 or norm_b == 0:
            raise ZeroMagnitudeError()
        return self.dot(a, b) / (norm_a * norm_b)


_default_dispatcher: Optional[KernelDispatcher] = None
_default_lock = threading.Lock()

def default_dispatcher() -> KernelDispatcher:
    """Process-wide dispatcher, created on first use."""
    global _default_dispatcher
    if _default_dispatcher is None:
        with _default_lock:
            if _default_dispatcher is None:
                _default_dispatcher = KernelDispatcher()
    return _default_dispatcher

def dot(a: VectorLike, b: VectorLike) -> float:
    return default_dispatcher().dot(a, b)

def norm(vector: VectorLike) -> float:
    return default_dispatcher().norm(vector)

def cosine(a: VectorLike, b: VectorLike) -> float:
    return default_dispatcher().cosine(a, b)
