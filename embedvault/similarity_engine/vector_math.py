# embedvault/similarity_engine/vector_math.py
"""
Vector math kernels for similarity calculations.

Two dot product kernels live here: a plain scalar loop and a blocked kernel
that walks the vectors in contiguous blocks and accumulates eight products
at a time inside each block. Both return the same value up to
floating-point summation order. Kernel selection lives in kernel_dispatch.
"""
import math
from typing import Sequence, Union

import numpy as np

from config import DEFAULT_BLOCK_SIZE

VectorLike = Union[np.ndarray, Sequence[float]]

UNROLL = 8


class VectorOps:
    """Mathematical operations on float32 vectors."""

    DTYPE = np.float32

    @staticmethod
    def to_numpy_array(vector: VectorLike, copy: bool = False) -> np.ndarray:
        """Convert a sequence of floats to a 1-D float32 array."""
        array = np.array(vector, dtype=VectorOps.DTYPE, copy=True) if copy \
            else np.asarray(vector, dtype=VectorOps.DTYPE)
        if array.ndim != 1:
            raise ValueError(f"Expected a 1-D vector, got shape {array.shape}")
        return array

    @staticmethod
    def dot_generic(a: np.ndarray, b: np.ndarray) -> float:
        """Scalar dot product: sum(a[i] * b[i])."""
        total = 0.0
        for x, y in zip(a.tolist(), b.tolist()):
            total += x * y
        return float(np.float32(total))

    @staticmethod
    def dot_blocked(a: np.ndarray, b: np.ndarray, block_size: int = DEFAULT_BLOCK_SIZE) -> float:
        """
        Blocked dot product.

        Walks the vectors in blocks of `block_size` elements. Inside each
        block, products are summed eight lanes at a time; elements left over
        after the last full group of eight go through a scalar tail loop.

        Args:
            a: First vector (float32)
            b: Second vector, same length as `a`
            block_size: Elements per block; values <= 0 fall back to DEFAULT_BLOCK_SIZE

        Returns:
            Dot product as a float32-precision value
        """
        if block_size <= 0:
            block_size = DEFAULT_BLOCK_SIZE

        n = len(a)
        if n == 0:
            return 0.0

        total = np.float32(0.0)
        for start in range(0, n, block_size):
            end = min(start + block_size, n)
            unrolled_end = start + ((end - start) // UNROLL) * UNROLL

            if unrolled_end > start:
                lanes = a[start:unrolled_end].reshape(-1, UNROLL) * b[start:unrolled_end].reshape(-1, UNROLL)
                total += lanes.sum(axis=1, dtype=np.float32).sum(dtype=np.float32)

            # Tail
            for j in range(unrolled_end, end):
                total += a[j] * b[j]

        return float(total)

    @staticmethod
    def norm(vector: np.ndarray) -> float:
        """L2 norm: sqrt(sum(v_i^2))."""
        return float(np.float32(math.sqrt(VectorOps.dot_generic(vector, vector))))

    @staticmethod
    def norms(rows: np.ndarray) -> np.ndarray:
        """Row-wise L2 norms of a 2-D float32 matrix."""
        return np.sqrt(np.einsum('ij,ij->i', rows, rows, dtype=np.float32))
