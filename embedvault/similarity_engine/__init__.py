# embedvault/similarity_engine/__init__.py
"""
Similarity Engine Package
"""
from .vector_math import VectorOps
from .block_size_optimizer import BlockSizeOptimizer, tuned_block_size
from .kernel_dispatch import KernelConfig, KernelDispatcher, default_dispatcher, dot, norm, cosine
from .batch_executor import BatchExecutor, dot_batch
from .vector_comparer import TopKSearch
from .orchestrator import SimilarityEngine

__all__ = [
    'VectorOps',
    'BlockSizeOptimizer',
    'tuned_block_size',
    'KernelConfig',
    'KernelDispatcher',
    'default_dispatcher',
    'dot',
    'norm',
    'cosine',
    'BatchExecutor',
    'dot_batch',
    'TopKSearch',
    'SimilarityEngine'
]
