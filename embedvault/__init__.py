# embedvault/__init__.py
"""
embedvault: an embedded vector store with exhaustive cosine similarity search.
"""
from config import VERSION
from .errors import (
    EmbedVaultError,
    EmptyInputError,
    EmptyVectorError,
    EmptyQueryError,
    EmptyIdError,
    DimensionMismatchError,
    ZeroMagnitudeError,
    NotFoundError,
    DecodeError,
    EncodeError,
    BackendError,
    BulkImportError,
    EmptyStoreError,
)
from .types import VectorRecord, SearchResult
from .similarity_engine import (
    KernelConfig,
    KernelDispatcher,
    SimilarityEngine,
    cosine,
    dot,
    dot_batch,
    norm,
    tuned_block_size,
)
from .storage import MemoryStore, SQLiteVectorStore, VectorStore, RichVectorStore

__version__ = VERSION
