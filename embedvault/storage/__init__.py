# embedvault/storage/__init__.py
"""
Storage Package
"""
from .base import VectorStore, RichVectorStore, import_vectors
from .memory_store import MemoryStore
from .sqlite_store import SQLiteVectorStore
from .record_format import encode_record, decode_record

__all__ = [
    'VectorStore',
    'RichVectorStore',
    'import_vectors',
    'MemoryStore',
    'SQLiteVectorStore',
    'encode_record',
    'decode_record'
]
