# embedvault/errors.py
"""
Exception hierarchy for embedvault.

Every error raised by the library derives from EmbedVaultError, so callers
can catch the whole family at a single boundary. Input validation errors
also derive from ValueError and lookup failures from KeyError, which keeps
them usable with ordinary Python error handling.
"""
from typing import Any, Dict, Optional


class EmbedVaultError(Exception):
    """Base exception for all embedvault errors.

    Attributes:
        context: Additional context for debugging.
    """

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None):
        self.context = context or {}
        super().__init__(message)


# Input validation

class EmptyInputError(EmbedVaultError, ValueError):
    """Raised when a vector, query or id is empty."""


class EmptyVectorError(EmptyInputError):
    def __init__(self, vector_id: Optional[str] = None):
        self.vector_id = vector_id
        message = "Vector cannot be empty"
        if vector_id is not None:
            message = f"Vector for '{vector_id}' cannot be empty"
        super().__init__(message, context={'id': vector_id})


class EmptyQueryError(EmptyInputError):
    def __init__(self):
        super().__init__("Query vector is empty")


class EmptyIdError(EmptyInputError):
    def __init__(self):
        super().__init__("Id cannot be empty")


class DimensionMismatchError(EmbedVaultError, ValueError):
    """Raised when two vector lengths disagree, or a store's fixed dimension is violated."""

    def __init__(self, expected: int, actual: int, *, vector_id: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        self.vector_id = vector_id
        message = f"Vector dimension mismatch: expected {expected}, got {actual}"
        if vector_id is not None:
            message = f"{message} (id '{vector_id}')"
        super().__init__(message, context={'expected': expected, 'actual': actual, 'id': vector_id})


class ZeroMagnitudeError(EmbedVaultError, ValueError):
    """Raised when cosine similarity is requested for a zero-length vector."""

    def __init__(self):
        super().__init__("Cosine similarity is undefined for a zero-magnitude vector")


# Storage

class NotFoundError(EmbedVaultError, KeyError):
    """Raised when a key is absent from the store."""

    def __init__(self, vector_id: str):
        self.vector_id = vector_id
        super().__init__(f"Vector not found: {vector_id}", context={'id': vector_id})

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class DecodeError(EmbedVaultError):
    """Raised when a stored record matches neither the current nor the legacy format."""

    def __init__(self, vector_id: Optional[str], reason: str):
        self.vector_id = vector_id
        self.reason = reason
        target = f"'{vector_id}'" if vector_id is not None else "record"
        super().__init__(f"Failed to decode {target}: {reason}",
                         context={'id': vector_id, 'reason': reason})


class EncodeError(EmbedVaultError, ValueError):
    """Raised when a record cannot be serialized (e.g. metadata is not JSON serializable)."""

    def __init__(self, vector_id: Optional[str], reason: str):
        self.vector_id = vector_id
        super().__init__(f"Failed to encode '{vector_id}': {reason}",
                         context={'id': vector_id, 'reason': reason})


class BackendError(EmbedVaultError):
    """Raised when the underlying storage engine fails. The engine error is chained as __cause__."""

    def __init__(self, operation: str, message: str, *, vector_id: Optional[str] = None):
        self.operation = operation
        self.vector_id = vector_id
        super().__init__(f"Storage backend failed during {operation}: {message}",
                         context={'operation': operation, 'id': vector_id})


class BulkImportError(EmbedVaultError):
    """Raised when a bulk import stops at a failing item. Earlier items stay written."""

    def __init__(self, vector_id: str, cause: Exception, imported: int):
        self.vector_id = vector_id
        self.imported = imported
        super().__init__(f"Failed to import vector {vector_id}: {cause}",
                         context={'id': vector_id, 'imported': imported,
                                  'cause_type': type(cause).__name__})


# Search

class EmptyStoreError(EmbedVaultError):
    def __init__(self):
        super().__init__("Vector store is empty")
