# embedvault/types.py
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np


@dataclass
class VectorRecord:
    """A stored vector with its precomputed norm and metadata."""

    id: str
    """Unique key of the record"""

    vector: np.ndarray
    """float32 vector"""

    norm: float
    """L2 norm of `vector`, computed at write time"""

    metadata: Optional[Dict[str, Any]] = None
    """Opaque metadata, stored and returned unchanged"""

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass
class SearchResult:
    """A ranked match from a similarity search."""

    id: str
    """Identifier of the matching record"""

    score: float
    """Cosine similarity with the query, in [-1, 1]"""

    vector: Optional[np.ndarray] = None
    """Copy of the matching vector, when the search path provides it"""

    metadata: Optional[Dict[str, Any]] = None
    """Metadata of the matching record, when the store keeps any"""
