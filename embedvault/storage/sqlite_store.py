# embedvault/storage/sqlite_store.py
"""
Persistent vector store on top of SQLite.

SQLite is used as a transactional key-value engine: a single table maps
each id to an encoded record, every write runs in its own transaction,
and scans iterate in key order. Records are read defensively: a payload
in the legacy bare-vector format is decoded, given a computed norm and
rewritten in the current format on a best-effort basis.
"""
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

import numpy as np

from embedvault.errors import (
    BackendError,
    DecodeError,
    EmptyIdError,
    EmptyQueryError,
    EmptyVectorError,
    EncodeError,
    NotFoundError,
)
from embedvault.similarity_engine.kernel_dispatch import KernelDispatcher
from embedvault.similarity_engine.vector_comparer import TopKSearch
from embedvault.similarity_engine.vector_math import VectorLike, VectorOps
from embedvault.types import SearchResult, VectorRecord
from .base import RichVectorStore, VectorStore, import_vectors as bulk_import
from .record_format import compute_norm, decode_record, encode_record

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


class SQLiteVectorStore(VectorStore, RichVectorStore):
    """Durable store implementing both the minimal and the rich capability."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS vectors (
            id TEXT PRIMARY KEY,
            payload BLOB NOT NULL
        ) WITHOUT ROWID
    """

    def __init__(self, db_path: Union[str, Path], dispatcher: Optional[KernelDispatcher] = None):
        """
        Open (or create) the store.

        Args:
            db_path: Path to the SQLite database file, or ':memory:'
            dispatcher: Kernel dispatcher used by search (default: process-wide)
        """
        self.db_path = db_path if db_path == IN_MEMORY else Path(db_path)
        self._lock = threading.RLock()
        self._search = TopKSearch(dispatcher)

        try:
            if self.db_path != IN_MEMORY:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            if self.db_path != IN_MEMORY:
                self.conn.execute("PRAGMA journal_mode=WAL")
            with self.conn:
                self.conn.execute(self.SCHEMA)
        except (OSError, sqlite3.Error) as e:
            raise BackendError("open", str(e)) from e

        logger.debug("Opened vector store at %s", self.db_path)

    # Engine access

    def _connection(self, operation: str) -> sqlite3.Connection:
        if self.conn is None:
            raise BackendError(operation, "store is closed")
        return self.conn

    def _write(self, operation: str, vector_id: str, payload: bytes):
        with self._lock:
            conn = self._connection(operation)
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO vectors (id, payload) VALUES (?, ?)",
                        (vector_id, payload)
                    )
            except sqlite3.Error as e:
                raise BackendError(operation, str(e), vector_id=vector_id) from e

    def _fetch(self, operation: str, vector_id: str) -> bytes:
        with self._lock:
            conn = self._connection(operation)
            try:
                row = conn.execute("SELECT payload FROM vectors WHERE id = ?", (vector_id,)).fetchone()
            except sqlite3.Error as e:
                raise BackendError(operation, str(e), vector_id=vector_id) from e
        if row is None:
            raise NotFoundError(vector_id)
        return row[0]

    def _scan(self, operation: str) -> Iterator[VectorRecord]:
        """
        Yield every decodable record in key order.

        Undecodable records are logged and skipped. Legacy records are
        migrated after the scan has finished.
        """
        legacy = []
        with self._lock:
            conn = self._connection(operation)
            try:
                cursor = conn.execute("SELECT id, payload FROM vectors ORDER BY id")
                for vector_id, payload in cursor:
                    try:
                        decoded = decode_record(vector_id, payload)
                    except DecodeError as e:
                        logger.warning("Skipping record during %s: %s", operation, e)
                        continue
                    if decoded.is_legacy:
                        legacy.append(decoded.record)
                    yield decoded.record
            except sqlite3.Error as e:
                raise BackendError(operation, str(e)) from e

        for record in legacy:
            self._migrate(record)

    def _migrate(self, record: VectorRecord):
        """Rewrite a legacy record in the current format. Failures are logged, not raised."""
        try:
            self._write("migrate", record.id, encode_record(record))
        except (BackendError, EncodeError) as e:
            logger.warning("Could not migrate legacy record %s: %s", record.id, e)
        else:
            logger.debug("Migrated legacy record %s", record.id)

    def _read(self, operation: str, vector_id: str) -> VectorRecord:
        decoded = decode_record(vector_id, self._fetch(operation, vector_id))
        if decoded.is_legacy:
            self._migrate(decoded.record)
        return decoded.record

    @staticmethod
    def _prepare(vector_id: str, vector: VectorLike) -> np.ndarray:
        if not vector_id:
            raise EmptyIdError()
        vector = VectorOps.to_numpy_array(vector, copy=True)
        if len(vector) == 0:
            raise EmptyVectorError(vector_id)
        return vector

    # Minimal capability

    def save_vector(self, vector_id: str, vector: VectorLike) -> None:
        self.add(vector_id, vector)

    def get_vector(self, vector_id: str) -> np.ndarray:
        return self._read("get_vector", vector_id).vector

    def get_all_vectors(self) -> Dict[str, np.ndarray]:
        return {record.id: record.vector for record in self._scan("get_all_vectors")}

    # Rich capability

    def add(self, vector_id: str, vector: VectorLike,
            metadata: Optional[Dict[str, Any]] = None) -> float:
        vector = self._prepare(vector_id, vector)
        record = VectorRecord(id=vector_id, vector=vector, norm=compute_norm(vector), metadata=metadata)
        self._write("add", vector_id, encode_record(record))
        logger.debug("Stored %s (%d dims, norm %.6f)", vector_id, len(vector), record.norm)
        return record.norm

    def get(self, vector_id: str) -> VectorRecord:
        return self._read("get", vector_id)

    def search(self, query: VectorLike, k: int) -> List[SearchResult]:
        """
        Top-k cosine search over every stored record, using the stored norms.

        Records of another dimension, zero-norm records and NaN scores are
        skipped. k <= 0 or k >= count returns everything, best first.
        """
        query = VectorOps.to_numpy_array(query)
        if len(query) == 0:
            raise EmptyQueryError()

        candidates = ((record.id, record.vector, record.norm, record.metadata)
                      for record in self._scan("search"))
        return self._search.rank(query, candidates, k)

    # Bulk operations

    def import_vectors(self, vectors: Mapping[str, VectorLike],
                       progress: Optional[Callable[[int], None]] = None) -> int:
        """Save every vector in `vectors`; see storage.base.import_vectors."""
        return bulk_import(self, vectors, progress)

    def export_vectors(self) -> Dict[str, np.ndarray]:
        return self.get_all_vectors()

    def __len__(self):
        with self._lock:
            conn = self._connection("count")
            try:
                return conn.execute("SELECT COUNT(*) FROM vectors").fetchone()[0]
            except sqlite3.Error as e:
                raise BackendError("count", str(e)) from e

    def close(self) -> None:
        with self._lock:
            if self.conn is None:
                return
            try:
                self.conn.close()
            except sqlite3.Error as e:
                raise BackendError("close", str(e)) from e
            finally:
                self.conn = None
