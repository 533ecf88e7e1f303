# embedvault/storage/record_format.py
"""
Binary encoding of stored vector records.

Current format (little-endian):

    Offset  Size   Field
    0       4      magic b"EVRC"
    4       2      format version (uint16)
    6       4      dimension (uint32)
    10      4      L2 norm (float32)
    14      4      metadata length in bytes (uint32, 0 = no metadata)
    18      4*dim  vector components (float32)
    ...     n      metadata as UTF-8 JSON

Legacy format: the bare vector, dim float32 values with no header, norm or
metadata. Legacy payloads are still readable; only the current format is
ever written.
"""
import json
import math
import struct
from typing import Any, Dict, NamedTuple, Optional, Union

import numpy as np

from embedvault.errors import DecodeError, EncodeError
from embedvault.types import VectorRecord

MAGIC = b"EVRC"
FORMAT_VERSION = 1
HEADER_FORMAT = "<4sHIfI"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 18 bytes
VECTOR_DTYPE = np.dtype("<f4")


class DecodedRecord(NamedTuple):
    record: VectorRecord
    is_legacy: bool


def compute_norm(vector: np.ndarray) -> float:
    """L2 norm accumulated in float32, as stored in the header."""
    squares = np.square(vector, dtype=np.float32)
    return float(np.float32(math.sqrt(float(squares.sum(dtype=np.float32)))))


def encode_record(record: VectorRecord) -> bytes:
    """Serialize a record in the current format."""
    vector = np.asarray(record.vector, dtype=VECTOR_DTYPE)

    meta_bytes = b""
    if record.metadata is not None:
        try:
            meta_bytes = json.dumps(record.metadata, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodeError(record.id, f"metadata is not JSON serializable: {e}") from e

    header = struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION, len(vector),
                         record.norm, len(meta_bytes))
    return header + vector.tobytes() + meta_bytes


def _decode_current(vector_id: str, payload: bytes) -> Union[VectorRecord, str]:
    """Current-format decode. Returns the record, or a reason string on mismatch."""
    if len(payload) < HEADER_SIZE:
        return f"payload of {len(payload)} bytes is shorter than the {HEADER_SIZE}-byte header"

    magic, version, dim, norm, meta_len = struct.unpack_from(HEADER_FORMAT, payload)
    if magic != MAGIC:
        return f"bad magic {magic!r}"
    if version > FORMAT_VERSION:
        return f"unsupported format version {version}"
    if dim == 0:
        return "zero-dimension vector"

    expected = HEADER_SIZE + dim * VECTOR_DTYPE.itemsize + meta_len
    if len(payload) != expected:
        return f"length {len(payload)} does not match header (expected {expected})"

    vector_end = HEADER_SIZE + dim * VECTOR_DTYPE.itemsize
    vector = np.frombuffer(payload, dtype=VECTOR_DTYPE, count=dim, offset=HEADER_SIZE)

    metadata: Optional[Dict[str, Any]] = None
    if meta_len:
        try:
            metadata = json.loads(payload[vector_end:].decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return f"corrupt metadata: {e}"
        if not isinstance(metadata, dict):
            return f"metadata is a {type(metadata).__name__}, not an object"

    return VectorRecord(
        id=vector_id,
        vector=vector.astype(np.float32),  # copy: frombuffer views are read-only
        norm=norm,
        metadata=metadata,
    )


def _decode_legacy(vector_id: str, payload: bytes) -> Union[VectorRecord, str]:
    """Legacy decode: bare float32 array. The norm is computed here."""
    if not payload:
        return "empty payload"
    if payload.startswith(MAGIC):
        # A damaged current-format record must not be reread as a bare vector
        return "payload carries the current-format magic"
    if len(payload) % VECTOR_DTYPE.itemsize:
        return f"length {len(payload)} is not a multiple of {VECTOR_DTYPE.itemsize}"

    vector = np.frombuffer(payload, dtype=VECTOR_DTYPE).astype(np.float32)
    return VectorRecord(id=vector_id, vector=vector, norm=compute_norm(vector), metadata=None)


def decode_record(vector_id: str, payload: bytes) -> DecodedRecord:
    """
    Decode a stored payload, trying the current format first, then the legacy one.

    Raises:
        DecodeError: if the payload matches neither format
    """
    current = _decode_current(vector_id, payload)
    if isinstance(current, VectorRecord):
        return DecodedRecord(current, is_legacy=False)

    legacy = _decode_legacy(vector_id, payload)
    if isinstance(legacy, VectorRecord):
        return DecodedRecord(legacy, is_legacy=True)

    raise DecodeError(vector_id, f"current format: {current}; legacy format: {legacy}")
