"""Checksum computation and canonical value rendering.

Provides:
- serialize_value: canonical string form of a single column value
- compute_checksum: SHA-1 hex digest of a byte serialization
- ChecksumWriter: incremental digest for streamed large-object content

Checksums are 160-bit digests rendered as 40 lowercase hex characters.
"""

import hashlib
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Iterable

from dbfeed.core.exceptions import RowSerializationError

CHECKSUM_LENGTH = 40


def serialize_value(value: Any, column: str = "") -> str:
    """Serialize a single column value to its canonical string representation."""
    if value is None:
        return ""

    if isinstance(value, bool):
        return str(value).lower()

    if isinstance(value, (int, float, Decimal)):
        return str(value)

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    if isinstance(value, str):
        return value

    raise RowSerializationError(
        f"Unsupported value type {type(value).__name__} in column '{column}'",
        column=column,
    )


def compute_checksum(data: bytes) -> str:
    """Return the SHA-1 hex digest of the given bytes."""
    return hashlib.sha1(data).hexdigest()


def compute_text_checksum(text: str) -> str:
    """Checksum of a text serialization, encoded as UTF-8."""
    return compute_checksum(text.encode("utf-8"))


class ChecksumWriter:
    """Incremental SHA-1 over chunks, counting the bytes seen."""

    def __init__(self):
        self._digest = hashlib.sha1()
        self.size = 0

    def update(self, chunk: bytes) -> None:
        self._digest.update(chunk)
        self.size += len(chunk)

    def update_all(self, chunks: Iterable[bytes]) -> None:
        for chunk in chunks:
            self.update(chunk)

    def hexdigest(self) -> str:
        return self._digest.hexdigest()
