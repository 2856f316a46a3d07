"""Large-object (BLOB/CLOB) acquisition.

A LOB column value can be:
- bytes / bytearray / memoryview: BLOB data already read by the driver
- str: CLOB data already read by the driver
- a LobLocator: anything with ``open()`` returning a binary stream; it is
  read once for the checksum and opened again when the document is built
- a one-shot stream (has ``read()``): tied to the source cursor, so it is
  drained into a spooled temporary file while computing the checksum

Every stream is closed on every exit path, including checksum failures.
A spooled body is owned by its LobContent; whoever ends up holding the
content (the snapshot pass for unchanged rows, the caller after delivery)
releases it with ``close()``.
"""

import io
import logging
import tempfile
from contextlib import closing, contextmanager
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, ContextManager, Iterator, Optional, Protocol

from dbfeed.core.config import settings
from dbfeed.core.exceptions import ContentAcquisitionError, RowSerializationError
from dbfeed.core.hashing import ChecksumWriter

logger = logging.getLogger(__name__)

SNIFF_LENGTH = 512


class LobLocator(Protocol):
    """A large object that can be opened again later, e.g. by document ID."""

    def open(self) -> BinaryIO:
        ...


class LobContent:
    """Re-openable large-object body handed to the indexing pipeline."""

    def __init__(
        self,
        opener: Callable[[], ContextManager[BinaryIO]],
        size: int,
        resource: Optional[BinaryIO] = None,
    ):
        self._opener = opener
        self._resource = resource
        self._closed = False
        self.size = size

    @classmethod
    def from_bytes(cls, data: bytes) -> "LobContent":
        @contextmanager
        def opener():
            with io.BytesIO(data) as stream:
                yield stream
        return cls(opener, len(data))

    @classmethod
    def from_locator(cls, locator: LobLocator, size: int) -> "LobContent":
        @contextmanager
        def opener():
            with closing(locator.open()) as stream:
                yield stream
        return cls(opener, size)

    @classmethod
    def from_spool(cls, spool: BinaryIO, size: int) -> "LobContent":
        @contextmanager
        def opener():
            spool.seek(0)
            yield spool
        return cls(opener, size, resource=spool)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the spooled body, if any. Later reads fail."""
        if self._closed:
            return
        self._closed = True
        if self._resource is not None:
            self._resource.close()
            self._resource = None

    def __enter__(self) -> "LobContent":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self) -> ContextManager[BinaryIO]:
        if self._closed:
            raise ValueError("Large object content has been closed")
        return self._opener()

    def iter_chunks(self, chunk_size: Optional[int] = None) -> Iterator[bytes]:
        chunk_size = chunk_size or settings.lob_read_chunk_size
        with self.open() as stream:
            while True:
                chunk = stream.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def read(self) -> bytes:
        return b"".join(self.iter_chunks())


@dataclass
class AcquiredLob:
    content: LobContent
    size: int
    head: bytes


def _as_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


def _drain(stream: Any, writer: ChecksumWriter, sink: Optional[BinaryIO] = None) -> bytes:
    """Feed a stream into the checksum (and optional sink); return its head."""
    head = b""
    while True:
        chunk = stream.read(settings.lob_read_chunk_size)
        if not chunk:
            break
        data = _as_bytes(chunk)
        writer.update(data)
        if sink is not None:
            sink.write(data)
        if len(head) < SNIFF_LENGTH:
            head += data[:SNIFF_LENGTH - len(head)]
    return head


def acquire_lob(value: Any, writer: ChecksumWriter, column: str, doc_id: str) -> AcquiredLob:
    """Read a LOB column value into the checksum and return a re-openable body."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        writer.update(data)
        return AcquiredLob(LobContent.from_bytes(data), len(data), data[:SNIFF_LENGTH])

    if isinstance(value, str):
        data = value.encode("utf-8")
        writer.update(data)
        return AcquiredLob(LobContent.from_bytes(data), len(data), data[:SNIFF_LENGTH])

    if callable(getattr(value, "open", None)):
        start = writer.size
        try:
            with closing(value.open()) as stream:
                head = _drain(stream, writer)
        except Exception as e:
            raise ContentAcquisitionError(
                f"Failed to read large object in column '{column}': {e}",
                column=column, doc_id=doc_id,
            ) from e
        size = writer.size - start
        return AcquiredLob(LobContent.from_locator(value, size), size, head)

    if callable(getattr(value, "read", None)):
        start = writer.size
        spool = tempfile.SpooledTemporaryFile(max_size=settings.lob_spool_threshold)
        try:
            with closing(value):
                head = _drain(value, writer, sink=spool)
        except Exception as e:
            spool.close()
            raise ContentAcquisitionError(
                f"Failed to read large object stream in column '{column}': {e}",
                column=column, doc_id=doc_id,
            ) from e
        size = writer.size - start
        logger.debug(f"Spooled {size} bytes of column '{column}' for {doc_id}")
        return AcquiredLob(LobContent.from_spool(spool, size), size, head)

    raise RowSerializationError(
        f"Unsupported large object type {type(value).__name__} in column '{column}'",
        column=column, doc_id=doc_id,
    )
