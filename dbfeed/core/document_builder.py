"""Two-phase document construction: snapshot first, handle on change.

build_snapshot turns a row into a Snapshot (document ID + checksum) that a
diffing engine compares against the previous pass. The Snapshot carries a
DocumentHolder, and build_handle only accepts that holder, so a Handle can
never be requested for a row that has not been snapshotted.

The content strategies (metadata, URL, LOB) implement the DocumentBuilder
protocol; the sequencing lives here as plain functions.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol, Union

from dbfeed.core.config import settings
from dbfeed.core.connector_spec import ConnectorSpec
from dbfeed.core.doc_id import generate_doc_id
from dbfeed.core.documents import Content, ContentHolder, IndexDocument
from dbfeed.core.exceptions import DocumentBuildError, SnapshotEncodingError
from dbfeed.core.hashing import compute_text_checksum, serialize_value
from dbfeed.core.lob import LobContent
from dbfeed.core.models import (
    PROPNAME_DISPLAYURL,
    PROPNAME_DOCID,
    PROPNAME_LASTMODIFIED,
    PROPNAME_MIMETYPE,
    ROW_CHECKSUM,
    ExtMetadataType,
)
from dbfeed.core.row_serializer import RowSerializer, default_serializer

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


@dataclass(frozen=True)
class TraversalContext:
    """Limits imposed by the indexing pipeline on delivered content."""
    max_document_size: int = settings.max_document_size
    supported_mime_types: Optional[frozenset[str]] = None

    def supports_mime_type(self, mime_type: str) -> bool:
        if self.supported_mime_types is None:
            return True
        return mime_type in self.supported_mime_types


@dataclass(frozen=True)
class BuildContext:
    """Configuration and helpers shared by every content strategy."""
    spec: ConnectorSpec
    serializer: RowSerializer = default_serializer
    display_url_scheme: str = settings.display_url_scheme

    @property
    def connector_name(self) -> str:
        return self.spec.connector_name

    def serialize_row(self, row: Row, primary_key: tuple[str, ...]) -> str:
        """Canonical text of the row, without skipped, LOB and last-modified columns."""
        return self.serializer(
            self.connector_name, row, primary_key, self.spec.metadata_skip_columns(row.keys())
        )

    def row_checksum(self, row: Row, primary_key: tuple[str, ...]) -> str:
        return compute_text_checksum(self.serialize_row(row, primary_key))

    def display_url(self, doc_id: str) -> str:
        return f"{self.display_url_scheme}://{self.connector_name}.localhost/{doc_id}"

    def metadata_properties(self, row: Row) -> dict[str, str]:
        """Every non-skipped, non-null column value, stringified."""
        skipped = self.spec.metadata_skip_columns(row.keys())
        properties = {}
        for column, value in row.items():
            if column in skipped:
                logger.debug(f"Skipping metadata indexing of column {column}")
                continue
            if value is not None:
                properties[column] = serialize_value(value, column)
        return properties

    def column_value(self, row: Row, name: Optional[str]) -> Any:
        """Value of a configured column, matched case-insensitively; None if absent."""
        column = self.spec.resolve_column(row.keys(), name)
        if column is None:
            return None
        return row[column]

    def last_modified(self, row: Row) -> Optional[str]:
        value = self.column_value(row, self.spec.last_modified_column)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        return None

    def new_document(
        self,
        holder: "DocumentHolder",
        properties: dict[str, str],
        mime_type: Optional[str] = None,
        display_url: Optional[str] = None,
        content: Content = None,
    ) -> IndexDocument:
        """Assemble a document with the properties every strategy sets."""
        properties = dict(properties)
        properties[PROPNAME_DOCID] = holder.doc_id
        properties[PROPNAME_DISPLAYURL] = display_url or self.display_url(holder.doc_id)
        if mime_type:
            properties[PROPNAME_MIMETYPE] = mime_type
        last_modified = self.last_modified(holder.row)
        if last_modified:
            properties[PROPNAME_LASTMODIFIED] = last_modified
        return IndexDocument(
            doc_id=holder.doc_id,
            properties=properties,
            content=content,
            _snapshot_json=encode_snapshot(holder.doc_id, holder.content_holder.checksum),
        )


class DocumentBuilder(Protocol):
    """A content strategy: computes the checksum and builds the document."""
    context: BuildContext

    @property
    def mode(self) -> ExtMetadataType:
        ...

    def build_content(self, row: Row, primary_key: tuple[str, ...], doc_id: str) -> ContentHolder:
        ...

    def build_document(self, holder: "DocumentHolder") -> IndexDocument:
        ...


@dataclass(frozen=True)
class DocumentHolder:
    """Everything computed for one row that is needed to build its document."""
    builder: DocumentBuilder = field(repr=False)
    row: Row
    primary_key: tuple[str, ...]
    doc_id: str
    content_holder: ContentHolder


@dataclass(frozen=True)
class Handle:
    """The deliverable document for a changed row."""
    document: IndexDocument

    @property
    def doc_id(self) -> str:
        return self.document.doc_id

    def close(self) -> None:
        """Release the delivered body once the pipeline is done with it."""
        if isinstance(self.document.content, LobContent):
            self.document.content.close()

    def __str__(self) -> str:
        return self.document.to_json()


@dataclass(frozen=True)
class Snapshot:
    """Document ID and checksum of a row, compared across traversal passes."""
    doc_id: str
    checksum: str
    serialized: str
    holder: Optional[DocumentHolder] = field(default=None, repr=False, compare=False)

    def get_handle(self) -> Handle:
        if self.holder is None:
            raise ValueError(
                f"Snapshot {self.doc_id} was not built from a row; no handle available"
            )
        return build_handle(self.holder)

    def get_update(self, previous: Union["Snapshot", str, None]) -> Optional[Handle]:
        """Return a Handle if this snapshot differs from the previous one.

        A stored snapshot string is parsed first, so formatting differences
        in persisted JSON are not mistaken for a change. An unreadable one
        counts as changed.
        """
        if isinstance(previous, str):
            try:
                previous = parse_snapshot(previous)
            except ValueError as e:
                logger.warning(f"Treating unreadable previous snapshot of {self.doc_id} as changed: {e}")
                previous = None
        if previous is not None and previous.serialized == self.serialized:
            return None
        return self.get_handle()

    def close(self) -> None:
        """Release large-object content held for a Handle that is not needed."""
        if self.holder is not None:
            self.holder.content_holder.close()

    def __str__(self) -> str:
        return self.serialized


def encode_snapshot(doc_id: str, checksum: str) -> str:
    """Encode the canonical two-field snapshot JSON."""
    if not isinstance(doc_id, str) or not isinstance(checksum, str):
        raise SnapshotEncodingError(
            f"Snapshot fields must be strings, got {type(doc_id).__name__} "
            f"and {type(checksum).__name__}"
        )
    try:
        return json.dumps(
            {PROPNAME_DOCID: doc_id, ROW_CHECKSUM: checksum},
            separators=(",", ":"),
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        raise SnapshotEncodingError(f"Failed to encode snapshot for {doc_id}: {e}") from e


def parse_snapshot(serialized: str) -> Snapshot:
    """Read a persisted snapshot string back into a Snapshot without a holder."""
    try:
        data = json.loads(serialized)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid snapshot JSON: {e}") from e

    if not isinstance(data, dict) or set(data.keys()) != {PROPNAME_DOCID, ROW_CHECKSUM}:
        raise ValueError(
            f"Snapshot must contain exactly '{PROPNAME_DOCID}' and '{ROW_CHECKSUM}': {serialized}"
        )
    doc_id = data[PROPNAME_DOCID]
    checksum = data[ROW_CHECKSUM]
    if not isinstance(doc_id, str) or not isinstance(checksum, str):
        raise ValueError(f"Snapshot fields must be strings: {serialized}")
    return Snapshot(doc_id=doc_id, checksum=checksum, serialized=encode_snapshot(doc_id, checksum))


def build_snapshot(builder: DocumentBuilder, row: Row) -> Snapshot:
    """Build the Snapshot for a row, carrying the holder for its Handle."""
    primary_key = builder.context.spec.get_primary_key_columns(row.keys())
    doc_id = generate_doc_id(primary_key, row)

    # Later changes to the caller's row must not affect a computed checksum
    frozen_row = MappingProxyType(dict(row))

    try:
        content_holder = builder.build_content(frozen_row, primary_key, doc_id)
    except DocumentBuildError as e:
        if e.doc_id is None:
            e.doc_id = doc_id
        raise

    holder = DocumentHolder(
        builder=builder,
        row=frozen_row,
        primary_key=primary_key,
        doc_id=doc_id,
        content_holder=content_holder,
    )
    checksum = content_holder.checksum
    return Snapshot(
        doc_id=doc_id,
        checksum=checksum,
        serialized=encode_snapshot(doc_id, checksum),
        holder=holder,
    )


def build_handle(holder: DocumentHolder) -> Handle:
    """Build the Handle for a row that has already been snapshotted."""
    return Handle(holder.builder.build_document(holder))
