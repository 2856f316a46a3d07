"""LOB strategy — a BLOB/CLOB column is the document content.

The checksum covers the large-object bytes followed by the serialized row
(LOB column excluded), so a change to either the content or the metadata
triggers re-indexing.

Content larger than the traversal limit, or of a MIME type the pipeline
does not accept, is dropped and the document is delivered with metadata
only; this is logged as a warning with the row's document ID.
"""

import logging
from dataclasses import dataclass, field

from dbfeed.core.document_builder import BuildContext, DocumentHolder, Row, TraversalContext
from dbfeed.core.documents import ContentHolder, IndexDocument
from dbfeed.core.hashing import ChecksumWriter, serialize_value
from dbfeed.core.lob import acquire_lob
from dbfeed.core.mime_detect import detect_mime_type
from dbfeed.core.models import ExtMetadataType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LobDocumentBuilder:
    context: BuildContext
    traversal_context: TraversalContext = field(default_factory=TraversalContext)

    @property
    def mode(self) -> ExtMetadataType:
        return ExtMetadataType.LOB

    def _file_name(self, row: Row):
        value = self.context.column_value(row, self.context.spec.file_name_field)
        if value is not None:
            return serialize_value(value, self.context.spec.file_name_field)
        return None

    def build_content(self, row: Row, primary_key: tuple[str, ...], doc_id: str) -> ContentHolder:
        spec = self.context.spec
        column = spec.lob_field
        writer = ChecksumWriter()
        value = self.context.column_value(row, column)
        if value is None:
            logger.info(f"Large object column '{column}' is null for {doc_id}; indexing metadata only")
            writer.update(self.context.serialize_row(row, primary_key).encode("utf-8"))
            return ContentHolder(checksum=writer.hexdigest())

        # The LOB is read first: a one-shot stream is closed by acquire_lob
        # whatever happens to the rest of the row
        lob = acquire_lob(value, writer, column, doc_id)
        try:
            writer.update(self.context.serialize_row(row, primary_key).encode("utf-8"))
            checksum = writer.hexdigest()
            mime_type = detect_mime_type(lob.head, spec.lob_mime_type, self._file_name(row))
        except Exception:
            lob.content.close()
            raise

        limit = self.traversal_context.max_document_size
        if lob.size > limit:
            lob.content.close()
            logger.warning(
                f"Large object for {doc_id} is {lob.size} bytes, over the {limit} byte limit; "
                f"indexing metadata only",
                extra={"event": "lob_content_skipped", "doc_id": doc_id,
                       "reason": "size", "size": lob.size, "limit": limit},
            )
            return ContentHolder(checksum=checksum, mime_type=mime_type, content_length=lob.size)

        if not self.traversal_context.supports_mime_type(mime_type):
            lob.content.close()
            logger.warning(
                f"Large object for {doc_id} has unsupported MIME type {mime_type}; "
                f"indexing metadata only",
                extra={"event": "lob_content_skipped", "doc_id": doc_id,
                       "reason": "mime_type", "mime_type": mime_type},
            )
            return ContentHolder(checksum=checksum, mime_type=mime_type, content_length=lob.size)

        return ContentHolder(
            checksum=checksum,
            content=lob.content,
            mime_type=mime_type,
            content_length=lob.size,
        )

    def build_document(self, holder: DocumentHolder) -> IndexDocument:
        spec = self.context.spec
        content_holder = holder.content_holder

        display_url = None
        fetch_url = self.context.column_value(holder.row, spec.fetch_url_field)
        if fetch_url is not None:
            display_url = serialize_value(fetch_url, spec.fetch_url_field)

        return self.context.new_document(
            holder,
            self.context.metadata_properties(holder.row),
            mime_type=content_holder.mime_type,
            display_url=display_url,
            content=content_holder.content,
        )
