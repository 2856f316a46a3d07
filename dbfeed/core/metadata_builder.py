"""Metadata strategy — the row itself is the document content."""

from dataclasses import dataclass

from dbfeed.core.document_builder import BuildContext, DocumentHolder, Row
from dbfeed.core.documents import ContentHolder, IndexDocument
from dbfeed.core.hashing import compute_text_checksum
from dbfeed.core.models import MIMETYPE_TEXT_HTML, ExtMetadataType


@dataclass(frozen=True)
class MetadataDocumentBuilder:
    """Indexes the serialized row as an HTML page with column metadata."""
    context: BuildContext

    @property
    def mode(self) -> ExtMetadataType:
        return ExtMetadataType.NONE

    def build_content(self, row: Row, primary_key: tuple[str, ...], doc_id: str) -> ContentHolder:
        content = self.context.serialize_row(row, primary_key)
        return ContentHolder(
            checksum=compute_text_checksum(content),
            content=content,
            mime_type=MIMETYPE_TEXT_HTML,
            content_length=len(content.encode("utf-8")),
        )

    def build_document(self, holder: DocumentHolder) -> IndexDocument:
        content_holder = holder.content_holder
        return self.context.new_document(
            holder,
            self.context.metadata_properties(holder.row),
            mime_type=content_holder.mime_type,
            content=content_holder.content,
        )
