"""URL strategy — documents point at content stored elsewhere.

Only a URL reference and metadata are delivered; no body is indexed. The
checksum still covers the whole serialized row, so any column change is
picked up, not just a change of the URL.
"""

from dataclasses import dataclass

from dbfeed.core.document_builder import BuildContext, DocumentHolder, Row
from dbfeed.core.documents import ContentHolder, IndexDocument
from dbfeed.core.exceptions import RowSerializationError
from dbfeed.core.hashing import serialize_value
from dbfeed.core.models import PROPNAME_SEARCHURL, ExtMetadataType, UrlType


@dataclass(frozen=True)
class UrlDocumentBuilder:
    context: BuildContext
    url_type: UrlType

    @property
    def mode(self) -> ExtMetadataType:
        if self.url_type == UrlType.COMPLETE_URL:
            return ExtMetadataType.COMPLETE_URL
        return ExtMetadataType.DOC_ID

    def _url_column(self) -> str:
        spec = self.context.spec
        if self.url_type == UrlType.COMPLETE_URL:
            return spec.document_url_field
        return spec.document_id_field

    def build_url(self, row: Row) -> str:
        """The referenced URL: the URL column itself, or base URL + document ID."""
        column = self._url_column()
        value = self.context.column_value(row, column)
        if value is None:
            raise RowSerializationError(
                f"URL source column '{column}' is missing or null", column=column
            )
        value = serialize_value(value, column)
        if self.url_type == UrlType.COMPLETE_URL:
            return value
        return f"{self.context.spec.base_url or ''}{value}"

    def build_content(self, row: Row, primary_key: tuple[str, ...], doc_id: str) -> ContentHolder:
        url = self.build_url(row)
        return ContentHolder(
            checksum=self.context.row_checksum(row, primary_key),
            content=url,
        )

    def build_document(self, holder: DocumentHolder) -> IndexDocument:
        url = holder.content_holder.content
        properties = self.context.metadata_properties(holder.row)
        properties[PROPNAME_SEARCHURL] = url
        return self.context.new_document(holder, properties, display_url=url)
