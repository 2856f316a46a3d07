"""Content strategy selection — the one place a connector's mode is decided.

A requested external-metadata mode whose required column is not configured
falls back to the metadata strategy. That fallback is reported as a
ConfigurationMismatch event on the selection and logged as a warning; the
connector spec itself is left untouched.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from dbfeed.core.connector_spec import ConnectorSpec
from dbfeed.core.document_builder import BuildContext, DocumentBuilder, TraversalContext
from dbfeed.core.lob_builder import LobDocumentBuilder
from dbfeed.core.metadata_builder import MetadataDocumentBuilder
from dbfeed.core.models import ExtMetadataType, UrlType
from dbfeed.core.row_serializer import RowSerializer, default_serializer
from dbfeed.core.url_builder import UrlDocumentBuilder

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    ExtMetadataType.COMPLETE_URL: "document_url_field",
    ExtMetadataType.DOC_ID: "document_id_field",
    ExtMetadataType.LOB: "lob_field",
}


@dataclass(frozen=True)
class ConfigurationMismatch:
    """A requested mode could not be used; the metadata strategy was chosen."""
    connector_name: str
    requested_mode: str
    missing_field: Optional[str]
    effective_mode: ExtMetadataType = ExtMetadataType.NONE

    def as_log_extra(self) -> dict:
        return {
            "event": "configuration_mismatch",
            "connector_name": self.connector_name,
            "requested_mode": self.requested_mode,
            "missing_field": self.missing_field,
            "effective_mode": self.effective_mode.value,
        }


@dataclass(frozen=True)
class BuilderSelection:
    builder: DocumentBuilder
    requested_mode: str
    mismatch: Optional[ConfigurationMismatch] = None

    @property
    def effective_mode(self) -> ExtMetadataType:
        return self.builder.mode

    @property
    def fell_back(self) -> bool:
        return self.mismatch is not None


def select_document_builder(
    spec: ConnectorSpec,
    traversal_context: Optional[TraversalContext] = None,
    serializer: RowSerializer = default_serializer,
) -> BuilderSelection:
    """Pick the content strategy for a connector."""
    context = BuildContext(spec=spec, serializer=serializer)
    requested = spec.ext_metadata_type or ""
    mode = ExtMetadataType.parse(requested)

    if mode == ExtMetadataType.COMPLETE_URL and spec.document_url_field:
        logger.info("Running in external metadata feed mode with complete document URL")
        return BuilderSelection(UrlDocumentBuilder(context, UrlType.COMPLETE_URL), requested)

    if mode == ExtMetadataType.DOC_ID and spec.document_id_field:
        logger.info("Running in external metadata feed mode with base URL and document ID")
        return BuilderSelection(UrlDocumentBuilder(context, UrlType.BASE_URL), requested)

    if mode == ExtMetadataType.LOB and spec.lob_field:
        logger.info("Running in content feed mode for BLOB/CLOB data")
        return BuilderSelection(
            LobDocumentBuilder(context, traversal_context or TraversalContext()), requested
        )

    mismatch = None
    if mode != ExtMetadataType.NONE:
        mismatch = ConfigurationMismatch(
            connector_name=spec.connector_name,
            requested_mode=requested,
            missing_field=REQUIRED_FIELDS.get(mode),
        )
        if mismatch.missing_field:
            reason = f"'{mismatch.missing_field}' is not configured"
        else:
            reason = "the mode is unknown"
        logger.warning(
            f"Connector '{spec.connector_name}' requested mode '{requested}' but {reason}; "
            f"falling back to content feed mode for text data",
            extra=mismatch.as_log_extra(),
        )

    logger.info("Running in content feed mode for text data")
    return BuilderSelection(MetadataDocumentBuilder(context), requested, mismatch)
