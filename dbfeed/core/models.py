"""Enums, document property names and API request/response schemas."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ExtMetadataType(str, Enum):
    NONE = "none"
    COMPLETE_URL = "url"
    DOC_ID = "docId"
    LOB = "lob"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ExtMetadataType"]:
        """Match a configured mode name case-insensitively.

        Blank values mean NONE; unknown names return None.
        """
        if value is None or not value.strip():
            return cls.NONE
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


class UrlType(str, Enum):
    COMPLETE_URL = "complete_url"
    BASE_URL = "base_url"


# --- Document property names ---

PROPNAME_DOCID = "google:docid"
PROPNAME_CONTENT = "google:content"
PROPNAME_MIMETYPE = "google:mimetype"
PROPNAME_DISPLAYURL = "google:displayurl"
PROPNAME_SEARCHURL = "google:searchurl"
PROPNAME_LASTMODIFIED = "google:lastmodified"
ROW_CHECKSUM = "google:sum"

MIMETYPE_TEXT_HTML = "text/html"
MIMETYPE_TEXT_PLAIN = "text/plain"
MIMETYPE_OCTET_STREAM = "application/octet-stream"


# --- API models ---


class RowRequest(BaseModel):
    row: dict[str, Any] = Field(
        ..., description="Column name to value mapping for a single source row"
    )


class SnapshotResponse(BaseModel):
    connector_name: str
    doc_id: str
    checksum: str
    snapshot: str


class DocumentResponse(BaseModel):
    connector_name: str
    doc_id: str
    mode: str
    properties: dict[str, str] = {}
    mime_type: Optional[str] = None
    content_preview: Optional[str] = None
    content_length: Optional[int] = None
    snapshot: str


class ConnectorSummary(BaseModel):
    connector_name: str
    requested_mode: str
    effective_mode: str
    fallback: bool = False
