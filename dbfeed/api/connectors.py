"""Connector endpoints — preview the snapshot and document built for a row."""

from fastapi import APIRouter, Depends, HTTPException, Request

from dbfeed.api.deps import get_selection
from dbfeed.core.builder_selection import BuilderSelection
from dbfeed.core.document_builder import build_snapshot
from dbfeed.core.exceptions import DocumentBuildError
from dbfeed.core.lob import LobContent
from dbfeed.core.models import (
    PROPNAME_MIMETYPE,
    ConnectorSummary,
    DocumentResponse,
    RowRequest,
    SnapshotResponse,
)

router = APIRouter()

PREVIEW_LENGTH = 2048


@router.get("/connectors")
async def list_connectors(request: Request):
    """List all available connectors."""
    registry = request.app.state.connector_registry
    return {"connectors": registry.list_connectors()}


@router.get("/connectors/{name}", response_model=ConnectorSummary)
async def get_connector(selection: BuilderSelection = Depends(get_selection)):
    """Show the requested and effective content mode of a connector."""
    return ConnectorSummary(
        connector_name=selection.builder.context.connector_name,
        requested_mode=selection.requested_mode,
        effective_mode=selection.effective_mode.value,
        fallback=selection.fell_back,
    )


def _snapshot_or_422(selection: BuilderSelection, body: RowRequest):
    try:
        return build_snapshot(selection.builder, body.row)
    except DocumentBuildError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": type(e).__name__, "message": str(e), "doc_id": e.doc_id},
        )


@router.post("/connectors/{name}/snapshot", response_model=SnapshotResponse)
async def preview_snapshot(body: RowRequest, selection: BuilderSelection = Depends(get_selection)):
    """Build the change-detection snapshot of a row."""
    snapshot = _snapshot_or_422(selection, body)
    return SnapshotResponse(
        connector_name=selection.builder.context.connector_name,
        doc_id=snapshot.doc_id,
        checksum=snapshot.checksum,
        snapshot=snapshot.serialized,
    )


@router.post("/connectors/{name}/document", response_model=DocumentResponse)
async def preview_document(body: RowRequest, selection: BuilderSelection = Depends(get_selection)):
    """Build the full document a changed row would be delivered as."""
    snapshot = _snapshot_or_422(selection, body)
    try:
        document = snapshot.get_handle().document
        preview = None
        length = None
        if isinstance(document.content, str):
            preview = document.content[:PREVIEW_LENGTH]
            length = len(document.content)
        elif isinstance(document.content, LobContent):
            data = document.content.read()[:PREVIEW_LENGTH]
            preview = data.decode("utf-8", errors="replace")
            length = document.content.size
    except DocumentBuildError as e:
        raise HTTPException(status_code=422, detail={"error": type(e).__name__, "message": str(e)})
    finally:
        snapshot.close()

    return DocumentResponse(
        connector_name=selection.builder.context.connector_name,
        doc_id=document.doc_id,
        mode=selection.effective_mode.value,
        properties=dict(document.properties),
        mime_type=document.find_property(PROPNAME_MIMETYPE),
        content_preview=preview,
        content_length=length,
        snapshot=document.to_json(),
    )
