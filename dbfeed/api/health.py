"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check backend status and that the connectors directory is readable."""
    registry = request.app.state.connector_registry
    try:
        connectors = registry.list_connectors()
    except OSError:
        return {"status": "degraded", "connectors": 0}
    return {"status": "ok", "connectors": len(connectors)}
