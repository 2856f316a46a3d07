"""FastAPI dependencies for connector lookup."""

from fastapi import HTTPException, Path, Request

from dbfeed.core.builder_selection import BuilderSelection
from dbfeed.core.exceptions import ConnectorConfigError


async def get_selection(
    request: Request,
    name: str = Path(..., description="Connector name", min_length=1, max_length=64),
) -> BuilderSelection:
    """Resolve the connector's selected document builder.

    Raises 404 if the connector is unknown, 400 if its spec is invalid.
    """
    registry = request.app.state.connector_registry
    try:
        return registry.get_selection(name)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Connector '{name}' not found")
    except ConnectorConfigError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": str(e), "validation_errors": e.errors},
        )
