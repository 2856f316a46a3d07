"""dbfeed — FastAPI application entry point.

Loads the connector registry on startup and registers API routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dbfeed.api import connectors, health
from dbfeed.core.config import settings
from dbfeed.core.connector_registry import ConnectorRegistry

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the connector registry on startup."""
    logger.info("Starting dbfeed backend...")
    app.state.connector_registry = ConnectorRegistry()
    logger.info(f"Connector registry initialized: {app.state.connector_registry.list_connectors()}")
    yield
    logger.info("dbfeed backend stopped")


app = FastAPI(
    title="dbfeed",
    version="0.1.0",
    description="Turns database rows into change-detectable documents for indexing.",
    lifespan=lifespan,
)

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(connectors.router, prefix="/api", tags=["connectors"])
