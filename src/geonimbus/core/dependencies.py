"""FastAPI dependency injection for the query engine, geohash codec, and request deadlines.

The orchestrator and codec are built once in the application lifespan
and stored on ``app.state``; these dependencies hand them to routes.
"""

from typing import Annotated

from fastapi import Depends, Request

from geonimbus.core.config import Settings, get_settings
from geonimbus.lib.spatial_cache import Deadline, GeohashCodec, GeoQueryOrchestrator


def get_orchestrator(request: Request) -> GeoQueryOrchestrator:
    """Return the application's query orchestrator."""
    return request.app.state.orchestrator


def get_geohash_codec(request: Request) -> GeohashCodec:
    """Return the application's geohash codec."""
    return request.app.state.geohash_codec


def get_deadline(settings: Annotated[Settings, Depends(get_settings)]) -> Deadline:
    """Create a per-request deadline from the configured API timeout."""
    return Deadline(settings.api_timeout_seconds)
