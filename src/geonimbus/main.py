"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.  The spatial cache is created in the lifespan and
lives on ``app.state`` for the life of the process.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from geonimbus.core.config import get_settings
from geonimbus.core.database import dispose_engine, get_session_factory, init_engine
from geonimbus.core.logging import setup_logging
from geonimbus.lib.spatial_cache import GeohashCodec
from geonimbus.services.query_engine import build_orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: init engine and cache on startup, dispose on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)
    init_engine(settings.database_url, schema=settings.database_schema)

    codec = GeohashCodec(settings.geohash_precision)
    app.state.geohash_codec = codec
    app.state.orchestrator = build_orchestrator(settings, get_session_factory(), codec=codec)
    logger.info(f"Query engine ready (tolerance={settings.cache_tolerance_degrees} deg)")

    yield

    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="GeoNimbus",
        description="Geocoding, reverse geocoding, and spatial address queries with an in-memory spatial cache",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    from geonimbus.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
