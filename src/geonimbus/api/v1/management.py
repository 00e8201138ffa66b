"""Health and cache management endpoints."""

from fastapi import APIRouter, Depends
from loguru import logger

from geonimbus.api.v1.geocoding import run_query
from geonimbus.core.config import Settings, get_settings
from geonimbus.core.dependencies import get_deadline, get_orchestrator
from geonimbus.lib.spatial_cache import Deadline, GeoQueryOrchestrator
from geonimbus.schemas.geocoding import (
    CachePreloadRequest,
    CachePreloadResponse,
    CacheStatsResponse,
    HealthResponse,
)

management_router = APIRouter(tags=["management"])


@management_router.get("/health", response_model=HealthResponse)
async def get_health(settings: Settings = Depends(get_settings)) -> HealthResponse:  # noqa: B008
    """Report that the service is up."""
    logger.debug("Health check")
    return HealthResponse(environment=settings.environment)


@management_router.post("/cache/preload", response_model=CachePreloadResponse)
async def preload_cache(
    request: CachePreloadRequest,
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> CachePreloadResponse:
    """Warm the cache with the addresses under a list of geohashes."""
    resolved = await run_query(orchestrator.preload(request.geohashes, deadline))
    return CachePreloadResponse(
        requested=len(request.geohashes),
        resolved=resolved,
        cached_entries=len(orchestrator.index),
    )


@management_router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
) -> CacheStatsResponse:
    """Report spatial cache size and rebuild counters."""
    stats = orchestrator.index.stats()
    return CacheStatsResponse(
        entries=stats.entries,
        rebuilds=stats.rebuilds,
        stale=stats.stale,
        tolerance_degrees=orchestrator.tolerance,
    )
