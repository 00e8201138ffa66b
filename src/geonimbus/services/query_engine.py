"""Query engine wiring: builds the orchestrator from settings and a session factory."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from geonimbus.core.config import Settings
from geonimbus.lib.spatial_cache import GeohashCodec, GeoQueryOrchestrator, SpatialIndex
from geonimbus.services.address_store import SqlAddressStore


def build_orchestrator(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    *,
    codec: GeohashCodec | None = None,
) -> GeoQueryOrchestrator:
    """Create a query orchestrator with a fresh, empty spatial index.

    The caller owns the returned orchestrator and its index for as long as
    it wants the cache to live.

    Args:
        settings: Application settings.
        session_factory: Factory for the durable store's database sessions.
        codec: Geohash codec; one using ``settings.geohash_precision`` is created if omitted.

    Returns:
        A ready-to-use GeoQueryOrchestrator.
    """
    codec = codec or GeohashCodec(settings.geohash_precision)
    store = SqlAddressStore(
        session_factory,
        codec,
        max_distance_m=settings.reverse_geocode_max_distance_m,
    )
    return GeoQueryOrchestrator(
        store,
        SpatialIndex(),
        codec,
        tolerance=settings.cache_tolerance_degrees,
    )
