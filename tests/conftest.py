"""Shared test fixtures: settings, in-memory SQLite engine, fake address store, and sample records."""

import asyncio
from collections.abc import AsyncGenerator, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from geonimbus.core.config import Settings
from geonimbus.lib.spatial_cache import (
    AddressRecord,
    AddressStore,
    AddressStoreError,
    BoundingBox,
    GeohashCodec,
    GeoQueryOrchestrator,
    SpatialIndex,
)
from geonimbus.models import Base


class FakeAddressStore(AddressStore):
    """In-memory AddressStore that records calls and can simulate outages and latency."""

    def __init__(self, records: list[AddressRecord] | None = None) -> None:
        self.records: list[AddressRecord] = list(records or [])
        self.calls: list[str] = []
        self.connected = True
        self.delay = 0.0

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.connected:
            raise AddressStoreError(operation, "store is disconnected")

    async def get_by_id(self, address_id: int) -> AddressRecord | None:
        await self._enter("get_by_id")
        return next((r for r in self.records if r.id == address_id), None)

    async def geocode(
        self,
        zipcode: str,
        number: str,
        street: str,
        city: str,
        state: str,
        country: str,
    ) -> AddressRecord | None:
        await self._enter("geocode")
        wanted = (zipcode, number, street, city, state, country)
        return next(
            (r for r in self.records if (r.zipcode, r.number, r.street, r.city, r.state, r.country) == wanted),
            None,
        )

    async def reverse_geocode(self, latitude: float, longitude: float) -> AddressRecord | None:
        await self._enter("reverse_geocode")
        near = [r for r in self.records if abs(r.latitude - latitude) < 0.001 and abs(r.longitude - longitude) < 0.001]
        return near[0] if near else None

    async def query_by_bounding_box(self, box: BoundingBox) -> list[AddressRecord]:
        await self._enter("query_by_bounding_box")
        return [r for r in self.records if box.contains(r.latitude, r.longitude)]

    async def query_by_geohash_prefix(self, geohash_prefix: str) -> list[AddressRecord]:
        await self._enter("query_by_geohash_prefix")
        return [r for r in self.records if r.geohash and r.geohash.startswith(geohash_prefix)]

    async def query_by_geohash(self, geohash: str) -> AddressRecord | None:
        await self._enter("query_by_geohash")
        return next((r for r in self.records if r.geohash == geohash), None)


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        api_timeout_seconds=5.0,
        cache_tolerance_degrees=0.0001,
        environment="test",
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine with all tables."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the in-memory engine."""
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
def codec() -> GeohashCodec:
    return GeohashCodec()


@pytest.fixture
def make_address(codec: GeohashCodec) -> Callable[..., AddressRecord]:
    """Factory for AddressRecord with Atlanta defaults; the geohash follows the coordinates."""

    def _make(**overrides: object) -> AddressRecord:
        defaults: dict[str, object] = {
            "id": 1,
            "zipcode": "30303",
            "number": "100",
            "street": "PEACHTREE ST NW",
            "city": "ATLANTA",
            "state": "GA",
            "country": "US",
            "latitude": 33.7589,
            "longitude": -84.3880,
        }
        defaults.update(overrides)
        if "geohash" not in overrides:
            defaults["geohash"] = codec.encode(defaults["latitude"], defaults["longitude"])  # type: ignore[arg-type]
        return AddressRecord(**defaults)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def fake_store() -> FakeAddressStore:
    return FakeAddressStore()


@pytest.fixture
def index() -> SpatialIndex:
    return SpatialIndex()


@pytest.fixture
def orchestrator(fake_store: FakeAddressStore, index: SpatialIndex, codec: GeohashCodec) -> GeoQueryOrchestrator:
    """Orchestrator over an empty cache and the fake store."""
    return GeoQueryOrchestrator(fake_store, index, codec)
