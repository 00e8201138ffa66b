"""Tests for the SQL address store against in-memory SQLite."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from geonimbus.lib.spatial_cache import AddressRecord, AddressStoreError, BoundingBox
from geonimbus.models import Address
from geonimbus.services.address_store import SqlAddressStore, to_record


@pytest.fixture
def store(session_factory, codec) -> SqlAddressStore:
    return SqlAddressStore(session_factory, codec, max_distance_m=50.0)


@pytest.fixture
async def seeded(store, make_address) -> list[AddressRecord]:
    """Three Atlanta addresses: two a few meters apart, one across town."""
    records = [
        make_address(id=0, number="100", latitude=33.7589, longitude=-84.3880),
        make_address(id=0, number="102", latitude=33.7590, longitude=-84.3881),
        make_address(id=0, number="55", street="TRINITY AVE SW", latitude=33.7540, longitude=-84.3915),
    ]
    return [await store.insert(r) for r in records]


class TestInsert:
    async def test_assigns_id(self, seeded) -> None:
        assert all(r.id > 0 for r in seeded)
        assert len({r.id for r in seeded}) == 3

    async def test_fills_missing_geohash(self, store, make_address, codec) -> None:
        record = make_address(id=0, geohash=None)
        saved = await store.insert(record)
        assert saved.geohash == codec.encode(record.latitude, record.longitude)


class TestLookups:
    """Tests for id, geocode, and geohash lookups."""

    async def test_get_by_id(self, store, seeded) -> None:
        found = await store.get_by_id(seeded[0].id)
        assert found is not None
        assert found.number == "100"

    async def test_get_by_id_missing(self, store, seeded) -> None:
        assert await store.get_by_id(9999) is None

    async def test_geocode_matches_all_fields(self, store, seeded) -> None:
        found = await store.geocode("30303", "55", "TRINITY AVE SW", "ATLANTA", "GA", "US")
        assert found is not None
        assert found.id == seeded[2].id

    async def test_geocode_country_must_match(self, store, seeded) -> None:
        assert await store.geocode("30303", "55", "TRINITY AVE SW", "ATLANTA", "GA", "CA") is None

    async def test_query_by_geohash(self, store, seeded) -> None:
        found = await store.query_by_geohash(seeded[2].geohash)
        assert found is not None
        assert found.id == seeded[2].id

    async def test_query_by_geohash_prefix(self, store, seeded) -> None:
        results = await store.query_by_geohash_prefix(seeded[0].geohash[:3])
        assert [r.id for r in results] == [r.id for r in seeded]

    async def test_query_by_geohash_prefix_no_match(self, store, seeded) -> None:
        assert await store.query_by_geohash_prefix("zzz") == []


class TestSpatialQueries:
    """Tests for reverse geocode and bounding-box queries."""

    async def test_reverse_geocode_picks_closest(self, store, seeded) -> None:
        found = await store.reverse_geocode(33.75901, -84.38811)
        assert found is not None
        assert found.number == "102"

    async def test_reverse_geocode_outside_radius(self, store, seeded) -> None:
        assert await store.reverse_geocode(33.80, -84.30) is None

    async def test_bounding_box(self, store, seeded) -> None:
        box = BoundingBox(min_lat=33.755, max_lat=33.760, min_lon=-84.390, max_lon=-84.385)
        results = await store.query_by_bounding_box(box)
        assert [r.number for r in results] == ["100", "102"]

    async def test_bounding_box_empty(self, store, seeded) -> None:
        box = BoundingBox(min_lat=0.0, max_lat=1.0, min_lon=0.0, max_lon=1.0)
        assert await store.query_by_bounding_box(box) == []


class TestFailures:
    """Store failures surface as AddressStoreError."""

    async def test_database_error_wrapped(self, codec) -> None:
        factory = MagicMock(side_effect=OperationalError("SELECT 1", {}, Exception("connection refused")))
        store = SqlAddressStore(factory, codec)

        with pytest.raises(AddressStoreError) as exc_info:
            await store.get_by_id(1)
        assert exc_info.value.operation == "get_by_id"

    def test_malformed_row_raises_value_error(self) -> None:
        row = Address(
            id=1,
            zipcode="30303",
            number="1",
            street="X",
            city="Y",
            state="GA",
            country="US",
            latitude=123.0,
            longitude=0.0,
        )
        with pytest.raises(ValueError, match="latitude"):
            to_record(row)
