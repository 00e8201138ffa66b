"""Integration tests for the /geocode endpoints."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from geonimbus.api.v1.geocoding import geocoding_router
from geonimbus.core.config import get_settings
from geonimbus.core.dependencies import get_deadline
from geonimbus.lib.spatial_cache import Deadline


@pytest.fixture
def app(orchestrator, codec, settings) -> FastAPI:
    """Create a minimal FastAPI app with the geocoding router over the fake store."""
    app = FastAPI()
    app.include_router(geocoding_router, prefix="/api/v1")
    app.state.orchestrator = orchestrator
    app.state.geohash_codec = codec
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app: FastAPI) -> AsyncClient:
    """Create an async test client."""
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", follow_redirects=False)


@pytest.fixture
def seeded(fake_store, make_address):
    fake_store.records = [
        make_address(id=1),
        make_address(id=2, number="55", street="TRINITY AVE SW", latitude=33.7540, longitude=-84.3915),
    ]
    return fake_store.records


class TestGetById:
    """Tests for GET /api/v1/geocode/id/{address_id}."""

    @pytest.mark.asyncio
    async def test_found(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/id/1")
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == 1
        assert data["street"] == "PEACHTREE ST NW"
        assert data["country"] == "US"
        assert data["geohash"] == seeded[0].geohash

    @pytest.mark.asyncio
    async def test_not_found(self, client) -> None:
        resp = await client.get("/api/v1/geocode/id/99")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Address not found"

    @pytest.mark.asyncio
    async def test_served_from_cache_when_store_down(self, client, seeded, fake_store) -> None:
        await client.get("/api/v1/geocode/id/1")
        fake_store.connected = False

        resp = await client.get("/api/v1/geocode/id/1")

        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_store_failure_returns_500(self, client, fake_store) -> None:
        fake_store.connected = False
        resp = await client.get("/api/v1/geocode/id/1")
        assert resp.status_code == 500

    @pytest.mark.asyncio
    async def test_timeout_returns_408(self, app, client, fake_store) -> None:
        fake_store.delay = 1.0
        app.dependency_overrides[get_deadline] = lambda: Deadline(0.05)

        resp = await client.get("/api/v1/geocode/id/1")

        assert resp.status_code == 408


class TestGeocode:
    """Tests for GET /api/v1/geocode/geocode."""

    @pytest.mark.asyncio
    async def test_found_with_default_country(self, client, seeded) -> None:
        params = {"zipcode": "30303", "number": "100", "street": "PEACHTREE ST NW", "city": "ATLANTA", "state": "GA"}
        resp = await client.get("/api/v1/geocode/geocode", params=params)
        assert resp.status_code == 200
        assert resp.json()["latitude"] == pytest.approx(33.7589)

    @pytest.mark.asyncio
    async def test_not_found(self, client, seeded) -> None:
        params = {"zipcode": "30303", "number": "1", "street": "NOWHERE", "city": "ATLANTA", "state": "GA"}
        resp = await client.get("/api/v1/geocode/geocode", params=params)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_field_returns_422(self, client) -> None:
        resp = await client.get("/api/v1/geocode/geocode", params={"zipcode": "30303"})
        assert resp.status_code == 422


class TestReverseGeocode:
    """Tests for GET /api/v1/geocode/reverse-geocode."""

    @pytest.mark.asyncio
    async def test_found(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/reverse-geocode", params={"latitude": 33.7589, "longitude": -84.3880})
        assert resp.status_code == 200
        assert resp.json()["id"] == 1

    @pytest.mark.asyncio
    async def test_not_found(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/reverse-geocode", params={"latitude": 0.0, "longitude": 0.0})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_out_of_range_latitude(self, client) -> None:
        resp = await client.get("/api/v1/geocode/reverse-geocode", params={"latitude": 91, "longitude": 0})
        assert resp.status_code == 422


class TestRangeQueries:
    """Tests for bounding-box and radius queries."""

    @pytest.mark.asyncio
    async def test_bbox(self, client, seeded) -> None:
        params = {"min_lat": 33.755, "max_lat": 33.760, "min_lon": -84.390, "max_lon": -84.385}
        resp = await client.get("/api/v1/geocode/bbox", params=params)
        assert resp.status_code == 200
        assert [a["id"] for a in resp.json()] == [1]

    @pytest.mark.asyncio
    async def test_bbox_empty_returns_empty_list(self, client, seeded) -> None:
        params = {"min_lat": 0, "max_lat": 1, "min_lon": 0, "max_lon": 1}
        resp = await client.get("/api/v1/geocode/bbox", params=params)
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_bbox_inverted_returns_422(self, client) -> None:
        params = {"min_lat": 2, "max_lat": 1, "min_lon": 0, "max_lon": 1}
        resp = await client.get("/api/v1/geocode/bbox", params=params)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_radius(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/radius", params={"latitude": 33.756, "longitude": -84.39, "radius": 2})
        assert resp.status_code == 200
        assert {a["id"] for a in resp.json()} == {1, 2}

    @pytest.mark.asyncio
    async def test_negative_radius_returns_422(self, client) -> None:
        resp = await client.get("/api/v1/geocode/radius", params={"latitude": 0, "longitude": 0, "radius": -1})
        assert resp.status_code == 422


class TestBatchReverseGeocode:
    """Tests for POST /api/v1/geocode/batch-reverse-geocode."""

    @pytest.mark.asyncio
    async def test_omits_misses(self, client, seeded) -> None:
        body = {
            "coordinates": [
                {"latitude": 33.7540, "longitude": -84.3915},
                {"latitude": 0.0, "longitude": 0.0},
                {"latitude": 33.7589, "longitude": -84.3880},
            ]
        }
        resp = await client.post("/api/v1/geocode/batch-reverse-geocode", json=body)
        assert resp.status_code == 200
        assert [a["id"] for a in resp.json()] == [2, 1]

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, client) -> None:
        resp = await client.post("/api/v1/geocode/batch-reverse-geocode", json={"coordinates": []})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_timeout_fails_whole_batch(self, app, client, seeded, fake_store) -> None:
        fake_store.delay = 0.05
        app.dependency_overrides[get_deadline] = lambda: Deadline(0.08)
        body = {"coordinates": [{"latitude": 33.7540, "longitude": -84.3915}, {"latitude": 33.7589, "longitude": -84.3880}]}

        resp = await client.post("/api/v1/geocode/batch-reverse-geocode", json=body)

        assert resp.status_code == 408


class TestGeohashQueries:
    """Tests for exact geohash and geohash-prefix lookups."""

    @pytest.mark.asyncio
    async def test_prefix(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/geohash-prefix", params={"geohashPrefix": seeded[0].geohash[:7]})
        assert resp.status_code == 200
        assert [a["id"] for a in resp.json()] == [1]

    @pytest.mark.asyncio
    async def test_prefix_invalid_returns_422(self, client) -> None:
        resp = await client.get("/api/v1/geocode/geohash-prefix", params={"geohashPrefix": "ABC"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_prefix_no_results(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/geohash-prefix", params={"geohashPrefix": "zzzz"})
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_exact_geohash(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/geohash", params={"geohash": seeded[1].geohash})
        assert resp.status_code == 200
        assert resp.json()["id"] == 2

    @pytest.mark.asyncio
    async def test_exact_geohash_not_found(self, client, seeded) -> None:
        resp = await client.get("/api/v1/geocode/geohash", params={"geohash": "s0000000"})
        assert resp.status_code == 404


class TestNearest:
    """Tests for GET /api/v1/geocode/nearest."""

    @pytest.mark.asyncio
    async def test_empty_cache_returns_404(self, client) -> None:
        resp = await client.get("/api/v1/geocode/nearest", params={"latitude": 0, "longitude": 0})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_returns_closest_cached(self, client, seeded) -> None:
        await client.get("/api/v1/geocode/id/1")
        await client.get("/api/v1/geocode/id/2")

        resp = await client.get("/api/v1/geocode/nearest", params={"latitude": 33.75, "longitude": -84.39})

        assert resp.status_code == 200
        assert resp.json()["id"] == 2
