"""Geocoding API endpoints: id lookup, forward/reverse geocode, range and geohash queries."""

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from geonimbus.core.dependencies import get_deadline, get_orchestrator
from geonimbus.lib.spatial_cache import (
    AddressRecord,
    AddressStoreError,
    BoundingBox,
    Deadline,
    GeoQueryOrchestrator,
    OperationCancelledError,
)
from geonimbus.schemas.geocoding import AddressResponse, BatchReverseGeocodeRequest

T = TypeVar("T")

geocoding_router = APIRouter(prefix="/geocode", tags=["geocoding"])


async def run_query(call: Awaitable[T]) -> T:
    """Await an orchestrator call, translating its failures to HTTP errors.

    Raises:
        HTTPException: 408 on deadline expiry, 422 on invalid input,
            500 on address store failure.
    """
    try:
        return await call
    except OperationCancelledError as e:
        raise HTTPException(
            status_code=status.HTTP_408_REQUEST_TIMEOUT,
            detail="The operation timed out.",
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    except AddressStoreError as e:
        logger.error(f"Address store failure: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while querying the address store.",
        ) from e


def _found(address: AddressRecord | None, detail: str) -> AddressResponse:
    if address is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return AddressResponse.model_validate(address)


def _many(addresses: list[AddressRecord]) -> list[AddressResponse]:
    return [AddressResponse.model_validate(a) for a in addresses]


@geocoding_router.get("/id/{address_id}", response_model=AddressResponse)
async def get_address_by_id(
    address_id: int,
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> AddressResponse:
    """Look up an address by its identifier."""
    address = await run_query(orchestrator.get_by_id(address_id, deadline))
    return _found(address, "Address not found")


@geocoding_router.get("/geocode", response_model=AddressResponse)
async def geocode(
    zipcode: str = Query(..., min_length=1, max_length=6),  # noqa: B008
    number: str = Query(..., min_length=1, max_length=30),  # noqa: B008
    street: str = Query(..., min_length=1, max_length=200),  # noqa: B008
    city: str = Query(..., min_length=1, max_length=50),  # noqa: B008
    state: str = Query(..., min_length=2, max_length=2),  # noqa: B008
    country: str = Query("US", min_length=2, max_length=2),  # noqa: B008
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> AddressResponse:
    """Resolve postal address fields to coordinates."""
    address = await run_query(orchestrator.geocode(zipcode, number, street, city, state, country, deadline))
    return _found(address, "Address could not be geocoded")


@geocoding_router.get("/reverse-geocode", response_model=AddressResponse)
async def reverse_geocode(
    latitude: float = Query(..., ge=-90, le=90, description="WGS84 latitude"),  # noqa: B008
    longitude: float = Query(..., ge=-180, le=180, description="WGS84 longitude"),  # noqa: B008
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> AddressResponse:
    """Resolve a coordinate to the nearest known address."""
    address = await run_query(orchestrator.reverse_geocode(latitude, longitude, deadline))
    return _found(address, "No address near the given coordinates")


@geocoding_router.get("/bbox", response_model=list[AddressResponse])
async def query_by_bounding_box(
    min_lat: float = Query(..., ge=-90, le=90),  # noqa: B008
    max_lat: float = Query(..., ge=-90, le=90),  # noqa: B008
    min_lon: float = Query(..., ge=-180, le=180),  # noqa: B008
    max_lon: float = Query(..., ge=-180, le=180),  # noqa: B008
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> list[AddressResponse]:
    """List addresses inside a bounding box."""
    try:
        box = BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return _many(await run_query(orchestrator.query_by_bounding_box(box, deadline)))


@geocoding_router.get("/radius", response_model=list[AddressResponse])
async def query_by_radius(
    latitude: float = Query(..., ge=-90, le=90),  # noqa: B008
    longitude: float = Query(..., ge=-180, le=180),  # noqa: B008
    radius: float = Query(..., ge=0, le=1000, description="Radius in kilometres"),  # noqa: B008
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> list[AddressResponse]:
    """List addresses within the box enclosing a radius around a point."""
    return _many(await run_query(orchestrator.query_by_radius(latitude, longitude, radius, deadline)))


@geocoding_router.post("/batch-reverse-geocode", response_model=list[AddressResponse])
async def batch_reverse_geocode(
    request: BatchReverseGeocodeRequest,
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> list[AddressResponse]:
    """Reverse geocode many coordinates; coordinates without a match are omitted."""
    coordinates = [(c.latitude, c.longitude) for c in request.coordinates]
    return _many(await run_query(orchestrator.batch_reverse_geocode(coordinates, deadline)))


@geocoding_router.get("/geohash", response_model=AddressResponse)
async def query_by_geohash(
    geohash: str = Query(..., min_length=1, max_length=12),  # noqa: B008
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> AddressResponse:
    """Look up the address stored under an exact geohash."""
    address = await run_query(orchestrator.query_by_geohash(geohash, deadline))
    return _found(address, "No results found for the specified geohash.")


@geocoding_router.get("/geohash-prefix", response_model=list[AddressResponse])
async def query_by_geohash_prefix(
    geohash_prefix: str = Query(..., alias="geohashPrefix", min_length=1, max_length=12),  # noqa: B008
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
    deadline: Deadline = Depends(get_deadline),  # noqa: B008
) -> list[AddressResponse]:
    """List addresses whose geohash starts with a prefix."""
    return _many(await run_query(orchestrator.query_by_geohash_prefix(geohash_prefix, deadline)))


@geocoding_router.get("/nearest", response_model=AddressResponse)
async def nearest_cached(
    latitude: float = Query(..., ge=-90, le=90),  # noqa: B008
    longitude: float = Query(..., ge=-180, le=180),  # noqa: B008
    orchestrator: GeoQueryOrchestrator = Depends(get_orchestrator),  # noqa: B008
) -> AddressResponse:
    """Return the closest address currently held in the cache."""
    return _found(orchestrator.nearest_cached(latitude, longitude), "Cache is empty")
