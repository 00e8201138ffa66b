"""Pydantic v2 schemas for geocoding, geohash, and cache management endpoints."""

from pydantic import BaseModel, Field


class AddressResponse(BaseModel):
    """Response schema for a single address."""

    model_config = {"from_attributes": True}

    id: int
    zipcode: str
    number: str
    street: str
    street2: str | None = None
    city: str
    state: str
    plus4: str | None = None
    country: str
    latitude: float
    longitude: float
    source: str | None = None
    geohash: str | None = None


class Coordinate(BaseModel):
    """A WGS84 point."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class BatchReverseGeocodeRequest(BaseModel):
    """Request body for POST /geocode/batch-reverse-geocode."""

    coordinates: list[Coordinate] = Field(..., min_length=1, max_length=1000)


class GeohashEncodeResponse(BaseModel):
    """Response for GET /geohash/encode."""

    geohash: str
    precision: int


class LocationResponse(BaseModel):
    """Response for GET /geohash/decode."""

    model_config = {"from_attributes": True}

    latitude: float
    longitude: float
    geohash: str


class CachePreloadRequest(BaseModel):
    """Request body for POST /cache/preload."""

    geohashes: list[str] = Field(..., min_length=1, max_length=1000)


class CachePreloadResponse(BaseModel):
    """Outcome of a cache preload."""

    requested: int
    resolved: int
    cached_entries: int


class CacheStatsResponse(BaseModel):
    """Response for GET /cache/stats."""

    entries: int
    rebuilds: int
    stale: bool
    tolerance_degrees: float


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str = "ok"
    environment: str
