"""Geohash codec endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from geonimbus.core.dependencies import get_geohash_codec
from geonimbus.lib.spatial_cache import GeohashCodec
from geonimbus.schemas.geocoding import GeohashEncodeResponse, LocationResponse

geohash_router = APIRouter(prefix="/geohash", tags=["geohash"])


@geohash_router.get("/encode", response_model=GeohashEncodeResponse)
async def encode_geohash(
    latitude: float = Query(..., ge=-90, le=90),  # noqa: B008
    longitude: float = Query(..., ge=-180, le=180),  # noqa: B008
    precision: int = Query(8, ge=1, le=12),  # noqa: B008
    codec: GeohashCodec = Depends(get_geohash_codec),  # noqa: B008
) -> GeohashEncodeResponse:
    """Encode a coordinate as a geohash."""
    return GeohashEncodeResponse(geohash=codec.encode(latitude, longitude, precision), precision=precision)


@geohash_router.get("/decode", response_model=LocationResponse)
async def decode_geohash(
    geohash: str = Query(..., min_length=1, max_length=12),  # noqa: B008
    codec: GeohashCodec = Depends(get_geohash_codec),  # noqa: B008
) -> LocationResponse:
    """Decode a geohash to the centre of its cell."""
    try:
        location = codec.decode(geohash)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return LocationResponse.model_validate(location)
