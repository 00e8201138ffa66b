"""Distance approximations: radius to bounding box, meters to degrees, haversine."""

import math

from geonimbus.lib.spatial_cache.base import BoundingBox

KM_PER_DEGREE = 111.0
METERS_PER_DEGREE = 111_320
EARTH_RADIUS_M = 6_371_008.8


def radius_to_bounding_box(latitude: float, longitude: float, radius_km: float) -> BoundingBox:
    """Project a radius around a point onto a lat/lon bounding box.

    Treats the Earth as locally flat and ignores antimeridian and pole
    wraparound; good enough for city-scale radii.

    Args:
        latitude: Centre latitude.
        longitude: Centre longitude.
        radius_km: Radius in kilometres.

    Returns:
        BoundingBox enclosing the circle.

    Raises:
        ValueError: If the radius is negative or NaN.
    """
    if math.isnan(radius_km) or radius_km < 0:
        msg = f"radius_km must be non-negative, got {radius_km}"
        raise ValueError(msg)

    lat_delta = radius_km / KM_PER_DEGREE
    lon_delta = radius_km / (KM_PER_DEGREE * math.cos(math.radians(latitude)))
    return BoundingBox(
        min_lat=latitude - lat_delta,
        max_lat=latitude + lat_delta,
        min_lon=longitude - abs(lon_delta),
        max_lon=longitude + abs(lon_delta),
    )


def meters_to_degrees(meters: float, latitude: float) -> float:
    """Convert meters to approximate degrees at a given latitude.

    Args:
        meters: Distance in meters.
        latitude: WGS84 latitude for longitude scaling.

    Returns:
        Conservative radius in degrees (max of lat/lng conversions).
    """
    if meters <= 0:
        return 0.0

    lat_deg = meters / METERS_PER_DEGREE
    lng_deg = meters / (METERS_PER_DEGREE * math.cos(math.radians(latitude)))
    return max(lat_deg, abs(lng_deg))


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))
