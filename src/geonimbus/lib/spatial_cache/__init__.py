"""Spatial cache library: geometry-indexed cache with cache-aside query orchestration.

Public API:
    - AddressRecord: Canonical address value held by the cache
    - BoundingBox: Closed lat/lon rectangle
    - Location: Decoded geohash cell centre
    - AddressStore: Abstract durable store interface
    - AddressStoreError: Durable store failure
    - Deadline / OperationCancelledError: Cooperative cancellation
    - GeohashCodec: pygeohash-backed encode/decode
    - SpatialIndex: Thread-safe key + STRtree index
    - GeoQueryOrchestrator: Cache-aside policy per query shape
    - radius_to_bounding_box / meters_to_degrees / haversine_m: Distance helpers
"""

from geonimbus.lib.spatial_cache.base import (
    AddressRecord,
    AddressStore,
    AddressStoreError,
    BoundingBox,
    Location,
    validate_coordinates,
)
from geonimbus.lib.spatial_cache.cancellation import Deadline, OperationCancelledError
from geonimbus.lib.spatial_cache.distance import haversine_m, meters_to_degrees, radius_to_bounding_box
from geonimbus.lib.spatial_cache.geohash import GeohashCodec, is_valid_geohash
from geonimbus.lib.spatial_cache.index import IndexStats, SpatialIndex
from geonimbus.lib.spatial_cache.orchestrator import DEFAULT_TOLERANCE, GeoQueryOrchestrator, geocode_cache_key

__all__ = [
    "DEFAULT_TOLERANCE",
    "AddressRecord",
    "AddressStore",
    "AddressStoreError",
    "BoundingBox",
    "Deadline",
    "GeoQueryOrchestrator",
    "GeohashCodec",
    "IndexStats",
    "Location",
    "OperationCancelledError",
    "SpatialIndex",
    "geocode_cache_key",
    "haversine_m",
    "is_valid_geohash",
    "meters_to_degrees",
    "radius_to_bounding_box",
    "validate_coordinates",
]
