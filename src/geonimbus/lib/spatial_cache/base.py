"""Core value types and the abstract durable address store interface."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_COUNTRY = "US"


def validate_coordinates(latitude: float, longitude: float) -> None:
    """Validate a WGS84 coordinate pair.

    Raises:
        ValueError: If either value is NaN or out of range.
    """
    if math.isnan(latitude) or math.isnan(longitude):
        msg = f"coordinates must not be NaN, got ({latitude}, {longitude})"
        raise ValueError(msg)
    if not (-90 <= latitude <= 90):
        msg = f"latitude must be between -90 and 90, got {latitude}"
        raise ValueError(msg)
    if not (-180 <= longitude <= 180):
        msg = f"longitude must be between -180 and 180, got {longitude}"
        raise ValueError(msg)


@dataclass
class AddressRecord:
    """A postal address with its geographic position.

    ``id`` is assigned by the durable store; ``0`` marks a record that has
    not been persisted yet.
    """

    zipcode: str
    number: str
    street: str
    city: str
    state: str
    latitude: float
    longitude: float
    id: int = 0
    country: str = DEFAULT_COUNTRY
    street2: str | None = None
    plus4: str | None = None
    source: str | None = None
    geohash: str | None = None

    def __post_init__(self) -> None:
        validate_coordinates(self.latitude, self.longitude)
        if not self.country:
            self.country = DEFAULT_COUNTRY


@dataclass(frozen=True)
class Location:
    """Centre point of a decoded geohash cell."""

    latitude: float
    longitude: float
    geohash: str


@dataclass(frozen=True)
class BoundingBox:
    """Closed latitude/longitude rectangle.

    Bounds are not clamped to the valid coordinate range: boxes derived
    from a radius near the poles may extend past them.
    """

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self) -> None:
        values = (self.min_lat, self.max_lat, self.min_lon, self.max_lon)
        if any(math.isnan(v) for v in values):
            msg = "bounding box bounds must not be NaN"
            raise ValueError(msg)
        if self.min_lat > self.max_lat:
            msg = f"min_lat ({self.min_lat}) must not exceed max_lat ({self.max_lat})"
            raise ValueError(msg)
        if self.min_lon > self.max_lon:
            msg = f"min_lon ({self.min_lon}) must not exceed max_lon ({self.max_lon})"
            raise ValueError(msg)

    def contains(self, latitude: float, longitude: float) -> bool:
        """Whether the point lies inside the box, edges included."""
        return self.min_lat <= latitude <= self.max_lat and self.min_lon <= longitude <= self.max_lon


class AddressStoreError(Exception):
    """Raised when the durable address store fails.

    Distinguishes store failures (connectivity, malformed rows) from a
    successful query with no match (which returns None or an empty list).

    Args:
        operation: Name of the store operation that failed.
        message: Human-readable error description.
    """

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        self.message = message
        super().__init__(f"{operation}: {message}")


class AddressStore(ABC):
    """Durable address store consulted when the cache cannot answer."""

    @abstractmethod
    async def get_by_id(self, address_id: int) -> AddressRecord | None:
        """Fetch a single address by its store-assigned identifier."""

    @abstractmethod
    async def geocode(
        self,
        zipcode: str,
        number: str,
        street: str,
        city: str,
        state: str,
        country: str,
    ) -> AddressRecord | None:
        """Resolve postal fields to the matching address."""

    @abstractmethod
    async def reverse_geocode(self, latitude: float, longitude: float) -> AddressRecord | None:
        """Return the address closest to a point, if one is close enough."""

    @abstractmethod
    async def query_by_bounding_box(self, box: BoundingBox) -> list[AddressRecord]:
        """Return every address inside the box."""

    @abstractmethod
    async def query_by_geohash_prefix(self, geohash_prefix: str) -> list[AddressRecord]:
        """Return every address whose geohash starts with the prefix."""

    @abstractmethod
    async def query_by_geohash(self, geohash: str) -> AddressRecord | None:
        """Return the address stored under an exact geohash."""
