"""Geohash codec adapter backed by pygeohash."""

import re

import pygeohash

from geonimbus.lib.spatial_cache.base import Location, validate_coordinates

DEFAULT_PRECISION = 8
MAX_PRECISION = 12

_GEOHASH_RE = re.compile(r"^[0-9bcdefghjkmnpqrstuvwxyz]+$")


def is_valid_geohash(value: str) -> bool:
    """Whether ``value`` is a non-empty lowercase base-32 geohash string."""
    return bool(_GEOHASH_RE.match(value))


class GeohashCodec:
    """Encode coordinates to geohash strings and decode them back to cell centres."""

    def __init__(self, default_precision: int = DEFAULT_PRECISION) -> None:
        self._check_precision(default_precision)
        self.default_precision = default_precision

    @staticmethod
    def _check_precision(precision: int) -> None:
        if not (1 <= precision <= MAX_PRECISION):
            msg = f"precision must be between 1 and {MAX_PRECISION}, got {precision}"
            raise ValueError(msg)

    def encode(self, latitude: float, longitude: float, precision: int | None = None) -> str:
        """Encode a coordinate as a geohash.

        Args:
            latitude: WGS84 latitude.
            longitude: WGS84 longitude.
            precision: Geohash length; defaults to the codec's default precision.

        Returns:
            Geohash string of the requested length.

        Raises:
            ValueError: If the coordinate or precision is out of range.
        """
        precision = self.default_precision if precision is None else precision
        self._check_precision(precision)
        validate_coordinates(latitude, longitude)
        return pygeohash.encode(latitude, longitude, precision=precision)

    def decode(self, geohash: str) -> Location:
        """Decode a geohash to the centre of its cell.

        Raises:
            ValueError: If ``geohash`` contains characters outside the geohash alphabet.
        """
        if not is_valid_geohash(geohash):
            msg = f"Invalid geohash: {geohash!r}"
            raise ValueError(msg)
        latitude, longitude = pygeohash.decode(geohash)
        return Location(latitude=float(latitude), longitude=float(longitude), geohash=geohash)
