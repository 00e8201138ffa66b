"""Cache-aside query orchestration over a SpatialIndex and a durable AddressStore.

Each public operation probes the index where its query shape allows,
falls back to the store on a miss, and writes fetched records back into
the index. Bounding-box and radius results are deliberately not written
back so bulk scans do not flood the cache.
"""

from collections.abc import Iterable, Sequence

from loguru import logger

from geonimbus.lib.spatial_cache.base import AddressRecord, AddressStore, BoundingBox
from geonimbus.lib.spatial_cache.cancellation import Deadline
from geonimbus.lib.spatial_cache.distance import radius_to_bounding_box
from geonimbus.lib.spatial_cache.geohash import GeohashCodec, is_valid_geohash
from geonimbus.lib.spatial_cache.index import SpatialIndex

DEFAULT_TOLERANCE = 0.0001  # degrees, ~11 m at the equator
GEOCODE_KEY_DELIMITER = ":"


def geocode_cache_key(zipcode: str, number: str, street: str, city: str, state: str, country: str) -> str:
    """Build the cache key under which a forward-geocode result is memoized."""
    return GEOCODE_KEY_DELIMITER.join((zipcode, number, street, city, state, country))


def _unique_by_id(records: Iterable[AddressRecord]) -> list[AddressRecord]:
    # One address can sit under both its id key and a geocode key.
    seen: set[int] = set()
    unique = []
    for record in records:
        if record.id:
            if record.id in seen:
                continue
            seen.add(record.id)
        unique.append(record)
    return unique


class GeoQueryOrchestrator:
    """Cache-aside policy for every address query shape.

    Args:
        store: Durable store consulted on cache misses.
        index: Spatial cache shared by all callers.
        codec: Geohash codec used to turn geohashes into probe points.
        tolerance: Half-width in degrees of the window that treats two
            coordinates as the same point.
    """

    def __init__(
        self,
        store: AddressStore,
        index: SpatialIndex,
        codec: GeohashCodec,
        *,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        if tolerance < 0:
            msg = f"tolerance must be non-negative, got {tolerance}"
            raise ValueError(msg)
        self._store = store
        self._index = index
        self._codec = codec
        self.tolerance = tolerance

    @property
    def index(self) -> SpatialIndex:
        return self._index

    async def get_by_id(self, address_id: int, deadline: Deadline | None = None) -> AddressRecord | None:
        """Fetch an address by store identifier, serving repeats from the cache."""
        deadline = deadline or Deadline()
        key = str(address_id)

        cached = self._index.try_get(key)
        if cached is not None:
            logger.debug(f"Cache hit for address id {address_id}")
            return cached

        logger.debug(f"Cache miss for address id {address_id}")
        address = await deadline.run(self._store.get_by_id(address_id))
        if address is not None:
            self._populate(key, address)
        return address

    async def geocode(
        self,
        zipcode: str,
        number: str,
        street: str,
        city: str,
        state: str,
        country: str,
        deadline: Deadline | None = None,
    ) -> AddressRecord | None:
        """Resolve postal fields to an address, memoized on the six input fields."""
        deadline = deadline or Deadline()
        key = geocode_cache_key(zipcode, number, street, city, state, country)

        cached = self._index.try_get(key)
        if cached is not None:
            logger.debug("Cache hit for geocode (address redacted)")
            return cached

        address = await deadline.run(self._store.geocode(zipcode, number, street, city, state, country))
        if address is not None:
            self._populate(key, address)
        return address

    async def reverse_geocode(
        self,
        latitude: float,
        longitude: float,
        deadline: Deadline | None = None,
    ) -> AddressRecord | None:
        """Resolve a coordinate to an address, treating points within the tolerance as equal."""
        deadline = deadline or Deadline()

        cached = self._probe_point(latitude, longitude)
        if cached is not None:
            logger.debug(f"Cache hit for reverse geocode near ({latitude}, {longitude})")
            return cached

        address = await deadline.run(self._store.reverse_geocode(latitude, longitude))
        if address is not None:
            self._populate(str(address.id), address)
        return address

    async def query_by_bounding_box(
        self,
        box: BoundingBox,
        deadline: Deadline | None = None,
    ) -> list[AddressRecord]:
        """Return addresses inside ``box``.

        Any cached hit answers the query on its own, so a partially cached
        region returns only its cached part. Store results are not cached.
        """
        deadline = deadline or Deadline()

        cached = self._index.query(box.min_lat, box.max_lat, box.min_lon, box.max_lon)
        if cached:
            logger.debug(f"Cache hit for bounding box: {len(cached)} records")
            return _unique_by_id(cached)

        return await deadline.run(self._store.query_by_bounding_box(box))

    async def query_by_radius(
        self,
        latitude: float,
        longitude: float,
        radius_km: float,
        deadline: Deadline | None = None,
    ) -> list[AddressRecord]:
        """Return addresses inside the bounding box that encloses a radius around a point."""
        box = radius_to_bounding_box(latitude, longitude, radius_km)
        return await self.query_by_bounding_box(box, deadline)

    async def batch_reverse_geocode(
        self,
        coordinates: Sequence[tuple[float, float]],
        deadline: Deadline | None = None,
    ) -> list[AddressRecord]:
        """Reverse geocode each coordinate in turn, omitting those with no match.

        Raises:
            OperationCancelledError: If the deadline fires before the batch
                finishes. Results gathered so far are discarded.
        """
        deadline = deadline or Deadline()
        results = []
        for latitude, longitude in coordinates:
            deadline.check()
            address = await self.reverse_geocode(latitude, longitude, deadline)
            if address is not None:
                results.append(address)
        return results

    async def query_by_geohash_prefix(
        self,
        geohash_prefix: str,
        deadline: Deadline | None = None,
    ) -> list[AddressRecord]:
        """Return every stored address under a geohash prefix, caching each one.

        Raises:
            ValueError: If the prefix is empty or not a geohash.
        """
        if not is_valid_geohash(geohash_prefix):
            msg = f"Invalid geohash prefix: {geohash_prefix!r}"
            raise ValueError(msg)
        deadline = deadline or Deadline()

        addresses = await deadline.run(self._store.query_by_geohash_prefix(geohash_prefix))
        for address in addresses:
            self._populate(str(address.id), address)
        return addresses

    async def query_by_geohash(self, geohash: str, deadline: Deadline | None = None) -> AddressRecord | None:
        """Resolve an exact geohash, probing the cache at the cell centre first.

        Raises:
            ValueError: If ``geohash`` is not a valid geohash string.
        """
        deadline = deadline or Deadline()
        location = self._codec.decode(geohash)

        cached = self._probe_point(location.latitude, location.longitude)
        if cached is not None:
            logger.debug(f"Cache hit for geohash {geohash}")
            return cached

        address = await deadline.run(self._store.query_by_geohash(geohash))
        if address is not None:
            self._populate(str(address.id), address)
        return address

    async def preload(self, geohashes: Iterable[str], deadline: Deadline | None = None) -> int:
        """Warm the cache for a list of geohashes.

        Returns:
            How many geohashes resolved to an address.
        """
        deadline = deadline or Deadline()
        resolved = 0
        for geohash in geohashes:
            deadline.check()
            if await self.query_by_geohash(geohash, deadline) is not None:
                resolved += 1
        logger.info(f"Cache preload resolved {resolved} geohashes; {len(self._index)} entries cached")
        return resolved

    def nearest_cached(self, latitude: float, longitude: float) -> AddressRecord | None:
        """Closest cached address to a point, regardless of the tolerance window."""
        return self._index.nearest(latitude, longitude)

    def _probe_point(self, latitude: float, longitude: float) -> AddressRecord | None:
        eps = self.tolerance
        hits = self._index.query(latitude - eps, latitude + eps, longitude - eps, longitude + eps)
        return hits[0] if hits else None

    def _populate(self, key: str, address: AddressRecord) -> None:
        self._index.add(address.latitude, address.longitude, key, address)
