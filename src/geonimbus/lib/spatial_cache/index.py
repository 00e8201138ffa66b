"""In-memory spatial index over address records.

Records are held in a key map (the source of truth) and mirrored into a
shapely ``STRtree`` for rectangle and nearest-neighbour queries. The
tree is immutable, so a mutation marks it stale and the next geometric
query rebuilds it from the key map. A burst of writes costs one rebuild,
but alternating writes and queries on a large cache costs O(n) per
query. Entries are never evicted: memory grows with every distinct key
for the life of the process.
"""

import math
import threading
from dataclasses import dataclass

from loguru import logger
from shapely import STRtree
from shapely.geometry import MultiPoint, Point

from geonimbus.lib.spatial_cache.base import AddressRecord


@dataclass(frozen=True)
class _Entry:
    latitude: float
    longitude: float
    record: AddressRecord


@dataclass(frozen=True)
class IndexStats:
    """Point-in-time counters for a SpatialIndex."""

    entries: int
    rebuilds: int
    stale: bool


class SpatialIndex:
    """Thread-safe key and geometry index for address records."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}
        self._tree: STRtree | None = None
        self._tree_entries: tuple[_Entry, ...] = ()
        self._stale = False
        self._rebuilds = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def add(self, latitude: float, longitude: float, key: str, record: AddressRecord) -> None:
        """Insert ``record`` under ``key``, replacing any previous entry and its position.

        Raises:
            ValueError: If either coordinate is NaN.
        """
        if math.isnan(latitude) or math.isnan(longitude):
            msg = f"cannot index {key!r} without coordinates"
            raise ValueError(msg)

        entry = _Entry(latitude=latitude, longitude=longitude, record=record)
        with self._lock:
            self._entries[key] = entry
            self._stale = True

    def remove(self, key: str) -> AddressRecord | None:
        """Drop ``key`` from the index, returning the removed record if present."""
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is not None:
                self._stale = True
        return entry.record if entry is not None else None

    def try_get(self, key: str) -> AddressRecord | None:
        """Exact key lookup."""
        with self._lock:
            entry = self._entries.get(key)
        return entry.record if entry is not None else None

    def query(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> list[AddressRecord]:
        """Return every record whose point lies inside the closed rectangle.

        Results follow insertion order. An inverted rectangle matches nothing.
        """
        if min_lat > max_lat or min_lon > max_lon:
            return []

        tree, entries = self._snapshot()
        if tree is None:
            return []

        # Only the extent of the probe matters: query() without a predicate
        # compares envelopes, which also works for zero-width rectangles.
        probe = MultiPoint([(min_lon, min_lat), (max_lon, max_lat)])
        hits = []
        for i in sorted(tree.query(probe)):
            entry = entries[i]
            if min_lat <= entry.latitude <= max_lat and min_lon <= entry.longitude <= max_lon:
                hits.append(entry.record)
        return hits

    def nearest(self, latitude: float, longitude: float) -> AddressRecord | None:
        """Return the record closest to a point, or None when the index is empty.

        Distance is planar in degrees, which is adequate for picking the
        closest of nearby points but not for ranking across large spans.
        """
        tree, entries = self._snapshot()
        if tree is None:
            return None
        index = tree.nearest(Point(longitude, latitude))
        if index is None:
            return None
        return entries[int(index)].record

    def stats(self) -> IndexStats:
        with self._lock:
            return IndexStats(entries=len(self._entries), rebuilds=self._rebuilds, stale=self._stale)

    def _snapshot(self) -> tuple[STRtree | None, tuple[_Entry, ...]]:
        with self._lock:
            if self._stale:
                self._rebuild()
            return self._tree, self._tree_entries

    def _rebuild(self) -> None:
        # Caller holds self._lock.
        entries = tuple(self._entries.values())
        self._tree = STRtree([Point(e.longitude, e.latitude) for e in entries]) if entries else None
        self._tree_entries = entries
        self._stale = False
        self._rebuilds += 1
        logger.debug(f"Rebuilt spatial index with {len(entries)} entries")
