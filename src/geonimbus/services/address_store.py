"""SQL address store: durable fallback behind the spatial cache.

Opens one session per call from an ``async_sessionmaker``.  Database and
connectivity errors, and rows that cannot be mapped to a valid
AddressRecord, surface as AddressStoreError; an empty match is returned
as None or an empty list.
"""

from loguru import logger
from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from geonimbus.lib.spatial_cache import (
    AddressRecord,
    AddressStore,
    AddressStoreError,
    BoundingBox,
    GeohashCodec,
    haversine_m,
    meters_to_degrees,
)
from geonimbus.models.address import Address

DEFAULT_MAX_DISTANCE_M = 50.0


def to_record(row: Address) -> AddressRecord:
    """Map an Address row to an AddressRecord.

    Raises:
        ValueError: If the row's coordinates are missing or out of range.
    """
    return AddressRecord(
        id=row.id,
        zipcode=row.zipcode,
        number=row.number,
        street=row.street,
        street2=row.street2,
        city=row.city,
        state=row.state,
        plus4=row.plus4,
        country=row.country,
        latitude=row.latitude,
        longitude=row.longitude,
        source=row.source,
        geohash=row.geohash,
    )


class SqlAddressStore(AddressStore):
    """AddressStore backed by the ``addresses`` table.

    Args:
        session_factory: Factory producing async sessions.
        codec: Geohash codec used to fill in missing geohashes on insert.
        max_distance_m: Reverse-geocode search radius in meters.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        codec: GeohashCodec,
        *,
        max_distance_m: float = DEFAULT_MAX_DISTANCE_M,
    ) -> None:
        self._session_factory = session_factory
        self._codec = codec
        self._max_distance_m = max_distance_m

    async def _fetch(self, operation: str, stmt: Select[tuple[Address]]) -> list[AddressRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [to_record(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Address store {operation} failed: {e}")
            raise AddressStoreError(operation, "Address store query failed") from e
        except ValueError as e:
            logger.warning(f"Address store {operation} returned a malformed row: {e}")
            raise AddressStoreError(operation, f"Malformed address row: {e}") from e

    async def _fetch_one(self, operation: str, stmt: Select[tuple[Address]]) -> AddressRecord | None:
        records = await self._fetch(operation, stmt.limit(1))
        return records[0] if records else None

    async def get_by_id(self, address_id: int) -> AddressRecord | None:
        return await self._fetch_one("get_by_id", select(Address).where(Address.id == address_id))

    async def geocode(
        self,
        zipcode: str,
        number: str,
        street: str,
        city: str,
        state: str,
        country: str,
    ) -> AddressRecord | None:
        stmt = (
            select(Address)
            .where(
                Address.zipcode == zipcode,
                Address.number == number,
                Address.street == street,
                Address.city == city,
                Address.state == state,
                Address.country == country,
            )
            .order_by(Address.id)
        )
        return await self._fetch_one("geocode", stmt)

    async def reverse_geocode(self, latitude: float, longitude: float) -> AddressRecord | None:
        """Return the closest address within ``max_distance_m`` of the point.

        Candidates come from a degree window around the point and are then
        ranked by great-circle distance.
        """
        delta = meters_to_degrees(self._max_distance_m, latitude)
        stmt = (
            select(Address)
            .where(
                Address.latitude.between(latitude - delta, latitude + delta),
                Address.longitude.between(longitude - delta, longitude + delta),
            )
            .order_by(Address.id)
        )
        candidates = await self._fetch("reverse_geocode", stmt)

        ranked = [(haversine_m(latitude, longitude, c.latitude, c.longitude), c) for c in candidates]
        within = [pair for pair in ranked if pair[0] <= self._max_distance_m]
        if not within:
            return None
        return min(within, key=lambda pair: pair[0])[1]

    async def query_by_bounding_box(self, box: BoundingBox) -> list[AddressRecord]:
        stmt = (
            select(Address)
            .where(
                Address.latitude.between(box.min_lat, box.max_lat),
                Address.longitude.between(box.min_lon, box.max_lon),
            )
            .order_by(Address.id)
        )
        return await self._fetch("query_by_bounding_box", stmt)

    async def query_by_geohash_prefix(self, geohash_prefix: str) -> list[AddressRecord]:
        stmt = select(Address).where(Address.geohash.like(f"{geohash_prefix}%")).order_by(Address.id)
        return await self._fetch("query_by_geohash_prefix", stmt)

    async def query_by_geohash(self, geohash: str) -> AddressRecord | None:
        stmt = select(Address).where(Address.geohash == geohash).order_by(Address.id)
        return await self._fetch_one("query_by_geohash", stmt)

    async def insert(self, record: AddressRecord) -> AddressRecord:
        """Persist a new address and return it with its assigned id.

        The geohash is computed from the coordinates when the record has none.

        Raises:
            AddressStoreError: If the insert fails.
        """
        geohash = record.geohash or self._codec.encode(record.latitude, record.longitude)
        row = Address(
            zipcode=record.zipcode,
            number=record.number,
            street=record.street,
            street2=record.street2,
            city=record.city,
            state=record.state,
            plus4=record.plus4,
            country=record.country,
            latitude=record.latitude,
            longitude=record.longitude,
            source=record.source,
            geohash=geohash,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Address store insert failed: {e}")
            raise AddressStoreError("insert", "Address insert failed") from e
        return to_record(row)
