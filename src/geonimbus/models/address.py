"""Address model: durable store of postal addresses with coordinates and geohash."""

from sqlalchemy import Double, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from geonimbus.lib.spatial_cache.base import DEFAULT_COUNTRY
from geonimbus.models.base import Base, TimestampMixin


class Address(Base, TimestampMixin):
    """Postal address row; latitude/longitude are the sole spatial key."""

    __tablename__ = "addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    zipcode: Mapped[str] = mapped_column(String(6), nullable=False)
    number: Mapped[str] = mapped_column(String(30), nullable=False)
    street: Mapped[str] = mapped_column(String(200), nullable=False)
    street2: Mapped[str | None] = mapped_column(String(20), nullable=True)
    city: Mapped[str] = mapped_column(String(50), nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False)
    plus4: Mapped[str | None] = mapped_column(String(4), nullable=True)
    country: Mapped[str] = mapped_column(String(2), nullable=False, default=DEFAULT_COUNTRY, server_default=DEFAULT_COUNTRY)
    latitude: Mapped[float] = mapped_column(Double, nullable=False)
    longitude: Mapped[float] = mapped_column(Double, nullable=False)
    source: Mapped[str | None] = mapped_column(String(40), nullable=True)
    geohash: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_addresses_lat_lon", "latitude", "longitude"),
        Index(
            "ix_addresses_geohash_prefix",
            "geohash",
            postgresql_ops={"geohash": "text_pattern_ops"},
        ),
        Index("ix_addresses_lookup", "zipcode", "number", "street", "city", "state", "country"),
    )
