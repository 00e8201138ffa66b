"""ORM models; importing this package registers every table on Base.metadata for Alembic."""

from geonimbus.models.address import Address
from geonimbus.models.base import Base

__all__ = [
    "Address",
    "Base",
]
