"""Initial migration: addresses table with coordinate and geohash indexes.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "addresses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("zipcode", sa.String(6), nullable=False),
        sa.Column("number", sa.String(30), nullable=False),
        sa.Column("street", sa.String(200), nullable=False),
        sa.Column("street2", sa.String(20), nullable=True),
        sa.Column("city", sa.String(50), nullable=False),
        sa.Column("state", sa.String(2), nullable=False),
        sa.Column("plus4", sa.String(4), nullable=True),
        sa.Column("country", sa.String(2), nullable=False, server_default="US"),
        sa.Column("latitude", sa.Double, nullable=False),
        sa.Column("longitude", sa.Double, nullable=False),
        sa.Column("source", sa.String(40), nullable=True),
        sa.Column("geohash", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_addresses_lat_lon", "addresses", ["latitude", "longitude"])
    op.create_index(
        "ix_addresses_geohash_prefix",
        "addresses",
        ["geohash"],
        postgresql_ops={"geohash": "text_pattern_ops"},
    )
    op.create_index(
        "ix_addresses_lookup",
        "addresses",
        ["zipcode", "number", "street", "city", "state", "country"],
    )


def downgrade() -> None:
    op.drop_index("ix_addresses_lookup", table_name="addresses")
    op.drop_index("ix_addresses_geohash_prefix", table_name="addresses")
    op.drop_index("ix_addresses_lat_lon", table_name="addresses")
    op.drop_table("addresses")
