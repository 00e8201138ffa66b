"""Database CLI commands: Alembic migrations and SQLite table creation."""

import asyncio

import typer
from loguru import logger

db_app = typer.Typer()


def _alembic_config():  # type: ignore[no-untyped-def]
    from alembic.config import Config

    return Config("alembic.ini")


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Target revision"),
) -> None:
    """Run database migrations up to the target revision."""
    from alembic import command

    logger.info(f"Upgrading database to {revision}")
    command.upgrade(_alembic_config(), revision)
    logger.info("Database upgrade complete")


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Target revision"),
) -> None:
    """Rollback database migration to the target revision."""
    from alembic import command

    logger.info(f"Downgrading database to {revision}")
    command.downgrade(_alembic_config(), revision)
    logger.info("Database downgrade complete")


@db_app.command()
def current() -> None:
    """Show the current database migration revision."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db_app.command("create-tables")
def create_tables_cmd() -> None:
    """Create missing tables directly from the ORM metadata (development databases)."""
    asyncio.run(_create_tables())


async def _create_tables() -> None:
    from geonimbus.core.config import get_settings
    from geonimbus.core.database import create_tables, dispose_engine, init_engine

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)
    try:
        await create_tables()
        typer.echo("Tables created")
    finally:
        await dispose_engine()
