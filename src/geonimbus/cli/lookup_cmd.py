"""Lookup CLI commands that run queries through the cache-aside engine.

Each invocation starts with an empty cache, so these always reach the
durable store; they are meant for checking store contents and wiring.
"""

import asyncio
from collections.abc import Awaitable, Callable

import typer

from geonimbus.lib.spatial_cache import AddressRecord, Deadline, GeoQueryOrchestrator

lookup_app = typer.Typer()

QueryFn = Callable[[GeoQueryOrchestrator, Deadline], Awaitable[AddressRecord | list[AddressRecord] | None]]


@lookup_app.command("id")
def lookup_id(address_id: int = typer.Argument(..., help="Address id")) -> None:  # noqa: B008
    """Look up an address by id."""
    asyncio.run(_run(lambda o, d: o.get_by_id(address_id, d)))


@lookup_app.command("reverse")
def lookup_reverse(
    lat: float = typer.Option(..., "--lat", help="Latitude (-90 to 90)"),  # noqa: B008
    lon: float = typer.Option(..., "--lon", help="Longitude (-180 to 180)"),  # noqa: B008
) -> None:
    """Reverse geocode a coordinate."""
    asyncio.run(_run(lambda o, d: o.reverse_geocode(lat, lon, d)))


@lookup_app.command("radius")
def lookup_radius(
    lat: float = typer.Option(..., "--lat", help="Latitude (-90 to 90)"),  # noqa: B008
    lon: float = typer.Option(..., "--lon", help="Longitude (-180 to 180)"),  # noqa: B008
    km: float = typer.Option(1.0, "--km", help="Radius in kilometres"),  # noqa: B008
) -> None:
    """List addresses within a radius of a coordinate."""
    asyncio.run(_run(lambda o, d: o.query_by_radius(lat, lon, km, d)))


@lookup_app.command("geohash-prefix")
def lookup_geohash_prefix(prefix: str = typer.Argument(..., help="Geohash prefix")) -> None:  # noqa: B008
    """List addresses under a geohash prefix."""
    asyncio.run(_run(lambda o, d: o.query_by_geohash_prefix(prefix, d)))


def _echo(result: AddressRecord | list[AddressRecord] | None) -> None:
    from geonimbus.schemas.geocoding import AddressResponse

    if result is None or result == []:
        typer.echo("No matching address")
        return
    records = result if isinstance(result, list) else [result]
    for record in records:
        typer.echo(AddressResponse.model_validate(record).model_dump_json())


async def _run(query: QueryFn) -> None:
    """Async implementation shared by all lookup commands."""
    from geonimbus.core.config import get_settings
    from geonimbus.core.database import dispose_engine, get_session_factory, init_engine
    from geonimbus.lib.spatial_cache import AddressStoreError, OperationCancelledError
    from geonimbus.services.query_engine import build_orchestrator

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        orchestrator = build_orchestrator(settings, get_session_factory())
        result = await query(orchestrator, Deadline(settings.api_timeout_seconds))
    except OperationCancelledError as e:
        typer.echo("Error: query timed out", err=True)
        raise typer.Exit(code=1) from e
    except (AddressStoreError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()

    _echo(result)
