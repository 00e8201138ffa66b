"""Geohash CLI commands."""

import typer

from geonimbus.lib.spatial_cache import GeohashCodec

geohash_app = typer.Typer()


@geohash_app.command("encode")
def encode(
    lat: float = typer.Option(..., "--lat", help="Latitude (-90 to 90)"),  # noqa: B008
    lon: float = typer.Option(..., "--lon", help="Longitude (-180 to 180)"),  # noqa: B008
    precision: int = typer.Option(8, "--precision", help="Geohash length (1-12)"),
) -> None:
    """Encode a coordinate as a geohash."""
    try:
        typer.echo(GeohashCodec().encode(lat, lon, precision))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@geohash_app.command("decode")
def decode(geohash: str = typer.Argument(..., help="Geohash to decode")) -> None:  # noqa: B008
    """Decode a geohash to the centre of its cell."""
    try:
        location = GeohashCodec().decode(geohash)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    typer.echo(f"{location.latitude}, {location.longitude}")
