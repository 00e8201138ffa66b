"""Typer CLI root application with serve command."""

import typer

from geonimbus.core.config import get_settings
from geonimbus.core.logging import setup_logging

app = typer.Typer(name="geonimbus", help="Geocoding and spatial address query service CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "geonimbus.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from geonimbus.cli.db_cmd import db_app
    from geonimbus.cli.geohash_cmd import geohash_app
    from geonimbus.cli.lookup_cmd import lookup_app

    app.add_typer(db_app, name="db", help="Database migration commands")
    app.add_typer(geohash_app, name="geohash", help="Geohash encode/decode")
    app.add_typer(lookup_app, name="lookup", help="Query addresses through the query engine")


_register_subcommands()
