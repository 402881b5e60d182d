#!/usr/bin/env python3
"""
CLI entry point for the bookshelf GraphQL server.
"""

import click
import uvicorn

from . import __version__
from .config import Settings
from .logging import configure_logging, get_logger
from .schema import schema_sdl

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="graphql-bookshelf")
def cli() -> None:
    """Bookshelf GraphQL server."""


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: 0.0.0.0)")
@click.option("--port", default=None, type=int, help="Port to bind to (default: 4000)")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host, port, log_level) -> None:
    """Start the GraphQL server."""
    overrides = {
        key: value
        for key, value in {"host": host, "port": port, "log_level": log_level}.items()
        if value is not None
    }
    settings = Settings(**overrides)
    if settings.log_level == "debug":
        settings.debug = True

    configure_logging(debug=settings.debug, log_level=settings.log_level)

    from .server import create_app

    logger.debug(
        "Starting bookshelf server",
        host=settings.host,
        port=settings.port,
        max_query_depth=settings.max_query_depth,
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


@cli.command("print-schema")
def print_schema() -> None:
    """Print the schema in GraphQL SDL."""
    click.echo(schema_sdl())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
