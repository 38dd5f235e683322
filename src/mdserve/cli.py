"""CLI interface for mdserve.

Command-line entry point that serves a directory of markdown documents, either
as a CGI program or as a standalone HTTP server.
"""

import logging
import sys
from pathlib import Path

import click

from mdserve.config import ServerConfig, parse_sources

logger = logging.getLogger(__name__)


@click.command()
@click.argument(
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--css",
    default=None,
    help="Comma-separated list of CSS source URLs to include",
)
@click.option(
    "--js",
    default=None,
    help="Comma-separated list of JS source URLs to include",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover mdserve.toml)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind the fallback HTTP server to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port for the fallback HTTP server (overrides config, default: 8000)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(
    root: Path,
    css: str | None,
    js: str | None,
    config_path: Path | None,
    host: str | None,
    port: int | None,
    verbose: bool,
) -> None:
    """Serve markdown files under ROOT as HTML pages."""
    from mdserve.server import serve

    # stdout carries the CGI response, so logs go to stderr
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ServerConfig.load(
            root,
            config_path,
            stylesheets=parse_sources(css) if css is not None else None,
            scripts=parse_sources(js) if js is not None else None,
            host=host,
            port=port,
        )
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if config.config_path is not None:
        logger.debug(f"Configuration file: {config.config_path}")
    else:
        logger.debug("Configuration file: none found, using defaults")
    logger.debug(f"Source directory: {config.root}")

    try:
        serve(config)
    except OSError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
