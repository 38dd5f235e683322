"""aiohttp server for mdserve.

Application factory plus transport selection: CGI when the process was started
as a CGI program, otherwise a standalone HTTP listener.
"""

import logging
import os
import sys
from collections.abc import Mapping
from typing import BinaryIO

from aiohttp import web

from mdserve.app_keys import config_key, renderer_key
from mdserve.config import ServerConfig
from mdserve.core.renderer import PageRenderer
from mdserve.gateway import GatewayRequest, serve_gateway
from mdserve.router import create_routes

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    app[config_key] = config
    app[renderer_key] = PageRenderer(
        stylesheets=config.stylesheets,
        scripts=config.scripts,
    )

    app.router.add_routes(create_routes())

    return app


def run_server(config: ServerConfig) -> None:
    """Run the standalone HTTP listener.

    Raises:
        OSError: If the listener cannot bind to host:port
    """
    app = create_app(config)
    logger.info(f"Serving HTTP on http://{config.host}:{config.port}")
    web.run_app(app, host=config.host, port=config.port, print=None)


def serve(
    config: ServerConfig,
    environ: Mapping[str, str] | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> None:
    """Serve via CGI if possible, falling back to an HTTP listener.

    Args:
        config: Application configuration
        environ: Process environment (default: os.environ)
        stdin: CGI request body stream (default: sys.stdin.buffer)
        stdout: CGI response stream (default: sys.stdout.buffer)
    """
    environ = os.environ if environ is None else environ
    request = GatewayRequest.from_environ(environ, stdin)

    if request is not None:
        serve_gateway(create_app(config), request, stdout if stdout is not None else sys.stdout.buffer)
        return

    logger.warning("Unable to serve via CGI (no REQUEST_METHOD in environment), falling back to HTTP server")
    run_server(config)
