"""Request routing.

Resolves the request path under the served root and dispatches to a directory
redirect, a rendered markdown page or plain static file serving.
"""

import logging
import stat
from pathlib import Path

from aiohttp import web

from mdserve.app_keys import config_key, renderer_key
from mdserve.core.paths import resolve_path
from mdserve.errors import PathTraversalError, RenderError

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
INDEX_DOCUMENT = "index.md"


def create_routes() -> list[web.RouteDef]:
    return [web.get("/{path:.*}", handle_request)]


async def handle_request(request: web.Request) -> web.StreamResponse:
    config = request.app[config_key]

    try:
        path = resolve_path(config.root, request.path)
    except PathTraversalError as e:
        logger.warning(f"Forbidden request: {e}")
        raise web.HTTPForbidden(text="Forbidden") from None

    try:
        mode = path.stat().st_mode
    except OSError:
        # Missing or inaccessible; let static serving answer
        return serve_file(path)

    if stat.S_ISDIR(mode):
        raise web.HTTPMovedPermanently(index_location(request.rel_url.raw_path))

    if path.name.endswith(MARKDOWN_SUFFIX):
        return render_page(request, path)

    return serve_file(path)


def index_location(raw_path: str) -> str:
    """Return the index document URL for a directory request path."""
    return f"{raw_path.rstrip('/')}/{INDEX_DOCUMENT}"


def render_page(request: web.Request, path: Path) -> web.Response:
    renderer = request.app[renderer_key]
    try:
        body = renderer.render(path)
    except RenderError as e:
        logger.error(str(e))
        raise web.HTTPInternalServerError(text=e.public_message) from None

    return web.Response(body=body, content_type="text/html", charset="utf-8")


def serve_file(path: Path) -> web.StreamResponse:
    """Serve a file verbatim.

    Content type, byte ranges and conditional requests are handled by
    aiohttp's FileResponse.
    """
    if not path.is_file():
        raise web.HTTPNotFound()
    return web.FileResponse(path)
