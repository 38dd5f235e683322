"""CGI gateway transport.

When started by a web server as a CGI program, the request arrives through
environment variables and stdin and the response is written to stdout. The
request is relayed to the regular aiohttp application, which listens on a
private Unix socket for the lifetime of the process, so CGI requests get
exactly the same routing and static file handling as the HTTP listener.
"""

import asyncio
import logging
import sys
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

import aiohttp
from aiohttp import web
from yarl import URL

from mdserve.router import INDEX_DOCUMENT

logger = logging.getLogger(__name__)

# HTTP_PROXY is client-controlled (httpoxy); Connection is hop-by-hop
_IGNORED_HEADERS = frozenset({"PROXY", "CONNECTION"})
_HOP_BY_HOP_HEADERS = frozenset({"connection", "keep-alive", "transfer-encoding"})


@dataclass(frozen=True)
class GatewayRequest:
    """A single request received through the CGI environment."""

    method: str
    path_info: str
    script_name: str
    query_string: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str],
        stdin: BinaryIO | None = None,
    ) -> "GatewayRequest | None":
        """Read the CGI request from the process environment.

        Args:
            environ: Process environment
            stdin: Request body stream, read only when CONTENT_LENGTH is set
                   (default: sys.stdin.buffer)

        Returns:
            GatewayRequest, or None if the process was not invoked as CGI
        """
        method = environ.get("REQUEST_METHOD")
        if not method:
            return None

        headers: dict[str, str] = {}
        for key, value in environ.items():
            if not key.startswith("HTTP_"):
                continue
            name = key[len("HTTP_") :]
            if name in _IGNORED_HEADERS:
                continue
            headers[name.replace("_", "-").title()] = value
        if environ.get("CONTENT_TYPE"):
            headers["Content-Type"] = environ["CONTENT_TYPE"]

        body = b""
        content_length = environ.get("CONTENT_LENGTH", "")
        if content_length.isdigit() and int(content_length) > 0:
            stream = stdin if stdin is not None else sys.stdin.buffer
            body = stream.read(int(content_length))

        return cls(
            method=method.upper(),
            path_info=environ.get("PATH_INFO", ""),
            script_name=environ.get("SCRIPT_NAME", ""),
            query_string=environ.get("QUERY_STRING", ""),
            headers=headers,
            body=body,
        )


@dataclass
class GatewayResponse:
    """Response to be written back to the web server in CGI format."""

    status: int
    reason: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def write_to(self, output: BinaryIO) -> None:
        lines = [f"Status: {self.status} {self.reason}"]
        lines.extend(f"{name}: {value}" for name, value in self.headers)
        head = "\r\n".join(lines) + "\r\n\r\n"
        output.write(head.encode("latin-1"))
        output.write(self.body)
        output.flush()


def index_redirect(request: GatewayRequest) -> GatewayResponse:
    """Redirect a request for the script itself to its index document."""
    location = f"{request.script_name}/{INDEX_DOCUMENT}"
    if request.query_string:
        location += f"?{request.query_string}"
    return GatewayResponse(
        status=301,
        reason="Moved Permanently",
        headers=[
            ("Location", location),
            ("Content-Type", "text/plain; charset=utf-8"),
        ],
        body=b"301: Moved Permanently",
    )


async def dispatch(app: web.Application, request: GatewayRequest) -> GatewayResponse:
    """Answer one CGI request.

    An empty PATH_INFO is redirected to the index document below the script.
    Anything else is relayed to the application with PATH_INFO as the path.
    """
    if not request.path_info:
        return index_redirect(request)

    try:
        return await _relay(app, request)
    except (OSError, aiohttp.ClientError) as e:
        logger.error(f"Error relaying CGI request for {request.path_info}: {e}")
        return GatewayResponse(
            status=500,
            reason="Internal Server Error",
            headers=[("Content-Type", "text/plain; charset=utf-8")],
            body=b"500: Internal Server Error",
        )


async def _relay(app: web.Application, request: GatewayRequest) -> GatewayResponse:
    runner = web.AppRunner(app, access_log=None)
    await runner.setup()
    try:
        with tempfile.TemporaryDirectory(prefix="mdserve-") as tmpdir:
            socket_path = str(Path(tmpdir) / "gateway.sock")
            site = web.UnixSite(runner, socket_path)
            await site.start()

            url = URL.build(
                scheme="http",
                host="localhost",
                path=quote(request.path_info, safe="/"),
                query_string=request.query_string,
                encoded=True,
            )
            connector = aiohttp.UnixConnector(path=socket_path)
            async with aiohttp.ClientSession(connector=connector, auto_decompress=False) as session:
                async with session.request(
                    request.method,
                    url,
                    headers=request.headers,
                    data=request.body or None,
                    allow_redirects=False,
                ) as response:
                    body = await response.read()
                    headers = [
                        (name, _rewrite_location(request.script_name, name, value))
                        for name, value in response.headers.items()
                        if name.lower() not in _HOP_BY_HOP_HEADERS
                    ]
                    return GatewayResponse(
                        status=response.status,
                        reason=response.reason or "",
                        headers=headers,
                        body=body,
                    )
    finally:
        await runner.cleanup()


def _rewrite_location(script_name: str, name: str, value: str) -> str:
    # Root-relative redirects from the app must stay below the script URL
    if name.lower() == "location" and value.startswith("/") and not value.startswith("//"):
        return f"{script_name}{value}"
    return value


def serve_gateway(app: web.Application, request: GatewayRequest, output: BinaryIO) -> None:
    """Handle a CGI request and write the response to output."""
    logger.debug(f"Serving CGI request {request.method} {request.path_info}")
    response = asyncio.run(dispatch(app, request))
    response.write_to(output)
