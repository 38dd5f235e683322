"""Configuration management for mdserve.

Supports an optional TOML configuration file with auto-discovery. Values given
on the command line take precedence over the file.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILENAME = "mdserve.toml"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def parse_sources(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated list of URLs.

    Entries are trimmed of surrounding whitespace and empty entries dropped.
    """
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class ServerConfig:
    """Immutable process configuration shared by all request handlers."""

    root: Path
    stylesheets: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    config_path: Path | None = field(default=None, compare=False)

    @classmethod
    def load(
        cls,
        root: Path,
        config_path: Path | None = None,
        *,
        stylesheets: tuple[str, ...] | None = None,
        scripts: tuple[str, ...] | None = None,
        host: str | None = None,
        port: int | None = None,
    ) -> ServerConfig:
        """Build configuration from an optional file and CLI overrides.

        If config_path is provided, loads from that file. Otherwise, searches
        for mdserve.toml in the current directory and parents.

        Args:
            root: Directory to serve
            config_path: Optional explicit path to config file
            stylesheets: Override page.css
            scripts: Override page.js
            host: Override server.host
            port: Override server.port

        Returns:
            ServerConfig with the canonical absolute root

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid or root is not a directory
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
        else:
            config_path = cls._discover_config()

        data: dict = {}
        if config_path is not None:
            with config_path.open("rb") as f:
                data = tomllib.load(f)

        server = _parse_section(data, "server")
        page = _parse_section(data, "page")

        file_host = server.get("host", DEFAULT_HOST)
        if not isinstance(file_host, str):
            raise ValueError("server.host must be a string")

        file_port = server.get("port", DEFAULT_PORT)
        if not isinstance(file_port, int) or isinstance(file_port, bool):
            raise ValueError("server.port must be an integer")

        resolved_root = root.resolve()
        if not resolved_root.is_dir():
            raise ValueError(f"Root is not a directory: {root}")

        return cls(
            root=resolved_root,
            stylesheets=stylesheets if stylesheets is not None else _parse_urls(page, "css"),
            scripts=scripts if scripts is not None else _parse_urls(page, "js"),
            host=host if host is not None else file_host,
            port=port if port is not None else file_port,
            config_path=config_path,
        )

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent


def _parse_section(data: dict, name: str) -> dict:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"{name} section must be a dictionary")
    return section


def _parse_urls(section: dict, key: str) -> tuple[str, ...]:
    raw = section.get(key, [])
    if not isinstance(raw, list):
        raise ValueError(f"page.{key} must be a list")
    urls: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise ValueError(f"page.{key} items must be strings")
        if item.strip():
            urls.append(item.strip())
    return tuple(urls)
