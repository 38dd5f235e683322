"""Shared test fixtures."""

from pathlib import Path

import pytest
from aiohttp import web

from mdserve.config import ServerConfig
from mdserve.server import create_app


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Create the served root directory.

    Resolved so comparisons against canonical paths hold on systems where
    the temp directory sits behind a symlink.
    """
    docs = tmp_path / "docs"
    docs.mkdir()
    return docs.resolve()


@pytest.fixture
def test_config(docs_dir: Path) -> ServerConfig:
    """Create a test configuration serving docs_dir."""
    return ServerConfig(
        root=docs_dir,
        stylesheets=("/style.css",),
        scripts=("/app.js",),
    )


@pytest.fixture
def app(test_config: ServerConfig) -> web.Application:
    return create_app(test_config)
