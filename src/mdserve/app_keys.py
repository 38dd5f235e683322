"""Application keys for type-safe app configuration access."""

from aiohttp import web

from mdserve.config import ServerConfig
from mdserve.core.renderer import PageRenderer

config_key = web.AppKey("config", ServerConfig)
renderer_key = web.AppKey("renderer", PageRenderer)
