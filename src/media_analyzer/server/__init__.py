"""aiohttp JSON API for Media Analyzer."""

from media_analyzer.server.app import create_app
from media_analyzer.server.routes import get_api_routes, setup_api_routes

__all__ = [
    "create_app",
    "get_api_routes",
    "setup_api_routes",
]
