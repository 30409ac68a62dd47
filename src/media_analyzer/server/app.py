"""HTTP application for the JSON API.

The Application holds one Runtime (store, prober, search engine, in-flight
guard) and, when watching is enabled, a ChangeWatcher that starts with the
app and stops on cleanup.
"""

from __future__ import annotations

import logging

from aiohttp import web

from media_analyzer.runtime import Runtime
from media_analyzer.server.middleware import (
    error_middleware,
    request_logging_middleware,
)
from media_analyzer.server.routes import setup_api_routes

logger = logging.getLogger(__name__)


async def _start_watcher(app: web.Application) -> None:
    runtime: Runtime = app["runtime"]
    if not runtime.config.watch.enabled:
        logger.info("Change watcher disabled by configuration")
        return
    if not runtime.store.enabled:
        logger.info("Change watcher not started: no database configured")
        return

    watcher = runtime.change_watcher()
    watcher.start()
    app["watcher"] = watcher


async def _stop_watcher(app: web.Application) -> None:
    watcher = app.get("watcher")
    if watcher is not None:
        watcher.stop()
        app["watcher"] = None


async def _close_runtime(app: web.Application) -> None:
    logger.debug("Closing analysis store")
    app["runtime"].close()


def create_app(runtime: Runtime) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        runtime: Collaborators built from the loaded configuration. The
            app takes ownership and closes its store on cleanup.

    Returns:
        Configured aiohttp Application.
    """
    app = web.Application(
        middlewares=[request_logging_middleware, error_middleware],
        client_max_size=2 * 1024 * 1024,
    )
    app["runtime"] = runtime
    app["watcher"] = None

    setup_api_routes(app)

    app.on_startup.append(_start_watcher)
    app.on_cleanup.append(_stop_watcher)
    app.on_cleanup.append(_close_runtime)

    return app
