"""CLI serve command: run the JSON API server.

SIGTERM and SIGINT stop the server after in-flight requests finish.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import signal
import sys

import click

from media_analyzer.cli.context import get_config_from_context, get_runtime_from_context
from media_analyzer.cli.exit_codes import ExitCode
from media_analyzer.runtime import Runtime

logger = logging.getLogger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


def _stop_on_signals(loop: asyncio.AbstractEventLoop) -> asyncio.Event:
    stop = asyncio.Event()

    def on_signal(sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down", sig.name)
        stop.set()

    for sig in _SHUTDOWN_SIGNALS:
        loop.add_signal_handler(sig, on_signal, sig)
    return stop


async def run_server(
    runtime: Runtime, bind: str, port: int, shutdown_timeout: float = 30.0
) -> int:
    """Serve the API for ``runtime`` until SIGTERM or SIGINT.

    The app closes the runtime during cleanup. Returns 0 after a clean
    stop and 1 when the address cannot be bound.
    """
    from aiohttp import web

    from media_analyzer.server.app import create_app

    loop = asyncio.get_running_loop()
    stop = _stop_on_signals(loop)
    runner = web.AppRunner(create_app(runtime))
    await runner.setup()

    exit_code = 0
    try:
        await web.TCPSite(runner, bind, port).start()
        logger.info("Serving %s on http://%s:%d", runtime.media_root, bind, port)
        await stop.wait()
    except OSError as e:
        logger.error("Cannot listen on %s:%d: %s", bind, port, e)
        exit_code = 1
    finally:
        for sig in _SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(sig)
        try:
            await asyncio.wait_for(runner.cleanup(), timeout=shutdown_timeout)
        except asyncio.TimeoutError:
            logger.warning("Cleanup did not finish within %.1fs", shutdown_timeout)
        logger.info("Server stopped")

    return exit_code


@click.command("serve")
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=click.IntRange(1, 65535),
    default=None,
    help="Port to bind to (default: 3000).",
)
@click.option(
    "--watch/--no-watch",
    default=None,
    help="Reanalyze files as they change (default: from config, on).",
)
@click.pass_context
def serve_command(
    ctx: click.Context,
    bind: str | None,
    port: int | None,
    watch: bool | None,
) -> None:
    """Run the JSON API server.

    The server binds to localhost by default. Override with --bind to
    expose it on other interfaces.

    \b
    Examples:
        media-analyzer serve
        media-analyzer serve --port 9000 --no-watch
    """
    config = get_config_from_context(ctx)
    if watch is not None:
        config = dataclasses.replace(
            config, watch=dataclasses.replace(config.watch, enabled=watch)
        )
        ctx.find_root().obj["config"] = config

    server_bind = bind if bind is not None else config.server.bind
    server_port = port if port is not None else config.server.port

    # The app closes the runtime on cleanup
    runtime = get_runtime_from_context(ctx)

    try:
        exit_code = asyncio.run(
            run_server(
                runtime,
                server_bind,
                server_port,
                config.server.shutdown_timeout,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        sys.exit(ExitCode.INTERRUPTED)
    sys.exit(exit_code)
