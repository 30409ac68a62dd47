"""CLI watch command: keep the store current as files change."""

from __future__ import annotations

import logging
import signal
import threading

import click

from media_analyzer.cli.context import get_runtime_from_context
from media_analyzer.cli.exit_codes import ExitCode
from media_analyzer.cli.output import error_exit

logger = logging.getLogger(__name__)


@click.command("watch")
@click.option(
    "--debounce",
    type=click.FloatRange(min=0),
    default=None,
    help="Quiet period in seconds before a changed file is reanalyzed.",
)
@click.pass_context
def watch_command(ctx: click.Context, debounce: float | None) -> None:
    """Watch the media root and reanalyze files as they change.

    Runs until interrupted with Ctrl+C or SIGTERM.
    """
    runtime = get_runtime_from_context(ctx)
    if not runtime.store.enabled:
        error_exit(
            "Database is not configured; watch needs a store",
            ExitCode.DATABASE_ERROR,
        )

    watcher = runtime.change_watcher(debounce_seconds=debounce)

    stop_event = threading.Event()

    def handle_shutdown_signal(signum: int, frame: object) -> None:
        logger.info("Received %s, stopping watcher", signal.Signals(signum).name)
        stop_event.set()

    previous = signal.signal(signal.SIGTERM, handle_shutdown_signal)
    watcher.start()
    try:
        if not watcher.is_running:
            error_exit(
                f"Media root is not a directory: {runtime.media_root}",
                ExitCode.TARGET_NOT_FOUND,
            )
        stop_event.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping watcher")
    finally:
        watcher.stop()
        signal.signal(signal.SIGTERM, previous)
