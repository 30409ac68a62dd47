"""CLI commands that analyze files or read stored analyses.

Commands:
    analyze PATHS...    Probe files now, store and print the records.
    analyze-all         Probe every file under the media root in batches.
    lookup PATHS...     Print stored records without probing.
"""

from __future__ import annotations

import logging

import click

from media_analyzer.analysis import analyze_all, analyze_and_store, lookup_stored
from media_analyzer.cli.context import get_runtime_from_context
from media_analyzer.cli.exit_codes import ExitCode
from media_analyzer.cli.output import emit_json, error_exit
from media_analyzer.core import PathEscapeError
from media_analyzer.db import StoreUnavailableError

logger = logging.getLogger(__name__)


@click.command("analyze")
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def analyze_command(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Analyze files (paths relative to the media root).

    Per-file failures are reported inline as error records; the command
    only fails when a path escapes the media root.

    \b
    Examples:
        media-analyzer analyze movies/a.mkv music/b.flac
    """
    runtime = get_runtime_from_context(ctx)
    store = runtime.store if runtime.store.enabled else None
    try:
        result = analyze_and_store(runtime.media_root, paths, runtime.prober, store)
    except PathEscapeError as e:
        error_exit(str(e), ExitCode.PATH_OUTSIDE_ROOT)
    emit_json(result.to_dict())


@click.command("analyze-all")
@click.option(
    "--base",
    "base_path",
    default="",
    help="Only analyze files under this directory (relative to the root).",
)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=None,
    help="Files per batch (default: from config, 25).",
)
@click.pass_context
def analyze_all_command(
    ctx: click.Context, base_path: str, batch_size: int | None
) -> None:
    """Analyze every file under the media root and store the results.

    Each batch is stored before the next starts, so an interrupted run
    keeps its progress.
    """
    runtime = get_runtime_from_context(ctx)
    if not runtime.store.enabled:
        error_exit(
            "Database is not configured; analyze-all needs a store",
            ExitCode.DATABASE_ERROR,
        )

    try:
        result = analyze_all(
            runtime.media_root,
            runtime.prober,
            runtime.store,
            batch_size=batch_size or runtime.config.analyze.batch_size,
            guard=runtime.guard,
            base=base_path,
        )
    except PathEscapeError as e:
        error_exit(str(e), ExitCode.PATH_OUTSIDE_ROOT)
    except KeyboardInterrupt:
        logger.info("Analyze-all interrupted; completed batches are stored")
        error_exit("Interrupted", ExitCode.INTERRUPTED)
    emit_json(result.to_dict())


@click.command("lookup")
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def lookup_command(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Print stored analyses for files, in the order given.

    Files with no stored analysis are reported as
    "Not analyzed yet (no DB entry)".
    """
    runtime = get_runtime_from_context(ctx)
    try:
        result = lookup_stored(runtime.media_root, paths, runtime.store)
    except StoreUnavailableError as e:
        error_exit(str(e), ExitCode.DATABASE_ERROR)
    except PathEscapeError as e:
        error_exit(str(e), ExitCode.PATH_OUTSIDE_ROOT)
    emit_json(result.to_dict())
