"""CLI commands that query the analysis store.

Commands:
    dashboard           Aggregate stored analyses (whole tree or a subtree).
    search              Search by metadata filters or file name.
    search-options      List the distinct values of every filter.
    compare PATHS...    Compare two or more stored analyses.
"""

from __future__ import annotations

import click

from media_analyzer.analysis import compare_analyses, lookup_stored
from media_analyzer.cli.context import get_runtime_from_context
from media_analyzer.cli.exit_codes import ExitCode
from media_analyzer.cli.output import emit_json, error_exit
from media_analyzer.core import PathEscapeError
from media_analyzer.db import StoreUnavailableError
from media_analyzer.search import SCOPE_ALL, SCOPE_CURRENT, SearchRequest

_SCOPE_CHOICE = click.Choice([SCOPE_ALL, SCOPE_CURRENT])


@click.command("dashboard")
@click.option(
    "--scope",
    type=_SCOPE_CHOICE,
    default=SCOPE_ALL,
    show_default=True,
    help="Aggregate the whole tree or only --base-path.",
)
@click.option(
    "--base-path",
    default="",
    help="Directory for --scope current (relative to the root).",
)
@click.pass_context
def dashboard_command(ctx: click.Context, scope: str, base_path: str) -> None:
    """Print dashboard statistics over stored analyses."""
    runtime = get_runtime_from_context(ctx)
    try:
        runtime.store.require()
        prefix = runtime.search_engine().scope_prefix(scope, base_path)
    except StoreUnavailableError as e:
        error_exit(str(e), ExitCode.DATABASE_ERROR)
    except PathEscapeError as e:
        error_exit(str(e), ExitCode.PATH_OUTSIDE_ROOT)
    emit_json({"dashboard": runtime.store.aggregate(prefix).to_dict()})


@click.command("search")
@click.option("--kind", default="", help="Media kind (video, audio, image).")
@click.option("--container", default="", help="Container format name.")
@click.option("--video-codec", default="", help="Video codec name.")
@click.option("--audio-codec", default="", help="Audio codec name.")
@click.option("--resolution", default="", help="Resolution as WIDTHxHEIGHT.")
@click.option("--name", default="", help="Case-insensitive substring of the path.")
@click.option("--limit", type=click.IntRange(min=0), default=None)
@click.option("--offset", type=click.IntRange(min=0), default=0)
@click.option("--scope", type=_SCOPE_CHOICE, default=SCOPE_ALL, show_default=True)
@click.option("--base-path", default="")
@click.pass_context
def search_command(
    ctx: click.Context,
    kind: str,
    container: str,
    video_codec: str,
    audio_codec: str,
    resolution: str,
    name: str,
    limit: int | None,
    offset: int,
    scope: str,
    base_path: str,
) -> None:
    """Search analyses by metadata, or files by name.

    Any metadata filter searches stored analyses only. A name-only search
    walks the media tree and marks files without an analysis as
    "analyzed": false. With no filter at all nothing is returned.

    \b
    Examples:
        media-analyzer search --kind video --resolution 1920x1080
        media-analyzer search --name holiday --scope current --base-path trips
    """
    request = SearchRequest.from_dict(
        {
            "kind": kind,
            "container": container,
            "videoCodec": video_codec,
            "audioCodec": audio_codec,
            "resolution": resolution,
            "name": name,
            "scope": scope,
            "basePath": base_path,
            "limit": limit,
            "offset": offset,
        }
    )
    runtime = get_runtime_from_context(ctx)
    try:
        result = runtime.search_engine().search(request)
    except PathEscapeError as e:
        error_exit(str(e), ExitCode.PATH_OUTSIDE_ROOT)
    emit_json(result.to_dict())


@click.command("search-options")
@click.pass_context
def search_options_command(ctx: click.Context) -> None:
    """List distinct stored values for every search filter."""
    runtime = get_runtime_from_context(ctx)
    emit_json(runtime.store.get_search_options())


@click.command("compare")
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def compare_command(ctx: click.Context, paths: tuple[str, ...]) -> None:
    """Compare the stored analyses of two or more files."""
    runtime = get_runtime_from_context(ctx)
    try:
        lookup = lookup_stored(runtime.media_root, paths, runtime.store)
    except StoreUnavailableError as e:
        error_exit(str(e), ExitCode.DATABASE_ERROR)
    except PathEscapeError as e:
        error_exit(str(e), ExitCode.PATH_OUTSIDE_ROOT)

    ok_records = [r for r in lookup.records if r.is_ok]
    if len(ok_records) < 2:
        failed = [r.path for r in lookup.records if not r.is_ok]
        error_exit(
            f"Need at least 2 analyzed files to compare; unusable: {failed}",
            ExitCode.INVALID_ARGUMENTS,
        )
    emit_json(compare_analyses(ok_records).to_dict())
