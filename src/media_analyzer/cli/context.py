"""Access to per-invocation state stored on the click context."""

from __future__ import annotations

import click

from media_analyzer.cli.exit_codes import ExitCode
from media_analyzer.cli.output import error_exit
from media_analyzer.config import MediaAnalyzerConfig
from media_analyzer.runtime import Runtime, build_runtime


def get_config_from_context(ctx: click.Context) -> MediaAnalyzerConfig:
    return ctx.find_root().obj["config"]


def get_runtime_from_context(ctx: click.Context) -> Runtime:
    """Return the invocation's Runtime, building it on first use.

    Tests may pre-seed ``store`` and ``prober`` in the root context object.
    The runtime's store is closed when the root context tears down.
    """
    root = ctx.find_root()
    runtime = root.obj.get("runtime")
    if runtime is not None:
        return runtime

    try:
        runtime = build_runtime(
            root.obj["config"],
            store=root.obj.get("store"),
            prober=root.obj.get("prober"),
        )
    except RuntimeError as e:
        error_exit(str(e), ExitCode.DATABASE_ERROR)

    root.obj["runtime"] = runtime
    root.call_on_close(runtime.close)
    return runtime
