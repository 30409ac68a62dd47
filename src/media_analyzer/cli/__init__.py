"""CLI module for Media Analyzer."""

import logging
from pathlib import Path

import click

from media_analyzer.cli.exit_codes import ExitCode
from media_analyzer.cli.output import error_exit
from media_analyzer.config import (
    MediaAnalyzerConfig,
    TomlParseError,
    build_logging_config,
    get_config,
)
from media_analyzer.logging import configure_logging

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config: MediaAnalyzerConfig,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from the loaded config plus CLI overrides.

    Args:
        config: Loaded configuration supplying the base logging settings.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    logging_config = build_logging_config(
        config.logging,
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    configure_logging(logging_config)
    _logging_configured = True


@click.group()
@click.version_option(package_name="media-analyzer")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.media-analyzer/config.toml).",
)
@click.option(
    "--media-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Root of the media tree (default: /media).",
)
@click.option(
    "--database",
    "database_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file; the store is disabled when unset.",
)
@click.option(
    "--ffprobe",
    "ffprobe_path",
    type=click.Path(path_type=Path),
    default=None,
    help="ffprobe executable (default: ffprobe on PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    media_root: Path | None,
    database_path: Path | None,
    ffprobe_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Media Analyzer - Probe, catalog, search and compare media files."""
    ctx.ensure_object(dict)

    # Preserve a config passed in by tests
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = get_config(
                config_path,
                media_root=media_root,
                database_path=database_path,
                ffprobe_path=ffprobe_path,
                strict=config_path is not None,
            )
        except (TomlParseError, ValueError) as e:
            error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR)

    _configure_logging(ctx.obj["config"], log_level, log_file, log_json)


# Defer import to avoid circular dependency
def _register_commands():
    from media_analyzer.cli.analyze import (
        analyze_all_command,
        analyze_command,
        lookup_command,
    )
    from media_analyzer.cli.query import (
        compare_command,
        dashboard_command,
        search_command,
        search_options_command,
    )
    from media_analyzer.cli.serve import serve_command
    from media_analyzer.cli.watch import watch_command

    main.add_command(analyze_command)
    main.add_command(analyze_all_command)
    main.add_command(lookup_command)
    main.add_command(dashboard_command)
    main.add_command(search_command)
    main.add_command(search_options_command)
    main.add_command(compare_command)
    main.add_command(watch_command)
    main.add_command(serve_command)


_register_commands()
