"""Root logger setup for the CLI and the API server."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

from media_analyzer.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from media_analyzer.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    """Return a rotating handler for ``config.file``, or None if unusable."""
    path = config.file.expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # Logging is not up yet, so the warning goes straight to stderr
        sys.stderr.write(f"Warning: Could not open log file {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to ``config``.

    Records go to the log file when one is configured and can be opened,
    and to stderr when ``include_stderr`` is set or there is no file.
    """
    level = logging.getLevelName(config.level.upper())
    if config.format.casefold() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)

    handlers: list[logging.Handler] = []
    if config.file is not None:
        file_handler = _open_log_file(config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
