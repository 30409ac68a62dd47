"""Apply command-line logging flags on top of the loaded LoggingConfig."""

from __future__ import annotations

import dataclasses
from pathlib import Path

from media_analyzer.config.models import LoggingConfig


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return a copy of ``base`` with every non-None flag substituted.

    The copy is validated like any other LoggingConfig, so an unknown level
    or format raises ValueError.
    """
    flags = {
        "level": level,
        "file": file,
        "format": format,
        "include_stderr": include_stderr,
    }
    overrides = {name: value for name, value in flags.items() if value is not None}
    return dataclasses.replace(base, **overrides)
