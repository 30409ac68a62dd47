"""Core utilities for Media Analyzer.

This package holds helpers shared by the analysis, store, search and
watcher packages:

- Path containment: resolve_within_root, relative_to_root, PathEscapeError
- Tree enumeration: list_all_files, browse_directory
- BoundedCache: fixed-capacity FIFO cache
- run_command: subprocess wrapper with timeout and logging
- Datetime: timestamp_to_iso, utc_now_iso
"""

from collections.abc import Iterator, Sequence
from typing import TypeVar

from media_analyzer.core.cache import BoundedCache
from media_analyzer.core.datetime_utils import timestamp_to_iso, utc_now_iso
from media_analyzer.core.paths import (
    DirectoryListing,
    PathEscapeError,
    ResolvedPath,
    browse_directory,
    list_all_files,
    normalize_relative,
    relative_to_root,
    resolve_within_root,
)
from media_analyzer.core.subprocess_utils import run_command

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


__all__ = [
    # Cache
    "BoundedCache",
    # Datetime
    "timestamp_to_iso",
    "utc_now_iso",
    # Paths
    "DirectoryListing",
    "PathEscapeError",
    "ResolvedPath",
    "browse_directory",
    "list_all_files",
    "normalize_relative",
    "relative_to_root",
    "resolve_within_root",
    # Subprocess
    "run_command",
    # Collections
    "chunked",
]
