"""Media-root path containment and enumeration.

Every user-supplied relative path goes through resolve_within_root() before
any filesystem or probe access. Relative paths are POSIX-style and relative
to the media root; "" denotes the root itself.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class PathEscapeError(ValueError):
    """Raised when a relative path resolves outside the media root."""

    pass


@dataclass(frozen=True)
class ResolvedPath:
    """A relative path resolved against the media root."""

    root: Path
    absolute: Path
    relative: str


def normalize_relative(rel_path: str | None) -> str:
    """Normalize a user-supplied relative path.

    Backslashes become forward slashes; leading and trailing slashes are
    stripped.
    """
    cleaned = (rel_path or "").replace("\\", "/")
    return cleaned.strip("/")


def resolve_within_root(media_root: Path | str, rel_path: str | None) -> ResolvedPath:
    """Resolve a relative path against the media root.

    Args:
        media_root: The media root directory.
        rel_path: Path relative to the root ("" for the root itself).

    Returns:
        ResolvedPath with the absolute path and normalized relative path.

    Raises:
        PathEscapeError: If the path resolves outside the root.
    """
    rel = normalize_relative(rel_path)
    root = Path(os.path.abspath(media_root))
    target = Path(os.path.abspath(os.path.join(root, rel)))

    if target != root and root not in target.parents:
        raise PathEscapeError(f"Path escapes media root: {rel_path!r}")

    relative = target.relative_to(root).as_posix()
    if relative == ".":
        relative = ""
    return ResolvedPath(root=root, absolute=target, relative=relative)


def relative_to_root(media_root: Path | str, absolute: Path | str) -> str:
    """Convert an absolute path under the root to a POSIX relative path.

    Raises:
        PathEscapeError: If the path is not under the root.
    """
    root = Path(os.path.abspath(media_root))
    target = Path(os.path.abspath(absolute))
    if target != root and root not in target.parents:
        raise PathEscapeError(f"Path is outside media root: {absolute}")
    # Re-resolve so the result obeys the same rules as user input
    return resolve_within_root(root, target.relative_to(root).as_posix()).relative


def list_all_files(media_root: Path | str, base: str = "") -> list[str]:
    """Return every regular file under ``base`` as sorted relative paths.

    Hidden entries (names starting with ".") are skipped, as are symlinked
    directories. Unreadable directories are logged and skipped.
    """
    resolved = resolve_within_root(media_root, base)
    files: list[str] = []

    walker = os.walk(resolved.absolute, onerror=_log_walk_error)
    for dirpath, dirnames, filenames in walker:
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        rel_dir = Path(dirpath).relative_to(resolved.root).as_posix()
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            if not os.path.isfile(os.path.join(dirpath, filename)):
                continue
            files.append(filename if rel_dir == "." else f"{rel_dir}/{filename}")

    files.sort()
    return files


@dataclass
class DirectoryListing:
    """One directory's immediate children."""

    path: str
    parent: str | None
    dirs: list[str]
    files: list[str]
    total_files: int

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "parent": self.parent,
            "dirs": self.dirs,
            "files": self.files,
            "totalFiles": self.total_files,
        }


def browse_directory(
    media_root: Path | str,
    rel_path: str | None,
    *,
    file_offset: int = 0,
    file_limit: int | None = None,
) -> DirectoryListing:
    """List a directory under the root, paginating only the file list.

    Raises:
        PathEscapeError: If the path escapes the root.
        OSError: If the directory cannot be read.
    """
    resolved = resolve_within_root(media_root, rel_path)

    dirs: list[str] = []
    files: list[str] = []
    with os.scandir(resolved.absolute) as entries:
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                dirs.append(entry.name)
            elif entry.is_file():
                files.append(entry.name)

    dirs.sort()
    files.sort()

    offset = max(0, file_offset)
    page = files[offset:] if file_limit is None else files[offset : offset + file_limit]

    parent = None
    if resolved.relative:
        parent = "/".join(resolved.relative.split("/")[:-1])

    return DirectoryListing(
        path=resolved.relative,
        parent=parent,
        dirs=dirs,
        files=page,
        total_files=len(files),
    )


def _log_walk_error(error: OSError) -> None:
    logger.warning("Skipping unreadable directory %s: %s", error.filename, error)
