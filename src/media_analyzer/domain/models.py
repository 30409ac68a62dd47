"""Domain models for Media Analyzer.

An Analysis Record is the canonical metadata unit for one file. It is a
tagged union of two shapes:

- AnalysisOk: the probe succeeded and every field was attempted.
- AnalysisFailed: the probe failed (or the path is not a regular file); only
  path, kind guess, stat fields and the error message are known.

Both shapes serialize to the same camelCase JSON document that callers,
the HTTP layer and the database blob all share.
"""

from __future__ import annotations

import os
import posixpath
import stat as stat_module
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from media_analyzer.domain.enums import MediaKind

Number = int | float


@dataclass(frozen=True)
class FileStat:
    """Filesystem facts about one path, as reported by stat()."""

    size: int
    modified_time: float  # POSIX timestamp, seconds
    is_regular_file: bool

    @classmethod
    def from_path(cls, path: Path) -> FileStat:
        """Stat a path (following symlinks).

        Raises:
            OSError: If the path does not exist or cannot be stat'ed.
        """
        st = os.stat(path)
        return cls(
            size=st.st_size,
            modified_time=st.st_mtime,
            is_regular_file=stat_module.S_ISREG(st.st_mode),
        )

    @property
    def signature(self) -> tuple[float, int]:
        """(mtime, size) pair used to detect content changes."""
        return (self.modified_time, self.size)


@dataclass(frozen=True)
class ContainerInfo:
    """Container-level format information."""

    format_name: str | None = None
    format_long_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "formatName": self.format_name,
            "formatLongName": self.format_long_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContainerInfo:
        return cls(
            format_name=data.get("formatName"),
            format_long_name=data.get("formatLongName"),
        )


@dataclass(frozen=True)
class VideoInfo:
    """Primary video stream information."""

    codec: str | None = None
    codec_long_name: str | None = None
    width: Number | None = None
    height: Number | None = None
    pixel_format: str | None = None
    frame_rate: str | None = None  # Kept as reported, e.g. "30000/1001"

    @property
    def resolution(self) -> str | None:
        """Return "WxH" when both dimensions are positive numbers."""
        if self.width is None or self.height is None:
            return None
        if self.width <= 0 or self.height <= 0:
            return None
        return f"{_format_number(self.width)}x{_format_number(self.height)}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "codec": self.codec,
            "codecLongName": self.codec_long_name,
            "width": self.width,
            "height": self.height,
            "pixelFormat": self.pixel_format,
            "frameRate": self.frame_rate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VideoInfo:
        return cls(
            codec=data.get("codec"),
            codec_long_name=data.get("codecLongName"),
            width=data.get("width"),
            height=data.get("height"),
            pixel_format=data.get("pixelFormat"),
            frame_rate=data.get("frameRate"),
        )


@dataclass(frozen=True)
class AudioInfo:
    """Primary audio stream information."""

    codec: str | None = None
    codec_long_name: str | None = None
    sample_rate: Number | None = None
    channels: Number | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "codec": self.codec,
            "codecLongName": self.codec_long_name,
            "sampleRate": self.sample_rate,
            "channels": self.channels,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AudioInfo:
        return cls(
            codec=data.get("codec"),
            codec_long_name=data.get("codecLongName"),
            sample_rate=data.get("sampleRate"),
            channels=data.get("channels"),
        )


@dataclass(frozen=True)
class AnalysisOk:
    """Analysis Record for a file the probe understood."""

    path: str
    kind: MediaKind
    size_bytes: int
    modified_at: str  # ISO 8601 UTC
    container: ContainerInfo | None = None
    video: VideoInfo | None = None
    audio: AudioInfo | None = None
    duration_sec: Number | None = None
    bit_rate: Number | None = None
    stream_count: int = 0

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def error(self) -> None:
        return None

    @property
    def is_ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the canonical camelCase document."""
        return {
            "path": self.path,
            "name": self.name,
            "kind": self.kind.value,
            "sizeBytes": self.size_bytes,
            "modifiedAt": self.modified_at,
            "container": self.container.to_dict() if self.container else None,
            "video": self.video.to_dict() if self.video else None,
            "audio": self.audio.to_dict() if self.audio else None,
            "durationSec": self.duration_sec,
            "bitRate": self.bit_rate,
            "raw": {"streamCount": self.stream_count},
        }


@dataclass(frozen=True)
class AnalysisFailed:
    """Analysis Record for a file that could not be probed."""

    path: str
    kind: MediaKind
    error: str
    size_bytes: int | None = None
    modified_at: str | None = None

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)

    @property
    def is_ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the canonical camelCase document."""
        return {
            "path": self.path,
            "name": self.name,
            "kind": self.kind.value,
            "sizeBytes": self.size_bytes,
            "modifiedAt": self.modified_at,
            "error": self.error,
        }


AnalysisRecord = AnalysisOk | AnalysisFailed


def record_from_dict(data: dict[str, Any]) -> AnalysisRecord:
    """Rebuild an Analysis Record from its canonical document.

    A document carrying a non-empty ``error`` becomes AnalysisFailed; any
    other document is treated as AnalysisOk.

    Raises:
        KeyError: If ``path`` is missing.
        ValueError: If ``kind`` is not a known MediaKind value.
    """
    kind = MediaKind(data.get("kind") or MediaKind.UNKNOWN.value)

    if data.get("error"):
        return AnalysisFailed(
            path=data["path"],
            kind=kind,
            error=str(data["error"]),
            size_bytes=data.get("sizeBytes"),
            modified_at=data.get("modifiedAt"),
        )

    container = data.get("container")
    video = data.get("video")
    audio = data.get("audio")
    raw = data.get("raw") or {}
    return AnalysisOk(
        path=data["path"],
        kind=kind,
        size_bytes=data.get("sizeBytes", 0),
        modified_at=data.get("modifiedAt", ""),
        container=ContainerInfo.from_dict(container) if container else None,
        video=VideoInfo.from_dict(video) if video else None,
        audio=AudioInfo.from_dict(audio) if audio else None,
        duration_sec=data.get("durationSec"),
        bit_rate=data.get("bitRate"),
        stream_count=raw.get("streamCount", 0),
    )


def _format_number(value: Number) -> str:
    """Render integral floats without a trailing ".0"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
