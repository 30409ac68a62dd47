"""MediaProber interface and probe outcome types."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol


class ProbeError(Exception):
    """Raised when a media file cannot be probed.

    The message carries the captured diagnostic text (stderr, exit code or
    parse error) so it can be stored on the file's error record.
    """

    pass


@dataclass(frozen=True)
class StreamInfo:
    """One stream as reported by the probe.

    Values are kept exactly as the probe reported them (ffprobe reports
    several numeric fields as strings); numeric coercion happens during
    normalization.
    """

    index: int
    codec_type: str | None = None
    codec_name: str | None = None
    codec_long_name: str | None = None
    width: Any = None
    height: Any = None
    pix_fmt: str | None = None
    r_frame_rate: str | None = None
    sample_rate: Any = None
    channels: Any = None


@dataclass(frozen=True)
class ProbeSuccess:
    """Parsed probe output: container fields plus streams in probe order."""

    format: dict[str, Any] = field(default_factory=dict)
    streams: tuple[StreamInfo, ...] = ()

    def first_stream(self, codec_type: str) -> StreamInfo | None:
        """Return the first stream of a type; probe order breaks ties."""
        for stream in self.streams:
            if stream.codec_type == codec_type:
                return stream
        return None


@dataclass(frozen=True)
class ProbeFailure:
    """A probe that did not produce usable output."""

    diagnostic: str


ProbeOutcome = ProbeSuccess | ProbeFailure


class MediaProber(Protocol):
    """Protocol for media probe implementations.

    Implementations must only read the file; they never modify it.
    """

    def probe(self, path: Path) -> ProbeSuccess:
        """Probe one media file.

        Args:
            path: Absolute path to an existing regular file.

        Returns:
            ProbeSuccess with container and stream information.

        Raises:
            ProbeError: If the tool is missing, fails, or emits bad output.
        """
        ...


def run_probe(prober: MediaProber, path: Path) -> ProbeOutcome:
    """Probe a file, converting ProbeError into a ProbeFailure value."""
    try:
        return prober.probe(path)
    except ProbeError as e:
        return ProbeFailure(diagnostic=str(e) or "Analyze failed")
