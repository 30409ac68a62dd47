"""Dashboard aggregation over in-memory Analysis Records.

The same Dashboard shape is produced by the store's SQL aggregation
(media_analyzer.db.views), so both can feed the same consumers.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from media_analyzer.domain import AnalysisOk, AnalysisRecord, Number

UNKNOWN_KEY = "(unknown)"


@dataclass(frozen=True)
class CountItem:
    """A single bucket in a category count."""

    key: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "count": self.count}


@dataclass(frozen=True)
class ValueRange:
    """Min/max of a numeric field; both None when no record has the field."""

    min: Number | None = None
    max: Number | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max}


@dataclass
class DashboardTotals:
    """Totals over the ok records of a selection."""

    selected_count: int = 0
    analyzed_ok_count: int = 0
    analyzed_error_count: int = 0
    total_size_bytes: Number = 0
    total_duration_sec: Number = 0
    bit_rate: ValueRange = field(default_factory=ValueRange)
    duration_sec: ValueRange = field(default_factory=ValueRange)

    def to_dict(self) -> dict[str, Any]:
        return {
            "selectedCount": self.selected_count,
            "analyzedOkCount": self.analyzed_ok_count,
            "analyzedErrorCount": self.analyzed_error_count,
            "totalSizeBytes": self.total_size_bytes,
            "totalDurationSec": self.total_duration_sec,
            "bitRate": self.bit_rate.to_dict(),
            "durationSec": self.duration_sec.to_dict(),
        }


@dataclass
class Dashboard:
    """Summary statistics for a set of Analysis Records.

    ``counts`` maps every dimension in DIMENSIONS to its buckets, sorted by
    count descending then key ascending. An empty selection yields zero
    totals, None ranges and an empty list per dimension.
    """

    totals: DashboardTotals = field(default_factory=DashboardTotals)
    counts: dict[str, list[CountItem]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totals": self.totals.to_dict(),
            "counts": {
                name: [item.to_dict() for item in items]
                for name, items in self.counts.items()
            },
        }


def _video_attr(attr: str) -> Callable[[AnalysisOk], Any]:
    return lambda r: getattr(r.video, attr) if r.video else None


def _audio_attr(attr: str) -> Callable[[AnalysisOk], Any]:
    return lambda r: getattr(r.audio, attr) if r.audio else None


# Dimension name -> key extractor, in display order
DIMENSIONS: dict[str, Callable[[AnalysisOk], Any]] = {
    "kind": lambda r: r.kind.value,
    "containerFormat": lambda r: r.container.format_name if r.container else None,
    "videoCodec": _video_attr("codec"),
    "pixelFormat": _video_attr("pixel_format"),
    "frameRate": _video_attr("frame_rate"),
    "audioCodec": _audio_attr("codec"),
    "audioSampleRate": _audio_attr("sample_rate"),
    "audioChannels": _audio_attr("channels"),
    "resolution": lambda r: r.video.resolution if r.video else None,
}


def normalize_key(value: Any) -> str:
    """Normalize a category value to a bucket key.

    None and blank strings become "(unknown)"; strings are trimmed; other
    values use their string form.
    """
    if value is None:
        return UNKNOWN_KEY
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else UNKNOWN_KEY
    return str(value)


def sort_counts(counter: Counter[str] | dict[str, int]) -> list[CountItem]:
    """Sort buckets by count descending, then key ascending."""
    return [
        CountItem(key=key, count=count)
        for key, count in sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def count_by(
    records: Iterable[AnalysisOk], extractor: Callable[[AnalysisOk], Any]
) -> list[CountItem]:
    """Group records by a normalized key and count each bucket."""
    return sort_counts(Counter(normalize_key(extractor(r)) for r in records))


def _finite(value: Any) -> Number | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _sum(values: Iterable[Any]) -> Number:
    total: Number = 0
    for value in values:
        number = _finite(value)
        if number is not None:
            total += number
    return total


def _range(values: Iterable[Any]) -> ValueRange:
    numbers = [n for n in (_finite(v) for v in values) if n is not None]
    if not numbers:
        return ValueRange()
    return ValueRange(min=min(numbers), max=max(numbers))


def build_dashboard(records: Iterable[AnalysisRecord]) -> Dashboard:
    """Compute a Dashboard from in-memory records (no store access).

    Only ok records contribute to totals, ranges and category counts;
    error records are only counted. Non-finite numbers are skipped rather
    than poisoning sums.
    """
    selected = list(records)
    ok = [r for r in selected if isinstance(r, AnalysisOk)]

    totals = DashboardTotals(
        selected_count=len(selected),
        analyzed_ok_count=len(ok),
        analyzed_error_count=len(selected) - len(ok),
        total_size_bytes=_sum(r.size_bytes for r in ok),
        total_duration_sec=_sum(r.duration_sec for r in ok),
        bit_rate=_range(r.bit_rate for r in ok),
        duration_sec=_range(r.duration_sec for r in ok),
    )
    counts = {name: count_by(ok, extractor) for name, extractor in DIMENSIONS.items()}
    return Dashboard(totals=totals, counts=counts)
