"""Side-by-side comparison of Analysis Records."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from media_analyzer.domain import AnalysisRecord

COMPARE_FIELDS: tuple[str, ...] = (
    "kind",
    "sizeBytes",
    "container.formatName",
    "video.codec",
    "video.width",
    "video.height",
    "audio.codec",
    "audio.sampleRate",
    "audio.channels",
    "durationSec",
    "bitRate",
)


@dataclass
class Comparison:
    """Result of comparing two or more records.

    ``similarities`` maps a field to the value every record shares;
    ``differences`` maps a field to one {path, value} entry per record,
    in input order.
    """

    files: list[dict[str, Any]] = field(default_factory=list)
    similarities: dict[str, Any] = field(default_factory=dict)
    differences: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.files)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "files": self.files,
            "similarities": self.similarities,
            "differences": self.differences,
        }


def get_dotted(document: Any, dotted: str) -> Any:
    """Walk a dotted path through nested dicts; None if any hop is missing."""
    current = document
    for part in dotted.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _normalize(value: Any) -> Any:
    if value == "":
        return None
    return value


def compare_analyses(records: Sequence[AnalysisRecord]) -> Comparison:
    """Partition COMPARE_FIELDS into shared and differing values.

    Callers pass at least two ok records; this function does not check.
    """
    documents = [r.to_dict() for r in records]
    comparison = Comparison(
        files=[{"path": d["path"], "name": d["name"]} for d in documents]
    )

    for field_name in COMPARE_FIELDS:
        values = [_normalize(get_dotted(d, field_name)) for d in documents]
        first = values[0] if values else None
        if all(v == first for v in values):
            comparison.similarities[field_name] = first
        else:
            comparison.differences[field_name] = [
                {"path": d["path"], "value": v} for d, v in zip(documents, values)
            ]

    return comparison
