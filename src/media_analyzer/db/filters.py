"""Declarative search filter descriptors.

Each FilterField names an attribute of SearchFilters, the SQL expression it
is matched against, and how it matches. The same table drives the WHERE
clause of store searches and the distinct-value queries behind the search
options, so adding a filterable column is a one-line change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

_RESOLUTION_RE = re.compile(r"^\s*(\d+)x(\d+)\s*$")


class MatchKind(Enum):
    """How a filter value is compared against its column."""

    EQUALS = "equals"
    RESOLUTION = "resolution"  # "WxH" against the width/height pair
    CONTAINS_CI = "contains_ci"  # case-insensitive substring


@dataclass(frozen=True)
class FilterField:
    """One filterable dimension of the media_analysis table."""

    field: str
    column: str
    match: MatchKind
    option_key: str | None = None  # key in search options; None = no choices
    is_metadata: bool = True


RESOLUTION_EXPR = "CAST(width AS TEXT) || 'x' || CAST(height AS TEXT)"

FILTER_FIELDS: tuple[FilterField, ...] = (
    FilterField("kind", "kind", MatchKind.EQUALS, "kind"),
    FilterField("container", "container_format", MatchKind.EQUALS, "containerFormat"),
    FilterField("video_codec", "video_codec", MatchKind.EQUALS, "videoCodec"),
    FilterField("audio_codec", "audio_codec", MatchKind.EQUALS, "audioCodec"),
    FilterField("resolution", RESOLUTION_EXPR, MatchKind.RESOLUTION, "resolution"),
    FilterField("name", "path", MatchKind.CONTAINS_CI, None, is_metadata=False),
)

OPTION_FIELDS: dict[str, FilterField] = {
    f.option_key: f for f in FILTER_FIELDS if f.option_key is not None
}


@dataclass(frozen=True)
class SearchFilters:
    """Filter values for a search; empty strings mean "not set"."""

    kind: str = ""
    container: str = ""
    video_codec: str = ""
    audio_codec: str = ""
    resolution: str = ""
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SearchFilters:
        """Build filters from a camelCase request document.

        Non-string values are treated as unset.
        """
        data = data or {}
        aliases = {"video_codec": "videoCodec", "audio_codec": "audioCodec"}
        values: dict[str, str] = {}
        for f in fields(cls):
            raw = data.get(aliases.get(f.name, f.name))
            values[f.name] = raw.strip() if isinstance(raw, str) else ""
        return cls(**values)

    def has_metadata_filters(self) -> bool:
        """True when any filter other than ``name`` is set."""
        return any(getattr(self, f.field) for f in FILTER_FIELDS if f.is_metadata)

    def is_empty(self) -> bool:
        return not any(getattr(self, f.field) for f in FILTER_FIELDS)


def parse_resolution(value: str) -> tuple[int, int] | None:
    """Parse "WxH" into (width, height), or None if malformed."""
    match = _RESOLUTION_RE.match(value)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def escape_like_pattern(value: str) -> str:
    """Escape special characters in SQL LIKE patterns.

    Queries using this must include an ESCAPE '\\' clause.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def scope_condition(scope_prefix: str) -> tuple[str, list[Any]]:
    """Return a condition matching paths that start with ``scope_prefix``."""
    return (
        "(path LIKE ? ESCAPE '\\' AND substr(path, 1, ?) = ?)",
        [f"{escape_like_pattern(scope_prefix)}%", len(scope_prefix), scope_prefix],
    )


def build_conditions(
    filters: SearchFilters, scope_prefix: str = ""
) -> tuple[list[str], list[Any]]:
    """Translate filters and a scope prefix into WHERE conditions.

    Only ok records are ever matched. The scope prefix is literal: LIKE
    wildcards in it are escaped, and because SQLite's LIKE ignores ASCII
    case, an exact substr() comparison is added.

    Returns:
        Tuple of (conditions, params) to be joined with AND.
    """
    conditions: list[str] = ["error IS NULL"]
    params: list[Any] = []

    for f in FILTER_FIELDS:
        value = getattr(filters, f.field)
        if not value:
            continue
        if f.match is MatchKind.EQUALS:
            conditions.append(f"{f.column} = ?")
            params.append(value)
        elif f.match is MatchKind.RESOLUTION:
            parsed = parse_resolution(value)
            if parsed is None:
                # A malformed resolution cannot equal any stored "WxH"
                conditions.append("0 = 1")
            else:
                conditions.append("width = ? AND height = ?")
                params.extend(parsed)
        elif f.match is MatchKind.CONTAINS_CI:
            conditions.append(f"instr(casefold({f.column}), ?) > 0")
            params.append(value.casefold())

    if scope_prefix:
        condition, scope_params = scope_condition(scope_prefix)
        conditions.append(condition)
        params.extend(scope_params)

    return conditions, params
