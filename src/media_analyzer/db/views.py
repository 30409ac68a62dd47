"""Dashboard aggregation computed inside the database.

Produces the same Dashboard shape as
media_analyzer.analysis.dashboard.build_dashboard, without loading records
into memory.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from media_analyzer.analysis.dashboard import (
    UNKNOWN_KEY,
    CountItem,
    Dashboard,
    DashboardTotals,
    ValueRange,
)

from .filters import scope_condition

# Dimension name -> SQL expression, in display order
DIMENSION_EXPRESSIONS: dict[str, str] = {
    "kind": "kind",
    "containerFormat": "container_format",
    "videoCodec": "video_codec",
    "pixelFormat": "json_extract(data, '$.video.pixelFormat')",
    "frameRate": "json_extract(data, '$.video.frameRate')",
    "audioCodec": "audio_codec",
    "audioSampleRate": "json_extract(data, '$.audio.sampleRate')",
    "audioChannels": "json_extract(data, '$.audio.channels')",
    "resolution": (
        "CASE WHEN width > 0 AND height > 0 "
        "THEN CAST(width AS TEXT) || 'x' || CAST(height AS TEXT) END"
    ),
}


def _key_expression(expr: str) -> str:
    return f"COALESCE(NULLIF(TRIM(CAST({expr} AS TEXT)), ''), '{UNKNOWN_KEY}')"


def _scope_where(scope_prefix: str, *conditions: str) -> tuple[str, list[Any]]:
    clauses = list(conditions)
    params: list[Any] = []
    if scope_prefix:
        condition, params = scope_condition(scope_prefix)
        clauses.append(condition)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


def _aggregate_totals(conn: sqlite3.Connection, scope_prefix: str) -> DashboardTotals:
    ok_where, ok_params = _scope_where(scope_prefix, "error IS NULL")
    row = conn.execute(
        "SELECT COUNT(*) AS ok_count, "
        "COALESCE(SUM(size_bytes), 0) AS total_size, "
        "COALESCE(SUM(duration_sec), 0) AS total_duration, "
        "MIN(bit_rate) AS min_bit_rate, MAX(bit_rate) AS max_bit_rate, "
        "MIN(duration_sec) AS min_duration, MAX(duration_sec) AS max_duration "
        "FROM media_analysis" + ok_where,
        ok_params,
    ).fetchone()

    err_where, err_params = _scope_where(scope_prefix, "error IS NOT NULL")
    error_count = conn.execute(
        "SELECT COUNT(*) FROM media_analysis" + err_where, err_params
    ).fetchone()[0]

    return DashboardTotals(
        selected_count=row["ok_count"] + error_count,
        analyzed_ok_count=row["ok_count"],
        analyzed_error_count=error_count,
        total_size_bytes=row["total_size"],
        total_duration_sec=row["total_duration"],
        bit_rate=ValueRange(min=row["min_bit_rate"], max=row["max_bit_rate"]),
        duration_sec=ValueRange(min=row["min_duration"], max=row["max_duration"]),
    )


def _aggregate_counts(
    conn: sqlite3.Connection, expr: str, scope_prefix: str
) -> list[CountItem]:
    where_clause, params = _scope_where(scope_prefix, "error IS NULL")
    key = _key_expression(expr)
    cursor = conn.execute(
        f"SELECT {key} AS key, COUNT(*) AS count FROM media_analysis"
        + where_clause
        + " GROUP BY key ORDER BY count DESC, key ASC",
        params,
    )
    return [CountItem(key=row["key"], count=row["count"]) for row in cursor]


def aggregate_dashboard(conn: sqlite3.Connection, scope_prefix: str = "") -> Dashboard:
    """Aggregate every stored record whose path starts with ``scope_prefix``.

    An empty prefix covers the whole store. Only ok rows feed totals, ranges
    and counts; error rows are counted in analyzedErrorCount.
    """
    totals = _aggregate_totals(conn, scope_prefix)
    counts = {
        name: _aggregate_counts(conn, expr, scope_prefix)
        for name, expr in DIMENSION_EXPRESSIONS.items()
    }
    return Dashboard(totals=totals, counts=counts)
