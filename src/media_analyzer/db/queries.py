"""Analysis record queries.

Functions here take an open connection and do NOT commit; the caller owns
the transaction.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterable, Sequence

from media_analyzer.core import chunked
from media_analyzer.domain import AnalysisOk, AnalysisRecord, record_from_dict

from .connection import handle_database_locked
from .filters import OPTION_FIELDS, MatchKind, SearchFilters, build_conditions

logger = logging.getLogger(__name__)

# Stay well below SQLite's bound-parameter limit
PATH_LOOKUP_CHUNK_SIZE = 500

_UPSERT_SQL = """
    INSERT INTO media_analysis (
        path, kind, size_bytes, modified_at, analyzed_at,
        container_format, video_codec, audio_codec, width, height,
        duration_sec, bit_rate, error, data
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(path) DO UPDATE SET
        kind = excluded.kind,
        size_bytes = excluded.size_bytes,
        modified_at = excluded.modified_at,
        analyzed_at = excluded.analyzed_at,
        container_format = excluded.container_format,
        video_codec = excluded.video_codec,
        audio_codec = excluded.audio_codec,
        width = excluded.width,
        height = excluded.height,
        duration_sec = excluded.duration_sec,
        bit_rate = excluded.bit_rate,
        error = excluded.error,
        data = excluded.data
"""


def record_to_row(record: AnalysisRecord, analyzed_at: str) -> tuple:
    """Derive the scalar columns and JSON blob for one record."""
    if isinstance(record, AnalysisOk):
        container_format = record.container.format_name if record.container else None
        video = record.video
        audio_codec = record.audio.codec if record.audio else None
        return (
            record.path,
            record.kind.value,
            record.size_bytes,
            record.modified_at,
            analyzed_at,
            container_format,
            video.codec if video else None,
            audio_codec,
            video.width if video else None,
            video.height if video else None,
            record.duration_sec,
            record.bit_rate,
            None,
            json.dumps(record.to_dict()),
        )

    return (
        record.path,
        record.kind.value,
        record.size_bytes,
        record.modified_at,
        analyzed_at,
        None,
        None,
        None,
        None,
        None,
        None,
        None,
        record.error,
        json.dumps(record.to_dict()),
    )


@handle_database_locked
def upsert_analyses(
    conn: sqlite3.Connection, records: Iterable[AnalysisRecord], analyzed_at: str
) -> int:
    """Insert or fully replace one row per record, keyed by path.

    Records with an empty path are skipped.

    Returns:
        Number of rows written.

    Note:
        This function does NOT commit. Caller must manage transactions.
    """
    rows = [record_to_row(r, analyzed_at) for r in records if r.path]
    if rows:
        conn.executemany(_UPSERT_SQL, rows)
    return len(rows)


def _decode_rows(rows: Iterable[sqlite3.Row]) -> list[AnalysisRecord]:
    records: list[AnalysisRecord] = []
    for row in rows:
        try:
            records.append(record_from_dict(json.loads(row["data"])))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Skipping unreadable stored record %s: %s", row["path"], e)
    return records


def get_analyses_by_paths(
    conn: sqlite3.Connection, paths: Sequence[str]
) -> list[AnalysisRecord]:
    """Return stored records whose path exactly matches one of ``paths``.

    Paths with no row are simply absent from the result. Order follows the
    path column, not the request.
    """
    wanted = list(dict.fromkeys(p for p in paths if isinstance(p, str) and p))
    records: list[AnalysisRecord] = []
    for chunk in chunked(wanted, PATH_LOOKUP_CHUNK_SIZE):
        placeholders = ",".join("?" * len(chunk))
        cursor = conn.execute(
            f"SELECT path, data FROM media_analysis WHERE path IN ({placeholders}) "
            "ORDER BY path",
            chunk,
        )
        records.extend(_decode_rows(cursor.fetchall()))
    return records


def get_distinct_values(conn: sqlite3.Connection, dimension: str) -> list[str]:
    """Return sorted, distinct, non-blank values of a filter dimension.

    Args:
        dimension: A search option key (kind, containerFormat, videoCodec,
            audioCodec, resolution).

    Raises:
        ValueError: If the dimension is unknown.
    """
    field = OPTION_FIELDS.get(dimension)
    if field is None:
        raise ValueError(f"Unknown dimension: {dimension!r}")

    if field.match is MatchKind.RESOLUTION:
        not_null = "width > 0 AND height > 0"
    else:
        not_null = f"{field.column} IS NOT NULL AND TRIM({field.column}) != ''"

    cursor = conn.execute(
        f"SELECT DISTINCT {field.column} AS v FROM media_analysis "
        f"WHERE error IS NULL AND {not_null} ORDER BY v"
    )
    return [row["v"] for row in cursor.fetchall()]


def search_analyses(
    conn: sqlite3.Connection,
    filters: SearchFilters,
    scope_prefix: str = "",
    *,
    limit: int,
    offset: int = 0,
) -> tuple[list[AnalysisRecord], int]:
    """Return one page of ok records matching every filter, plus the total.

    Results are ordered by path ascending. The total counts all matches,
    independent of the page window.
    """
    conditions, params = build_conditions(filters, scope_prefix)
    where_clause = " WHERE " + " AND ".join(conditions)

    total = conn.execute(
        "SELECT COUNT(*) FROM media_analysis" + where_clause, params
    ).fetchone()[0]

    cursor = conn.execute(
        "SELECT path, data FROM media_analysis"
        + where_clause
        + " ORDER BY path LIMIT ? OFFSET ?",
        [*params, limit, offset],
    )
    return _decode_rows(cursor.fetchall()), total
