"""Database schema definition for Media Analyzer.

One table, media_analysis, keyed by the relative path. The ``data`` column
holds the canonical Analysis Record as JSON; every other column is derived
from it at write time for indexing and aggregation.
"""

import sqlite3

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS media_analysis (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT UNIQUE NOT NULL,
    kind TEXT,
    size_bytes INTEGER,
    modified_at TEXT,           -- ISO 8601 UTC timestamp
    analyzed_at TEXT NOT NULL,  -- ISO 8601 UTC timestamp
    container_format TEXT,
    video_codec TEXT,
    audio_codec TEXT,
    width INTEGER,
    height INTEGER,
    duration_sec REAL,
    bit_rate INTEGER,
    error TEXT,                 -- NULL for ok records
    data TEXT NOT NULL          -- JSON: canonical Analysis Record
);

CREATE INDEX IF NOT EXISTS idx_media_analysis_kind ON media_analysis(kind);
CREATE INDEX IF NOT EXISTS idx_media_analysis_container_format
    ON media_analysis(container_format);
CREATE INDEX IF NOT EXISTS idx_media_analysis_video_codec
    ON media_analysis(video_codec);
CREATE INDEX IF NOT EXISTS idx_media_analysis_audio_codec
    ON media_analysis(audio_codec);
CREATE INDEX IF NOT EXISTS idx_media_analysis_resolution
    ON media_analysis(width, height);
"""


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the stored schema version, or None for a fresh database."""
    try:
        row = conn.execute(
            "SELECT value FROM _meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        return None
    return int(row[0]) if row else None


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes (idempotent)."""
    conn.executescript(SCHEMA_SQL)
    conn.execute(
        "INSERT OR REPLACE INTO _meta (key, value) VALUES ('schema_version', ?)",
        (str(SCHEMA_VERSION),),
    )
    conn.commit()


def initialize_database(conn: sqlite3.Connection) -> None:
    """Initialize the database, creating the schema if needed.

    Raises:
        RuntimeError: If the database was written by a newer release.
    """
    current_version = get_schema_version(conn)
    if current_version is not None and current_version > SCHEMA_VERSION:
        raise RuntimeError(
            f"Database schema version {current_version} is newer than "
            f"supported version {SCHEMA_VERSION}"
        )
    create_schema(conn)
