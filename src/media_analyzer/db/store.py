"""AnalysisStore: the optional persistence facade.

The store may be disabled (no database path configured) or fail at runtime.
In both cases every query degrades to a neutral result and a warning is
logged, so callers can use it unconditionally. Callers that must tell
"no store" apart from "no matches" call require() first.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from media_analyzer.analysis.dashboard import DIMENSIONS, Dashboard
from media_analyzer.core.datetime_utils import utc_now_iso
from media_analyzer.domain import AnalysisRecord

from .connection import ConnectionPool, DatabaseLockedError, get_connection
from .filters import OPTION_FIELDS, SearchFilters
from .queries import (
    get_analyses_by_paths,
    get_distinct_values,
    search_analyses,
    upsert_analyses,
)
from .schema import initialize_database
from .views import aggregate_dashboard

logger = logging.getLogger(__name__)


class StoreUnavailableError(Exception):
    """Raised when an operation needs the store and it is disabled."""

    pass


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of an upsert: records offered vs rows written."""

    attempted: int
    stored: int

    def to_dict(self) -> dict[str, int]:
        return {"attempted": self.attempted, "stored": self.stored}


@dataclass
class SearchPage:
    """One page of store search results."""

    records: list[AnalysisRecord] = field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0


def empty_dashboard() -> Dashboard:
    """Dashboard with zero totals and an empty list per dimension."""
    return Dashboard(counts={name: [] for name in DIMENSIONS})


class AnalysisStore:
    """Keyed-by-path store of Analysis Records backed by SQLite.

    Construct with ``AnalysisStore.open(db_path)``; a None path yields a
    disabled store.
    """

    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    @classmethod
    def open(cls, db_path: Path | None, timeout: float = 30.0) -> AnalysisStore:
        """Open (and initialize) the store at ``db_path``.

        Args:
            db_path: SQLite database file, or None to disable the store.
            timeout: SQLite lock timeout in seconds.

        Returns:
            An enabled store, or a disabled one if no path is given or the
            database cannot be opened.

        Raises:
            RuntimeError: If the database schema is newer than supported.
        """
        if db_path is None:
            logger.info("No database configured; analysis store disabled")
            return cls(None)

        try:
            with get_connection(db_path, timeout=timeout) as conn:
                initialize_database(conn)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Cannot open database %s, store disabled: %s", db_path, e)
            return cls(None)

        logger.debug("Analysis store opened at %s", db_path)
        return cls(ConnectionPool(db_path, timeout=timeout))

    @property
    def enabled(self) -> bool:
        return self._pool is not None and not self._pool.is_closed

    @property
    def db_path(self) -> Path | None:
        return self._pool.db_path if self._pool is not None else None

    def require(self) -> None:
        """Raise StoreUnavailableError unless the store is enabled."""
        if not self.enabled:
            raise StoreUnavailableError("Database is not configured")

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()

    def _degraded(self, operation: str, error: Exception | None = None) -> None:
        if error is None:
            logger.warning("Analysis store disabled; %s returns no data", operation)
        else:
            logger.warning("Analysis store %s failed: %s", operation, error)

    def upsert(
        self, records: Iterable[AnalysisRecord], analyzed_at: str | None = None
    ) -> UpsertResult:
        """Insert or replace records by path, stamping analyzed_at.

        Args:
            records: Records to store. Those with an empty path are skipped.
            analyzed_at: ISO timestamp to stamp; defaults to now.

        Returns:
            UpsertResult with attempted and stored counts.
        """
        batch = list(records)
        if not self.enabled:
            self._degraded("upsert")
            return UpsertResult(attempted=len(batch), stored=0)

        stamp = analyzed_at or utc_now_iso()
        try:
            with self._pool.transaction() as conn:
                stored = upsert_analyses(conn, batch, stamp)
        except (sqlite3.Error, DatabaseLockedError) as e:
            self._degraded("upsert", e)
            return UpsertResult(attempted=len(batch), stored=0)
        return UpsertResult(attempted=len(batch), stored=stored)

    def get_by_paths(self, paths: Sequence[str]) -> list[AnalysisRecord]:
        """Return stored records for ``paths``; missing paths are absent."""
        if not self.enabled:
            self._degraded("lookup")
            return []
        try:
            with self._pool.read_connection() as conn:
                return get_analyses_by_paths(conn, paths)
        except sqlite3.Error as e:
            self._degraded("lookup", e)
            return []

    def get_distinct_values(self, dimension: str) -> list[str]:
        """Return sorted non-blank values of one filter dimension.

        Raises:
            ValueError: If the dimension is unknown.
        """
        if dimension not in OPTION_FIELDS:
            raise ValueError(f"Unknown dimension: {dimension!r}")
        if not self.enabled:
            self._degraded("distinct values")
            return []
        try:
            with self._pool.read_connection() as conn:
                return get_distinct_values(conn, dimension)
        except sqlite3.Error as e:
            self._degraded("distinct values", e)
            return []

    def get_search_options(self) -> dict[str, list[str]]:
        """Return distinct values for every filter dimension."""
        return {key: self.get_distinct_values(key) for key in OPTION_FIELDS}

    def search(
        self,
        filters: SearchFilters,
        scope_prefix: str = "",
        *,
        limit: int,
        offset: int = 0,
    ) -> SearchPage:
        """Return one page of ok records matching all filters."""
        if not self.enabled:
            self._degraded("search")
            return SearchPage(limit=limit, offset=offset)
        try:
            with self._pool.read_connection() as conn:
                records, total = search_analyses(
                    conn, filters, scope_prefix, limit=limit, offset=offset
                )
        except sqlite3.Error as e:
            self._degraded("search", e)
            return SearchPage(limit=limit, offset=offset)
        return SearchPage(records=records, total=total, limit=limit, offset=offset)

    def aggregate(self, scope_prefix: str = "") -> Dashboard:
        """Aggregate stored ok records under ``scope_prefix`` into a Dashboard."""
        if not self.enabled:
            self._degraded("aggregate")
            return empty_dashboard()
        try:
            with self._pool.read_connection() as conn:
                return aggregate_dashboard(conn, scope_prefix)
        except sqlite3.Error as e:
            self._degraded("aggregate", e)
            return empty_dashboard()

    def describe(self) -> dict[str, Any]:
        """Return enabled flag and database path for health reporting."""
        db_path = self.db_path
        return {"enabled": self.enabled, "path": str(db_path) if db_path else None}
