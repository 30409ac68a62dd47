"""SQLite connections for the analysis database.

The store keeps one long-lived write connection behind a lock and opens a
short-lived connection for every read, so WAL readers keep working while a
batch of analyses is being upserted.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from collections.abc import Iterator
from contextlib import closing, contextmanager
from functools import wraps
from pathlib import Path

logger = logging.getLogger(__name__)

CONNECTION_PRAGMAS: tuple[str, ...] = (
    "PRAGMA journal_mode = WAL",
    "PRAGMA synchronous = NORMAL",
    "PRAGMA busy_timeout = 10000",
    "PRAGMA temp_store = MEMORY",
)

# Writes slower than this fraction of the lock timeout are logged
SLOW_WRITE_FRACTION = 0.8


def _casefold(value: str | None) -> str | None:
    return None if value is None else str(value).casefold()


class DatabaseLockedError(Exception):
    """The analysis database stayed locked past the busy timeout."""


def open_connection(
    db_path: Path, timeout: float = 30.0, *, shared: bool = False
) -> sqlite3.Connection:
    """Open a connection with the store's pragmas and ``sqlite3.Row`` rows.

    The parent directory is created if missing. ``shared`` connections may
    be used from threads other than the one that opened them. SQL on the
    connection can call ``casefold()``, which matches ``str.casefold``.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=timeout, check_same_thread=not shared)
    for pragma in CONNECTION_PRAGMAS:
        conn.execute(pragma)
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_connection(
    db_path: Path, timeout: float = 30.0
) -> Iterator[sqlite3.Connection]:
    """Yield a connection that is closed on exit; callers commit themselves."""
    with closing(open_connection(db_path, timeout)) as conn:
        yield conn


def _is_lock_error(error: sqlite3.OperationalError) -> bool:
    message = str(error).casefold()
    return "locked" in message or "busy" in message


def handle_database_locked(func):
    """Re-raise SQLite lock timeouts from ``func`` as DatabaseLockedError."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except sqlite3.OperationalError as e:
            if not _is_lock_error(e):
                raise
            raise DatabaseLockedError(f"Analysis database is locked: {e}") from e

    return wrapper


def check_database_connectivity(db_path: Path | None) -> bool:
    """Return True if an existing analysis database answers a query.

    A missing file reports False rather than being created.
    """
    if db_path is None or not db_path.is_file():
        return False
    try:
        with closing(sqlite3.connect(str(db_path), timeout=5.0)) as conn:
            conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
    except sqlite3.Error as e:
        logger.debug("Database %s is not reachable: %s", db_path, e)
        return False
    return True


class ConnectionPool:
    """Connections for one analysis database file.

    Args:
        db_path: SQLite database file.
        timeout: Lock timeout in seconds for every connection.
    """

    def __init__(self, db_path: Path, timeout: float = 30.0) -> None:
        self.db_path = db_path
        self.timeout = timeout
        self._lock = threading.Lock()
        self._writer: sqlite3.Connection | None = None
        self._closed = threading.Event()

    @property
    def is_closed(self) -> bool:
        return self._closed.is_set()

    def _ensure_open(self) -> None:
        if self._closed.is_set():
            raise RuntimeError(f"Connection pool for {self.db_path} is closed")

    @contextmanager
    def read_connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a fresh connection for one read.

        Raises:
            RuntimeError: If the pool has been closed.
        """
        self._ensure_open()
        with get_connection(self.db_path, self.timeout) as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield the write connection inside ``BEGIN IMMEDIATE``.

        Commits when the block succeeds and rolls back when it raises. Only
        one transaction runs at a time.

        Raises:
            RuntimeError: If the pool has been closed.
        """
        with self._lock:
            self._ensure_open()
            if self._writer is None:
                self._writer = open_connection(self.db_path, self.timeout, shared=True)
            conn = self._writer

            started = time.monotonic()
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except Exception:
                conn.rollback()
                raise
            else:
                conn.commit()
            finally:
                elapsed = time.monotonic() - started
                if elapsed > self.timeout * SLOW_WRITE_FRACTION:
                    logger.warning(
                        "Slow write to %s took %.2fs (lock timeout %.1fs)",
                        self.db_path,
                        elapsed,
                        self.timeout,
                    )

    def close(self) -> None:
        """Close the write connection; later use raises RuntimeError."""
        with self._lock:
            self._closed.set()
            writer, self._writer = self._writer, None
        if writer is not None:
            writer.close()
