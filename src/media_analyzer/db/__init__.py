"""Analysis Store: SQLite persistence for Analysis Records."""

from media_analyzer.db.connection import (
    ConnectionPool,
    DatabaseLockedError,
    check_database_connectivity,
    get_connection,
)
from media_analyzer.db.filters import (
    FILTER_FIELDS,
    OPTION_FIELDS,
    FilterField,
    MatchKind,
    SearchFilters,
    escape_like_pattern,
    parse_resolution,
)
from media_analyzer.db.schema import SCHEMA_VERSION, initialize_database
from media_analyzer.db.store import (
    AnalysisStore,
    SearchPage,
    StoreUnavailableError,
    UpsertResult,
    empty_dashboard,
)

__all__ = [
    # Connection
    "ConnectionPool",
    "DatabaseLockedError",
    "check_database_connectivity",
    "get_connection",
    # Filters
    "FILTER_FIELDS",
    "OPTION_FIELDS",
    "FilterField",
    "MatchKind",
    "SearchFilters",
    "escape_like_pattern",
    "parse_resolution",
    # Schema
    "SCHEMA_VERSION",
    "initialize_database",
    # Store
    "AnalysisStore",
    "SearchPage",
    "StoreUnavailableError",
    "UpsertResult",
    "empty_dashboard",
]
