"""Search Engine for Media Analyzer."""

from media_analyzer.search.engine import (
    DEFAULT_LIMIT,
    DEFAULT_MAX_RESULTS,
    SCOPE_ALL,
    SCOPE_CURRENT,
    InvalidRequestError,
    SearchEngine,
    SearchItem,
    SearchRequest,
    SearchResult,
    parse_non_negative_int,
)

__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_MAX_RESULTS",
    "SCOPE_ALL",
    "SCOPE_CURRENT",
    "InvalidRequestError",
    "SearchEngine",
    "SearchItem",
    "SearchRequest",
    "SearchResult",
    "parse_non_negative_int",
]
