"""Search engine over stored analyses and the live media tree.

Routing:

- Any metadata filter (kind, container, videoCodec, audioCodec,
  resolution) queries the store only; an unanalyzed file can never match.
- A name-only search walks the live tree under the scope, filters by
  case-insensitive substring, and attaches stored records where known.
- No filter at all returns an empty page instead of listing the tree.
"""

from __future__ import annotations

import logging
import math
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from media_analyzer.core import chunked, list_all_files, resolve_within_root
from media_analyzer.db import AnalysisStore, SearchFilters
from media_analyzer.domain import AnalysisRecord

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_MAX_RESULTS = 2000
DEFAULT_DB_CHUNK_SIZE = 500

SCOPE_ALL = "all"
SCOPE_CURRENT = "current"


class InvalidRequestError(ValueError):
    """Raised when a search or analysis request has the wrong shape."""

    pass


def parse_non_negative_int(value: Any, default: int | None) -> int | None:
    """Parse a non-negative integer, returning ``default`` when invalid.

    Numeric strings are accepted and fractional values are floored.
    """
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    result = math.floor(number)
    return result if result >= 0 else default


@dataclass(frozen=True)
class SearchRequest:
    """A search: filters, scope and page window."""

    filters: SearchFilters = field(default_factory=SearchFilters)
    scope: str = SCOPE_ALL
    base_path: str = ""
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> SearchRequest:
        """Build a request from a camelCase document.

        Fields of the wrong type fall back to their defaults.

        Raises:
            InvalidRequestError: If ``data`` is not a mapping.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidRequestError("search request must be a JSON object")

        scope = data.get("scope")
        base_path = data.get("basePath")
        return cls(
            filters=SearchFilters.from_dict(data),
            scope=scope if isinstance(scope, str) else SCOPE_ALL,
            base_path=base_path if isinstance(base_path, str) else "",
            limit=parse_non_negative_int(data.get("limit"), DEFAULT_LIMIT),
            offset=parse_non_negative_int(data.get("offset"), 0),
        )


@dataclass(frozen=True)
class SearchItem:
    """One search hit; ``record`` is None for files not yet analyzed."""

    path: str
    record: AnalysisRecord | None = None

    @property
    def analyzed(self) -> bool:
        return self.record is not None

    def to_dict(self) -> dict[str, Any]:
        if self.record is None:
            return {
                "path": self.path,
                "name": posixpath.basename(self.path),
                "analyzed": False,
            }
        return {**self.record.to_dict(), "analyzed": True}


@dataclass
class SearchResult:
    """One page of search hits plus the full match count."""

    items: list[SearchItem] = field(default_factory=list)
    total: int = 0
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [item.to_dict() for item in self.items],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }


class SearchEngine:
    """Resolves search requests against the store and the media tree.

    Args:
        media_root: Root of the media tree.
        store: Analysis store; may be disabled.
        max_results: Upper clamp for the page size.
        db_chunk_size: Paths per store lookup when joining name hits.
    """

    def __init__(
        self,
        media_root: Path,
        store: AnalysisStore,
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
        db_chunk_size: int = DEFAULT_DB_CHUNK_SIZE,
    ) -> None:
        self.media_root = media_root
        self.store = store
        self.max_results = max(1, max_results)
        self.db_chunk_size = max(1, db_chunk_size)

    def clamp_limit(self, limit: int | None) -> int:
        """Clamp a page size to [1, max_results]; 0/None mean the default."""
        return max(1, min(limit or DEFAULT_LIMIT, self.max_results))

    def scope_prefix(self, scope: str, base_path: str) -> str:
        """Return the path prefix for a scope.

        "current" restricts to ``<base>/`` ("" at the root); anything else
        searches the whole tree.

        Raises:
            PathEscapeError: If ``base_path`` escapes the media root.
        """
        if scope != SCOPE_CURRENT:
            return ""
        relative = resolve_within_root(self.media_root, base_path).relative
        return f"{relative}/" if relative else ""

    def search(self, request: SearchRequest) -> SearchResult:
        """Run a search request.

        Raises:
            PathEscapeError: If the scope base path escapes the media root.
        """
        limit = self.clamp_limit(request.limit)
        offset = max(0, request.offset or 0)
        filters = request.filters

        if filters.is_empty():
            return SearchResult(limit=limit, offset=offset)

        prefix = self.scope_prefix(request.scope, request.base_path)

        if filters.has_metadata_filters():
            return self._search_store(filters, prefix, limit, offset)
        return self._search_tree(filters.name, prefix, limit, offset)

    def _search_store(
        self, filters: SearchFilters, prefix: str, limit: int, offset: int
    ) -> SearchResult:
        if not self.store.enabled:
            logger.debug("Metadata search without a store returns no results")
            return SearchResult(limit=limit, offset=offset)

        page = self.store.search(filters, prefix, limit=limit, offset=offset)
        items = [SearchItem(path=r.path, record=r) for r in page.records if r.path]
        return SearchResult(items=items, total=page.total, limit=limit, offset=offset)

    def _search_tree(
        self, name: str, prefix: str, limit: int, offset: int
    ) -> SearchResult:
        needle = name.casefold()
        candidates = [
            p
            for p in list_all_files(self.media_root)
            if p.startswith(prefix) and needle in p.casefold()
        ]
        page = candidates[offset : offset + limit]

        found: dict[str, AnalysisRecord] = {}
        if self.store.enabled:
            for chunk in chunked(page, self.db_chunk_size):
                for record in self.store.get_by_paths(chunk):
                    found[record.path] = record

        items = [SearchItem(path=p, record=found.get(p)) for p in page]
        return SearchResult(
            items=items, total=len(candidates), limit=limit, offset=offset
        )
