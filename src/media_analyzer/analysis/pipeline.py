"""Analysis pipeline: stat, probe, normalize and (optionally) store files.

Files are processed sequentially, one probe subprocess at a time. Per-file
failures become AnalysisFailed records and never abort a batch; a path that
escapes the media root rejects the whole call before any file is touched.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from media_analyzer.analysis.dashboard import Dashboard, build_dashboard
from media_analyzer.analysis.normalizer import build_error_record, normalize_analysis
from media_analyzer.core import chunked, list_all_files, resolve_within_root
from media_analyzer.domain import AnalysisFailed, AnalysisRecord, FileStat
from media_analyzer.introspector import MediaProber, run_probe
from media_analyzer.introspector.classify import guess_kind_from_extension

if TYPE_CHECKING:
    from media_analyzer.db.store import AnalysisStore, UpsertResult

logger = logging.getLogger(__name__)

NOT_ANALYZED_ERROR = "Not analyzed yet (no DB entry)"
DEFAULT_BATCH_SIZE = 25


class InFlightGuard:
    """Tracks relative paths currently being analyzed.

    Bulk analysis and the change watcher share one guard; a trigger for a
    path that is already in flight is skipped rather than queued.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._paths: set[str] = set()

    def try_acquire(self, rel_path: str) -> bool:
        """Mark a path as in flight. Returns False if it already was."""
        with self._lock:
            if rel_path in self._paths:
                return False
            self._paths.add(rel_path)
            return True

    def release(self, rel_path: str) -> None:
        with self._lock:
            self._paths.discard(rel_path)

    @contextmanager
    def claim(self, rel_path: str) -> Iterator[bool]:
        """Context manager form of try_acquire/release.

        Yields True when the caller owns the path for the block.
        """
        acquired = self.try_acquire(rel_path)
        try:
            yield acquired
        finally:
            if acquired:
                self.release(rel_path)

    def __contains__(self, rel_path: object) -> bool:
        with self._lock:
            return rel_path in self._paths

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)


def _analyze_resolved(
    absolute: Path, relative: str, prober: MediaProber
) -> AnalysisRecord:
    try:
        file_stat = FileStat.from_path(absolute)
    except OSError as e:
        logger.warning("Cannot stat %s: %s", relative, e)
        message = f"Cannot stat file: {e.strerror or e}"
        return build_error_record(relative, None, message)

    if not file_stat.is_regular_file:
        # Probe is never invoked for directories and other non-files
        return normalize_analysis(relative, file_stat, None)

    outcome = run_probe(prober, absolute)
    record = normalize_analysis(relative, file_stat, outcome)
    if isinstance(record, AnalysisFailed):
        logger.warning("Analysis failed for %s: %s", relative, record.error)
    return record


def analyze_file(
    media_root: Path, rel_path: str, prober: MediaProber
) -> AnalysisRecord:
    """Analyze a single file under the media root.

    Raises:
        PathEscapeError: If the path resolves outside the media root.
    """
    resolved = resolve_within_root(media_root, rel_path)
    return _analyze_resolved(resolved.absolute, resolved.relative, prober)


def analyze_files(
    media_root: Path, rel_paths: Sequence[str], prober: MediaProber
) -> list[AnalysisRecord]:
    """Analyze files sequentially, returning one record per input path.

    Every path is validated before any file is stat'ed or probed.

    Raises:
        PathEscapeError: If any path resolves outside the media root.
    """
    resolved = [resolve_within_root(media_root, p) for p in rel_paths]
    return [_analyze_resolved(r.absolute, r.relative, prober) for r in resolved]


@dataclass
class AnalyzeResult:
    """Records from an interactive analysis plus what was persisted."""

    records: list[AnalysisRecord]
    dashboard: Dashboard
    upsert: UpsertResult | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.records],
            "dashboard": self.dashboard.to_dict(),
            "db": self.upsert.to_dict() if self.upsert else None,
        }


def analyze_and_store(
    media_root: Path,
    rel_paths: Sequence[str],
    prober: MediaProber,
    store: AnalysisStore | None = None,
) -> AnalyzeResult:
    """Analyze files, upsert the records and build a dashboard over them."""
    records = analyze_files(media_root, rel_paths, prober)
    upsert = store.upsert(records) if store is not None else None
    return AnalyzeResult(
        records=records, dashboard=build_dashboard(records), upsert=upsert
    )


@dataclass
class AnalyzeAllResult:
    """Summary of a bulk analysis over the whole media tree."""

    total_files: int = 0
    analyzed: int = 0
    errors: int = 0
    stored: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "analyzed": self.analyzed,
            "errors": self.errors,
            "skipped": self.skipped,
            "db": {"stored": self.stored},
        }


def analyze_all(
    media_root: Path,
    prober: MediaProber,
    store: AnalysisStore,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    guard: InFlightGuard | None = None,
    base: str = "",
) -> AnalyzeAllResult:
    """Analyze every regular file under the media root (or ``base``).

    Files are processed in batches of ``batch_size``; each batch is upserted
    before the next starts, so progress survives an interrupted run. Paths
    already in flight in ``guard`` are skipped.

    Raises:
        PathEscapeError: If ``base`` resolves outside the media root.
    """
    files = list_all_files(media_root, base)
    result = AnalyzeAllResult(total_files=len(files))
    if not files:
        return result

    if guard is None:
        guard = InFlightGuard()
    root = resolve_within_root(media_root, "").absolute

    for batch_number, batch in enumerate(chunked(files, batch_size), start=1):
        records: list[AnalysisRecord] = []
        for rel_path in batch:
            with guard.claim(rel_path) as acquired:
                if not acquired:
                    logger.debug("Skipping %s: analysis already in flight", rel_path)
                    result.skipped += 1
                    continue
                records.append(_analyze_resolved(root / rel_path, rel_path, prober))

        upsert = store.upsert(records)
        result.stored += upsert.stored
        for record in records:
            if record.is_ok:
                result.analyzed += 1
            else:
                result.errors += 1
        logger.info(
            "Analyze-all batch %d: %d records, %d stored",
            batch_number,
            len(records),
            upsert.stored,
        )

    logger.info(
        "Analyze-all complete: %d ok, %d errors, %d stored, %d skipped",
        result.analyzed,
        result.errors,
        result.stored,
        result.skipped,
    )
    return result


@dataclass
class LookupResult:
    """Stored records in request order, with a dashboard over them."""

    records: list[AnalysisRecord] = field(default_factory=list)
    dashboard: Dashboard = field(default_factory=Dashboard)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.records],
            "dashboard": self.dashboard.to_dict(),
        }


def lookup_stored(
    media_root: Path, rel_paths: Sequence[str], store: AnalysisStore
) -> LookupResult:
    """Return stored records for paths, in request order.

    Paths with no stored row get a placeholder error record.

    Raises:
        StoreUnavailableError: If the store is disabled.
        PathEscapeError: If any path resolves outside the media root.
    """
    store.require()
    normalized = [resolve_within_root(media_root, p).relative for p in rel_paths]
    found = {r.path: r for r in store.get_by_paths(normalized)}

    records: list[AnalysisRecord] = []
    for rel_path in normalized:
        hit = found.get(rel_path)
        if hit is None:
            hit = AnalysisFailed(
                path=rel_path,
                kind=guess_kind_from_extension(rel_path),
                error=NOT_ANALYZED_ERROR,
            )
        records.append(hit)
    return LookupResult(records=records, dashboard=build_dashboard(records))
