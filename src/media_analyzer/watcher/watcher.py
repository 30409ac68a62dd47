"""Change Watcher: re-analyze files as they are added or modified.

A watchdog observer feeds created/modified/moved events into a per-path
Debouncer. When a path's timer fires, the file is re-stat'ed and its
(mtime, size) signature compared with the last one analyzed; unchanged
files are skipped, changed ones go through probe, normalize and upsert.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from media_analyzer.analysis.pipeline import InFlightGuard, analyze_file
from media_analyzer.core import BoundedCache, PathEscapeError, relative_to_root
from media_analyzer.domain import AnalysisRecord, FileStat
from media_analyzer.introspector import MediaProber

from .debounce import Debouncer, TimerFactory

if TYPE_CHECKING:
    from media_analyzer.db.store import AnalysisStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 2.0
DEFAULT_SIGNATURE_CAPACITY = 10_000


class MediaEventHandler(FileSystemEventHandler):
    """Forwards file add/modify events to the watcher."""

    def __init__(self, watcher: ChangeWatcher) -> None:
        super().__init__()
        self.watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.notify(os.fsdecode(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.watcher.notify(os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        # A rename into place is an add at the destination
        if not event.is_directory:
            self.watcher.notify(os.fsdecode(event.dest_path))


class ChangeWatcher:
    """Keeps the analysis store current as files change under the root.

    Args:
        media_root: Root of the media tree; events outside it are ignored.
        prober: Prober used for reanalysis.
        store: Store receiving the upserts.
        debounce_seconds: Quiet period before a path is reanalyzed.
        signatures: Last analyzed (mtime, size) per relative path.
        guard: In-flight guard shared with bulk analysis.
        timer_factory: Timer constructor for the debouncer.
    """

    def __init__(
        self,
        media_root: Path,
        prober: MediaProber,
        store: AnalysisStore,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        signatures: BoundedCache[str, tuple[float, int]] | None = None,
        guard: InFlightGuard | None = None,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.media_root = Path(os.path.abspath(media_root))
        self.prober = prober
        self.store = store
        if signatures is None:
            signatures = BoundedCache(DEFAULT_SIGNATURE_CAPACITY)
        self.signatures = signatures
        self.guard = guard if guard is not None else InFlightGuard()
        self.debouncer = Debouncer(
            debounce_seconds, self._on_timer, timer_factory or threading.Timer
        )
        self._observer: Observer | None = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        """Start observing the media root recursively."""
        if self._observer is not None:
            logger.debug("Watcher already started")
            return
        if not self.media_root.is_dir():
            logger.warning(
                "Media root %s is not a directory; watcher not started", self.media_root
            )
            return

        observer = Observer()
        handler = MediaEventHandler(self)
        observer.schedule(handler, str(self.media_root), recursive=True)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info(
            "Watching %s (debounce %.1fs)", self.media_root, self.debouncer.delay
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop observing and drop pending timers."""
        self.debouncer.cancel_all()
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout)
        self._observer = None
        logger.info("Watcher stopped")

    def notify(self, absolute_path: str) -> None:
        """Record a raw filesystem event for an absolute path.

        Events outside the media root or for hidden entries are ignored.
        """
        try:
            rel_path = relative_to_root(self.media_root, absolute_path)
        except PathEscapeError:
            logger.warning("Ignoring event outside media root: %s", absolute_path)
            return
        if not rel_path or any(part.startswith(".") for part in rel_path.split("/")):
            return
        self.debouncer.trigger(rel_path)

    def _on_timer(self, rel_path: str) -> None:
        try:
            self.process(rel_path)
        except Exception:
            logger.exception("Auto-analyze failed for %s", rel_path)

    def process(self, rel_path: str) -> AnalysisRecord | None:
        """Reanalyze one path if its content signature changed.

        Returns:
            The stored record, or None when the path was skipped (gone, not
            a regular file, unchanged, or already in flight).
        """
        absolute = self.media_root / rel_path
        try:
            file_stat = FileStat.from_path(absolute)
        except OSError as e:
            logger.debug("Skipping %s: %s", rel_path, e)
            return None
        if not file_stat.is_regular_file:
            return None

        signature = file_stat.signature
        if self.signatures.get(rel_path) == signature:
            logger.debug("Skipping %s: unchanged since last analysis", rel_path)
            return None

        with self.guard.claim(rel_path) as acquired:
            if not acquired:
                logger.debug("Skipping %s: analysis already in flight", rel_path)
                return None
            record = analyze_file(self.media_root, rel_path, self.prober)
            result = self.store.upsert([record])

        self.signatures.put(rel_path, signature)
        logger.info("Auto-analyzed: %s (db stored: %d)", rel_path, result.stored)
        return record
