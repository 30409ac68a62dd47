"""Component wiring shared by the CLI and the HTTP server.

A Runtime owns the long-lived collaborators built from one
MediaAnalyzerConfig: the analysis store, the prober, the search engine and
the in-flight guard shared by bulk analysis and the change watcher.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from media_analyzer.analysis.pipeline import InFlightGuard
from media_analyzer.config.models import MediaAnalyzerConfig
from media_analyzer.core import BoundedCache
from media_analyzer.db import AnalysisStore
from media_analyzer.introspector import FFprobeProber, MediaProber
from media_analyzer.search import SearchEngine
from media_analyzer.watcher import ChangeWatcher
from media_analyzer.watcher.debounce import TimerFactory

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Collaborators for one configured media root."""

    config: MediaAnalyzerConfig
    store: AnalysisStore
    prober: MediaProber
    guard: InFlightGuard = field(default_factory=InFlightGuard)

    @property
    def media_root(self) -> Path:
        return self.config.media_root

    def search_engine(self) -> SearchEngine:
        return SearchEngine(
            self.media_root,
            self.store,
            max_results=self.config.search.max_results,
            db_chunk_size=self.config.search.db_chunk_size,
        )

    def change_watcher(
        self,
        *,
        debounce_seconds: float | None = None,
        timer_factory: TimerFactory | None = None,
    ) -> ChangeWatcher:
        """Build a watcher sharing this runtime's store, prober and guard."""
        watch = self.config.watch
        if debounce_seconds is None:
            debounce_seconds = watch.debounce_seconds
        return ChangeWatcher(
            self.media_root,
            self.prober,
            self.store,
            debounce_seconds=debounce_seconds,
            signatures=BoundedCache(watch.signature_capacity),
            guard=self.guard,
            timer_factory=timer_factory,
        )

    def close(self) -> None:
        self.store.close()


def build_runtime(
    config: MediaAnalyzerConfig,
    *,
    store: AnalysisStore | None = None,
    prober: MediaProber | None = None,
) -> Runtime:
    """Build a Runtime from configuration.

    Args:
        config: Resolved configuration.
        store: Pre-built store; opened from ``config.store`` when None.
        prober: Pre-built prober; an FFprobeProber when None.

    Raises:
        RuntimeError: If the database schema is newer than supported.
    """
    if store is None:
        store = AnalysisStore.open(
            config.store.database_path, timeout=config.store.timeout
        )
    if prober is None:
        prober = FFprobeProber(config.probe.ffprobe_path, timeout=config.probe.timeout)
        if not prober.is_available():
            logger.warning(
                "ffprobe not found at %r; analyses will record probe errors",
                prober.ffprobe_path,
            )
    return Runtime(config=config, store=store, prober=prober)
