"""Change Watcher for Media Analyzer."""

from media_analyzer.watcher.debounce import Debouncer
from media_analyzer.watcher.watcher import (
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_SIGNATURE_CAPACITY,
    ChangeWatcher,
    MediaEventHandler,
)

__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "DEFAULT_SIGNATURE_CAPACITY",
    "ChangeWatcher",
    "Debouncer",
    "MediaEventHandler",
]
