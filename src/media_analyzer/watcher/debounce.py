"""Per-key debounce timers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class TimerLike(Protocol):
    """The subset of threading.Timer the debouncer relies on."""

    daemon: bool

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[..., Any], list[Any]], TimerLike]


class Debouncer:
    """Coalesces bursts of triggers per key into one callback.

    Every trigger for a key cancels that key's pending timer and starts a new
    one; the callback runs only once a timer expires uninterrupted. Keys are
    independent: one key firing never delays another.

    Args:
        delay: Quiet period in seconds.
        callback: Called with the key when its timer fires.
        timer_factory: Builds timers; threading.Timer by default.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[str], None],
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self._callback = callback
        self._timer_factory = timer_factory
        # key -> (token, timer); a firing timer only counts if its token is current
        self._timers: dict[str, tuple[object, TimerLike]] = {}
        self._lock = threading.Lock()

    def trigger(self, key: str) -> None:
        """(Re)start the timer for ``key``."""
        with self._lock:
            previous = self._timers.pop(key, None)
            if previous is not None:
                previous[1].cancel()
            token = object()
            timer = self._timer_factory(self.delay, self._fire, [key, token])
            timer.daemon = True
            self._timers[key] = (token, timer)
            timer.start()

    def _fire(self, key: str, token: object) -> None:
        with self._lock:
            current = self._timers.get(key)
            if current is None or current[0] is not token:
                logger.debug("Dropping superseded timer for %s", key)
                return
            del self._timers[key]
        self._callback(key)

    def cancel_all(self) -> None:
        """Cancel every pending timer without firing it."""
        with self._lock:
            timers = [timer for _, timer in self._timers.values()]
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._timers)

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._timers
