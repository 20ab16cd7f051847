"""
debouncer.py

Debounces search edits so that only the settled value reaches the backend.

The timer is abstracted behind a Scheduler so tests can drive time by hand;
the default scheduler uses ``threading.Timer`` with daemon threads.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 400


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class ThreadingScheduler:
    """Scheduler backed by daemon ``threading.Timer`` instances."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()


class SearchDebouncer:
    """
    Delivers the last pushed value after ``delay_ms`` of quiet.

    :param on_settled: Receives the settled search text
    :param delay_ms: Quiet period in milliseconds
    :param scheduler: Timer abstraction (defaults to ThreadingScheduler)
    """

    def __init__(
        self,
        on_settled: Callable[[str], None],
        *,
        delay_ms: int = DEFAULT_DELAY_MS,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self._on_settled = on_settled
        self._delay = delay_ms / 1000.0
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._handle: Any = None
        self._pending: Optional[str] = None
        self._has_pending = False

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    def push(self, text: str) -> None:
        with self._lock:
            if self._handle is not None:
                self._scheduler.cancel(self._handle)
            self._pending = text
            self._has_pending = True
            self._handle = self._scheduler.call_later(self._delay, self._fire)

    def flush(self) -> None:
        """Deliver the pending value immediately."""
        with self._lock:
            if self._handle is not None:
                self._scheduler.cancel(self._handle)
                self._handle = None
        self._fire()

    def cancel(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._scheduler.cancel(self._handle)
            self._handle = None
            self._pending = None
            self._has_pending = False

    def _fire(self) -> None:
        with self._lock:
            if not self._has_pending:
                return
            text = self._pending or ""
            self._pending = None
            self._has_pending = False
            self._handle = None
        logger.debug("Search settled: %r", text)
        self._on_settled(text)
