"""Request tokens for discarding stale list responses."""

from __future__ import annotations

import threading


class RequestTracker:
    """
    Issues monotonically increasing tokens.

    Only the most recently issued token is current; a completion carrying an
    older token belongs to a superseded request and must be dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0

    def issue(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest

    @property
    def latest(self) -> int:
        return self._latest
