"""SearchDebouncer and RequestTracker tests with a hand-driven scheduler."""
from __future__ import annotations

import unittest
from typing import Callable, List, Optional

from listing.logic.debouncer import SearchDebouncer
from listing.logic.request_tracker import RequestTracker


class FakeScheduler:
    """Collects scheduled callbacks; ``run_pending`` fires the live ones."""

    def __init__(self) -> None:
        self.scheduled: List[dict] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> dict:
        handle = {"delay": delay, "callback": callback, "cancelled": False}
        self.scheduled.append(handle)
        return handle

    def cancel(self, handle: dict) -> None:
        handle["cancelled"] = True

    def live(self) -> List[dict]:
        return [h for h in self.scheduled if not h["cancelled"]]

    def run_pending(self) -> None:
        for handle in self.live():
            handle["cancelled"] = True
            handle["callback"]()


class TestSearchDebouncer(unittest.TestCase):
    def setUp(self) -> None:
        self.settled: List[str] = []
        self.scheduler = FakeScheduler()
        self.debouncer = SearchDebouncer(self.settled.append, delay_ms=400, scheduler=self.scheduler)

    def test_only_last_value_is_delivered(self) -> None:
        for text in ("s", "st", "ste", "steel"):
            self.debouncer.push(text)
        self.assertEqual(len(self.scheduler.live()), 1)
        self.assertEqual(self.scheduler.live()[0]["delay"], 0.4)
        self.scheduler.run_pending()
        self.assertEqual(self.settled, ["steel"])

    def test_flush_fires_immediately(self) -> None:
        self.debouncer.push("pet")
        self.debouncer.flush()
        self.assertEqual(self.settled, ["pet"])
        self.assertEqual(self.scheduler.live(), [])
        self.assertFalse(self.debouncer.has_pending)

    def test_cancel_drops_pending_value(self) -> None:
        self.debouncer.push("abc")
        self.debouncer.cancel()
        self.scheduler.run_pending()
        self.debouncer.flush()
        self.assertEqual(self.settled, [])

    def test_empty_text_is_delivered(self) -> None:
        self.debouncer.push("x")
        self.debouncer.push("")
        self.scheduler.run_pending()
        self.assertEqual(self.settled, [""])

    def test_negative_delay_rejected(self) -> None:
        with self.assertRaises(ValueError):
            SearchDebouncer(lambda _: None, delay_ms=-1, scheduler=self.scheduler)


class TestRequestTracker(unittest.TestCase):
    def test_only_latest_token_is_current(self) -> None:
        tracker = RequestTracker()
        first: Optional[int] = tracker.issue()
        second = tracker.issue()
        self.assertGreater(second, first)
        self.assertFalse(tracker.is_current(first))
        self.assertTrue(tracker.is_current(second))
        self.assertEqual(tracker.latest, second)


if __name__ == "__main__":
    unittest.main()
