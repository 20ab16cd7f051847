"""Urgency tiers of a due date. Derived on every render, never stored."""
from __future__ import annotations

from enum import Enum


class UrgencyTier(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    COMPLETED = "completed"
