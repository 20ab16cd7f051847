"""
urgency_classifier.py

Classifies an entity's due date into an urgency tier:

1. status counted as completed by the entity's machine -> completed
2. no due date                                         -> green
3. days = ceil((due - now) / 1 day)
   days < 0                -> red
   0 <= days <= warning    -> yellow
   otherwise               -> green

``now`` is read on every call; nothing is cached.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from core.helpers.date_time_helper import as_utc, utc_now
from core.models.entity import EntityRecord
from lifecycle.services.policy.workflow_policy import WorkflowPolicy
from urgency.enum.urgency_tier import UrgencyTier

DEFAULT_WARNING_DAYS = 5
_DAY_SECONDS = timedelta(days=1).total_seconds()


class UrgencyClassifier:
    def __init__(
        self,
        policy: WorkflowPolicy,
        warning_days: int = DEFAULT_WARNING_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if warning_days < 0:
            raise ValueError("warning_days must be >= 0")
        self._policy = policy
        self._warning_days = warning_days
        self._clock = clock or utc_now

    def classify(self, entity: EntityRecord, now: Optional[datetime] = None) -> UrgencyTier:
        machine = self._policy.machine_for(entity.entity_type)
        if machine is not None and machine.is_completed(entity.status):
            return UrgencyTier.COMPLETED
        if entity.due_date is None:
            return UrgencyTier.GREEN

        current = as_utc(now if now is not None else self._clock())
        return self.tier_for_days(days_until(entity.due_date, current))

    def tier_for_days(self, days: int) -> UrgencyTier:
        if days < 0:
            return UrgencyTier.RED
        if days <= self._warning_days:
            return UrgencyTier.YELLOW
        return UrgencyTier.GREEN


def days_until(due: datetime, now: datetime) -> int:
    """Whole days from ``now`` to ``due``, rounded up."""
    delta = as_utc(due) - as_utc(now)
    return math.ceil(delta.total_seconds() / _DAY_SECONDS)
