from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.models.entity import EntityRecord, EntityType
from lifecycle.services.policy.workflow_policy import WorkflowPolicy
from urgency.enum.urgency_tier import UrgencyTier
from urgency.logic.urgency_classifier import UrgencyClassifier, days_until

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def classifier() -> UrgencyClassifier:
    return UrgencyClassifier(WorkflowPolicy.load_default(), warning_days=5, clock=lambda: NOW)


def _acq(due, status="Draft") -> EntityRecord:
    return EntityRecord.from_payload(
        EntityType.ACQUISITION, {"id": 1, "status": status, "type": "RawMaterials", "dueDate": due}
    )


@pytest.mark.parametrize(
    ("offset", "expected"),
    [
        (timedelta(days=30), UrgencyTier.GREEN),
        (timedelta(days=5, hours=1), UrgencyTier.GREEN),
        (timedelta(days=5), UrgencyTier.YELLOW),
        (timedelta(hours=3), UrgencyTier.YELLOW),
        (timedelta(0), UrgencyTier.YELLOW),
        (timedelta(days=-1), UrgencyTier.RED),
        (timedelta(days=-40), UrgencyTier.RED),
    ],
)
def test_tiers_around_the_warning_window(classifier: UrgencyClassifier, offset, expected) -> None:
    due = (NOW + offset).isoformat()
    assert classifier.classify(_acq(due)) is expected


def test_completed_status_wins_over_due_date(classifier: UrgencyClassifier) -> None:
    overdue = (NOW - timedelta(days=10)).isoformat()
    assert classifier.classify(_acq(overdue, status="Received")) is UrgencyTier.COMPLETED
    assert classifier.classify(_acq(overdue, status="ReadyForProcessing")) is UrgencyTier.COMPLETED
    assert classifier.classify(_acq(overdue, status="Cancelled")) is UrgencyTier.RED


def test_missing_due_date_is_green(classifier: UrgencyClassifier) -> None:
    assert classifier.classify(_acq(None)) is UrgencyTier.GREEN
    assert classifier.classify(_acq("")) is UrgencyTier.GREEN


def test_wire_formats_are_accepted(classifier: UrgencyClassifier) -> None:
    assert classifier.classify(_acq("2024-03-12T08:00:00.1234567Z")) is UrgencyTier.YELLOW
    assert classifier.classify(_acq("2024-03-12T08:00:00.1234Z")) is UrgencyTier.YELLOW
    assert classifier.classify(_acq("2024-03-12T08:00:00.12Z")) is UrgencyTier.YELLOW
    assert classifier.classify(_acq("2024-03-08T08:00:00.5+00:00")) is UrgencyTier.RED
    assert classifier.classify(_acq("2024-03-01")) is UrgencyTier.RED


def test_explicit_now_overrides_clock(classifier: UrgencyClassifier) -> None:
    entity = _acq((NOW + timedelta(days=3)).isoformat())
    assert classifier.classify(entity, now=NOW - timedelta(days=10)) is UrgencyTier.GREEN
    # naive datetimes are read as UTC
    assert classifier.classify(entity, now=datetime(2024, 3, 20)) is UrgencyTier.RED


def test_clock_is_read_on_every_call() -> None:
    ticks = [NOW, NOW + timedelta(days=8)]
    classifier = UrgencyClassifier(WorkflowPolicy.load_default(), clock=lambda: ticks.pop(0))
    entity = _acq((NOW + timedelta(days=7)).isoformat())
    assert classifier.classify(entity) is UrgencyTier.GREEN
    assert classifier.classify(entity) is UrgencyTier.RED


def test_other_entities_use_their_due_field(classifier: UrgencyClassifier) -> None:
    order = EntityRecord.from_payload(
        EntityType.ORDER, {"id": 2, "status": "Pending", "expectedDeliveryDate": (NOW + timedelta(days=2)).isoformat()}
    )
    delivered = EntityRecord.from_payload(EntityType.ORDER, {"id": 3, "status": "Delivered"})
    assert classifier.classify(order) is UrgencyTier.YELLOW
    assert classifier.classify(delivered) is UrgencyTier.COMPLETED


def test_days_until_rounds_up() -> None:
    assert days_until(NOW + timedelta(hours=1), NOW) == 1
    assert days_until(NOW - timedelta(hours=25), NOW) == -1
    assert days_until(NOW, NOW) == 0


def test_negative_warning_window_rejected() -> None:
    with pytest.raises(ValueError):
        UrgencyClassifier(WorkflowPolicy.load_default(), warning_days=-1)
