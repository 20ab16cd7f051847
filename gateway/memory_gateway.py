"""
memory_gateway.py

In-process backend used by tests and the console demo.

Behaves like the real server where the console can observe it: search over
the declared fields, equality filters, sorting, pagination, statistics by
status, and server-side transition legality with server-style rejection
messages. Failures can be injected with ``fail_next``.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from collections import Counter, deque
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Tuple

from capabilities.logic.capability_store import CapabilityStore
from core.contracts.backend import IBackendGateway
from core.exceptions.errors import BackendError, LoadFailedError, TransitionRejectedError
from core.helpers.date_time_helper import utc_now_iso
from core.models.actor import Actor
from core.models.entity import EntityRecord, EntityType
from lifecycle.enum.statuses import ActivityStatus
from lifecycle.services.lifecycle_service import READINESS_HINTS
from lifecycle.services.policy.workflow_policy import WorkflowPolicy
from listing.dto.collection_query import CollectionQuery, SortOrder
from listing.dto.paged_result import PagedResult
from listing.dto.statistics import EntityStatistics
from listing.logic.listing_registry import get_listing_spec

logger = logging.getLogger(__name__)

OPERATIONS = ("fetch_page", "fetch_statistics", "transition")

_PAST_TENSE = {
    "receive": "received",
    "cancel": "cancelled",
    "process": "processed",
    "execute": "executed",
    "edit": "edited",
    "activate": "activated",
    "deactivate": "deactivated",
}

# sort fields whose payload key is not the lower-camel form of the field
_FIELD_KEYS = {"updated": "updatedAt"}


def _data_key(sort_field: str) -> str:
    if sort_field in _FIELD_KEYS:
        return _FIELD_KEYS[sort_field]
    return sort_field[:1].lower() + sort_field[1:]


def _camel(name: str) -> str:
    return name[:1].lower() + name[1:]


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class InMemoryBackendGateway(IBackendGateway):
    def __init__(
        self,
        actor: Actor,
        *,
        policy: Optional[WorkflowPolicy] = None,
        records: Optional[Mapping[EntityType, Iterable[Mapping[str, Any]]]] = None,
    ) -> None:
        self._actor = actor
        self._policy = policy or WorkflowPolicy.load_default()
        self._lock = threading.RLock()
        self._data: Dict[EntityType, Dict[Any, Dict[str, Any]]] = {t: {} for t in EntityType}
        self._ids = itertools.count(1)
        self._failures: Dict[str, Deque[BackendError]] = {op: deque() for op in OPERATIONS}
        self.calls: List[Tuple[str, EntityType]] = []
        for entity_type, payloads in (records or {}).items():
            self.seed(entity_type, payloads)

    # ------------------------------------------------------------------ #
    #  Test/demo helpers
    # ------------------------------------------------------------------ #
    def seed(self, entity_type: EntityType | str, payloads: Iterable[Mapping[str, Any]]) -> List[Any]:
        entity_type = EntityType(entity_type)
        ids = []
        with self._lock:
            for payload in payloads:
                row = copy.deepcopy(dict(payload))
                row.setdefault("id", next(self._ids))
                self._data[entity_type][row["id"]] = row
                ids.append(row["id"])
        return ids

    def get(self, entity_type: EntityType | str, entity_id: Any) -> EntityRecord:
        with self._lock:
            row = self._data[EntityType(entity_type)].get(entity_id)
            if row is None:
                raise KeyError(entity_id)
            return EntityRecord.from_payload(entity_type, copy.deepcopy(row))

    def fail_next(self, operation: str, error: Optional[BackendError] = None) -> None:
        """Make the next call of ``operation`` raise ``error``."""
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation {operation!r}, expected one of {OPERATIONS}")
        if error is None:
            error = (
                BackendError("Internal server error", status_code=500)
                if operation == "transition"
                else LoadFailedError("Failed to load data", status_code=500)
            )
        with self._lock:
            self._failures[operation].append(error)

    def _raise_injected(self, operation: str) -> None:
        with self._lock:
            queue = self._failures[operation]
            error = queue.popleft() if queue else None
        if error is not None:
            raise error

    # ------------------------------------------------------------------ #
    #  IBackendGateway
    # ------------------------------------------------------------------ #
    def current_actor(self) -> Actor:
        return self._actor

    def fetch_page(self, entity_type: EntityType, query: CollectionQuery) -> PagedResult[EntityRecord]:
        entity_type = EntityType(entity_type)
        self.calls.append(("fetch_page", entity_type))
        self._raise_injected("fetch_page")

        spec = get_listing_spec(entity_type)
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._data[entity_type].values()]
        records = [(row, EntityRecord.from_payload(entity_type, row)) for row in rows]

        term = (query.search_term or "").strip().lower()
        if term:
            records = [
                (row, rec) for row, rec in records
                if any(term in str(row.get(f) or "").lower() for f in spec.search_fields)
            ]

        for key, value in query.filters.items():
            records = [(row, rec) for row, rec in records if self._matches(row, rec, key, value)]

        column = spec.column_for_field(query.sort_by) or spec.column(spec.default_sort)
        sort_key = _data_key(column.field)
        present = [(r, e) for r, e in records if r.get(sort_key) is not None]
        missing = [(r, e) for r, e in records if r.get(sort_key) is None]
        present.sort(key=lambda pair: pair[0][sort_key], reverse=query.sort_order is SortOrder.DESC)
        records = present + missing

        start = (query.page - 1) * query.page_size
        items = [rec for _, rec in records[start:start + query.page_size]]
        return PagedResult(items=items, page=query.page, page_size=query.page_size, total_count=len(records))

    def fetch_statistics(self, entity_type: EntityType) -> EntityStatistics:
        entity_type = EntityType(entity_type)
        self.calls.append(("fetch_statistics", entity_type))
        self._raise_injected("fetch_statistics")

        with self._lock:
            records = [EntityRecord.from_payload(entity_type, r) for r in self._data[entity_type].values()]
        counts = Counter(r.status for r in records if r.status)
        values: Dict[str, int] = {"total": len(records)}
        machine = self._policy.machine_for(entity_type)
        for state in (machine.states if machine else ()):
            values[_camel(state)] = counts.get(state, 0)
        return EntityStatistics(values=values)

    def transition(
        self,
        entity_type: EntityType,
        entity_id: Any,
        action: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> EntityRecord:
        entity_type = EntityType(entity_type)
        self.calls.append(("transition", entity_type))
        self._raise_injected("transition")

        label = entity_type.value.replace("_", " ")
        with self._lock:
            row = self._data[entity_type].get(entity_id)
            if row is None:
                raise TransitionRejectedError(f"{label.capitalize()} not found", status_code=404)

            machine = self._policy.machine_for(entity_type)
            if machine is None:
                raise TransitionRejectedError(f"Unsupported action '{action}'", status_code=400)

            current = EntityRecord.from_payload(entity_type, row)
            rule = machine.rule_for(current.status, action, current.subtype)
            if rule is None:
                raise TransitionRejectedError(self._rejection(machine, label, action, current.subtype), status_code=400)
            if not CapabilityStore(self._actor).has(rule.capability):
                raise TransitionRejectedError("You do not have permission to perform this action", status_code=403)
            if rule.requires and row.get(rule.requires) is False:
                raise TransitionRejectedError(
                    READINESS_HINTS.get(rule.requires, f"Cannot {action} {label}"), status_code=400
                )

            if payload:
                row.update(dict(payload))
            target = rule.target(current.status, current.subtype)
            if target != current.status:
                if current.status in (ActivityStatus.ACTIVE.value, ActivityStatus.INACTIVE.value):
                    row["isActive"] = target == ActivityStatus.ACTIVE.value
                else:
                    row["status"] = target
            row["updatedAt"] = utc_now_iso()
            logger.info("%s #%s: %s -> %s", label, entity_id, action, target)
            return EntityRecord.from_payload(entity_type, copy.deepcopy(row))

    # ------------------------------------------------------------------ #
    @staticmethod
    def _matches(row: Mapping[str, Any], record: EntityRecord, key: str, value: Any) -> bool:
        if key == "status":
            return record.status is not None and record.status.lower() == str(value).lower()
        if key == "type":
            return record.subtype is not None and record.subtype.lower() == str(value).lower()
        if key == "isActive":
            return _as_bool(row.get("isActive", True)) == _as_bool(value)
        return str(row.get(key)) == str(value)

    @staticmethod
    def _rejection(machine, label: str, action: str, subtype: Optional[str]) -> str:
        rule = machine.rule_for_action(action, subtype)
        if rule is None:
            return f"Action '{action}' is not supported for this {label}"
        states = [s for s in machine.states if s in rule.from_states]
        verb = _PAST_TENSE.get(action, f"{action}ed")
        return f"Only {' or '.join(s.lower() for s in states)} {label}s can be {verb}"
