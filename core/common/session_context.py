"""
core/common/session_context.py

Runtime context of one console session.

=====================================================================
Purpose
=====================================================================
Owns the single CapabilityStore of the session and wires the services a
list screen needs (gate, lifecycle, transitions, urgency, backend, config).
There is exactly one instance per session, passed explicitly; nothing is
kept in module globals.

=====================================================================
Lifecycle
=====================================================================
- ``start(actor)`` / ``start_from_payload(user)`` loads the store at login
- ``end(reason)`` unloads it; every capability query is False afterwards
- observers receive a UserSessionEvent on login and logout
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor
from typing import Any, Callable, List, Mapping, Optional

from capabilities.logic.capability_gate import CapabilityGate
from capabilities.logic.capability_store import CapabilityStore
from core.common.session_events import SessionEventType, UserSessionEvent
from core.config.config_service import ConfigService
from core.contracts.audit import IAuditLogger
from core.contracts.backend import IBackendGateway
from core.helpers.date_time_helper import utc_now
from core.logging.logic.logger import AuditLogger
from core.models.actor import Actor
from core.models.entity import EntityType
from lifecycle.services.lifecycle_service import LifecycleService
from lifecycle.services.policy.workflow_policy import WorkflowPolicy
from lifecycle.services.transition_service import TransitionService
from listing.controllers.list_controller import ListController
from listing.logic.debouncer import Scheduler
from listing.logic.listing_registry import build_listing_registry
from urgency.logic.urgency_classifier import UrgencyClassifier

logger = logging.getLogger(__name__)

SessionObserver = Callable[[UserSessionEvent], None]


class SessionContext:
    def __init__(
        self,
        *,
        backend: IBackendGateway,
        config: Optional[ConfigService] = None,
        policy: Optional[WorkflowPolicy] = None,
        audit: Optional[IAuditLogger] = None,
        scheduler: Optional[Scheduler] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self.config = config or ConfigService()
        self.backend = backend
        self.policy = policy or WorkflowPolicy.load_configured(self.config.lifecycle.transitions_file)
        self.audit = audit or AuditLogger(self.config.logging.audit_db)

        self.store = CapabilityStore()
        self.gate = CapabilityGate(self.store)
        self.lifecycle = LifecycleService(self.policy, self.gate)
        self.transitions = TransitionService(backend, self.lifecycle, self.store, self.audit)
        self.classifier = UrgencyClassifier(self.policy, warning_days=self.config.urgency.warning_days)
        self.listings = build_listing_registry(
            page_size_options=self.config.listing.page_size_options,
            default_page_size=self.config.listing.default_page_size,
        )

        self._scheduler = scheduler
        self._executor = executor
        self._observers: List[SessionObserver] = []
        self._observers_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    #  Session API
    # ------------------------------------------------------------------ #
    @property
    def actor(self) -> Optional[Actor]:
        return self.store.actor

    def start(self, actor: Actor, *, reason: str = "login") -> None:
        old = self.store.actor
        self.store.load(actor)
        logger.info("Session started for %s", actor.username)
        self._emit("login", old, actor, reason)

    def start_from_payload(self, user: Mapping[str, Any], *, reason: str = "login") -> Actor:
        actor = Actor.from_session_payload(user)
        self.start(actor, reason=reason)
        return actor

    def end(self, reason: str = "logout") -> None:
        old = self.store.actor
        self.store.unload()
        if old is not None:
            logger.info("Session ended for %s (%s)", old.username, reason)
            self._emit("logout", old, None, reason)

    # ------------------------------------------------------------------ #
    #  Observers
    # ------------------------------------------------------------------ #
    def subscribe(self, callback: SessionObserver) -> None:
        with self._observers_lock:
            if callback not in self._observers:
                self._observers.append(callback)

    def unsubscribe(self, callback: SessionObserver) -> None:
        with self._observers_lock:
            if callback in self._observers:
                self._observers.remove(callback)

    def _emit(self, type_: SessionEventType, old: Optional[Actor], new: Optional[Actor], reason: str) -> None:
        event = UserSessionEvent(type=type_, old_actor=old, new_actor=new, reason=reason, ts_utc=utc_now())
        with self._observers_lock:
            observers = list(self._observers)
        for callback in observers:
            callback(event)

    # ------------------------------------------------------------------ #
    #  Wiring
    # ------------------------------------------------------------------ #
    def list_controller(self, entity_type: EntityType | str) -> ListController:
        return ListController(
            spec=self.listings[EntityType(entity_type)],
            backend=self.backend,
            gate=self.gate,
            lifecycle=self.lifecycle,
            transitions=self.transitions,
            classifier=self.classifier,
            debounce_ms=self.config.listing.search_debounce_ms,
            scheduler=self._scheduler,
            executor=self._executor,
            page_window=self.config.listing.page_window,
        )
