"""Transition service.

Sends a lifecycle transition to the backend and records the outcome in the
audit trail. The returned record is the backend's view of the entity; local
state is never patched, callers reload.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from capabilities.logic.capability_store import CapabilityStore
from core.contracts.audit import IAuditLogger
from core.contracts.backend import IBackendGateway
from core.exceptions.errors import BackendError, PolicyViolationError, TransitionRejectedError
from core.models.entity import EntityRecord
from lifecycle.services.lifecycle_service import LifecycleService

logger = logging.getLogger(__name__)

FEATURE_ID = "lifecycle"


class TransitionService:
    def __init__(
        self,
        backend: IBackendGateway,
        lifecycle: LifecycleService,
        store: CapabilityStore,
        audit: Optional[IAuditLogger] = None,
    ) -> None:
        self._backend = backend
        self._lifecycle = lifecycle
        self._store = store
        self._audit = audit

    def request(
        self,
        entity: EntityRecord,
        action: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> EntityRecord:
        """
        Perform ``action`` on ``entity``.

        :raises PolicyViolationError: action is not currently offered (backend not contacted)
        :raises TransitionRejectedError: backend refused; message is the server's, verbatim
        :raises BackendError: transport failure
        """
        ref = f"{entity.entity_type.value}:{entity.id}"

        if not self._lifecycle.is_available(entity, action):
            message = f"Action '{action}' is not available for {entity.entity_type.value} in status {entity.status}"
            self._write_audit(f"{action}_denied", ref, message, level="WARNING")
            raise PolicyViolationError(message)

        expected = self._lifecycle.target_status(entity, action)
        try:
            updated = self._backend.transition(entity.entity_type, entity.id, action, payload)
        except TransitionRejectedError as ex:
            logger.warning("Transition %s on %s rejected: %s", action, ref, ex.message)
            self._write_audit(f"{action}_rejected", ref, ex.message, level="WARNING")
            raise
        except BackendError as ex:
            logger.error("Transition %s on %s failed: %s", action, ref, ex.message)
            self._write_audit(f"{action}_failed", ref, ex.message, level="ERROR")
            raise

        if expected is not None and updated.status is not None and updated.status != expected:
            logger.info(
                "Backend reported %s after %s on %s (expected %s)", updated.status, action, ref, expected
            )
        self._write_audit(action, ref, f"{entity.status} -> {updated.status}")
        return updated

    def _write_audit(self, event: str, reference_id: str, message: str, *, level: str = "INFO") -> None:
        if self._audit is None:
            return
        actor = self._store.actor
        self._audit.log(
            FEATURE_ID,
            event,
            user_id=actor.user_id if actor else None,
            username=actor.username if actor else None,
            level=level,
            reference_id=reference_id,
            message=message,
        )
