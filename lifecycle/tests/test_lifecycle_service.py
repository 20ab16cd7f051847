"""Tests for action derivation and transition requests."""
from __future__ import annotations

import pytest

from capabilities.enum.capability import Capability as C
from capabilities.logic.capability_gate import CapabilityGate
from capabilities.logic.capability_store import CapabilityStore
from core.exceptions.errors import BackendError, PolicyViolationError, TransitionRejectedError
from core.logging.logic.logger import AuditLogger
from core.models.actor import Actor
from core.models.entity import EntityRecord, EntityType
from gateway.memory_gateway import InMemoryBackendGateway
from lifecycle.services.lifecycle_service import LifecycleService
from lifecycle.services.policy.workflow_policy import WorkflowPolicy
from lifecycle.services.transition_service import TransitionService

POLICY = WorkflowPolicy.load_default()


def _service(*caps, role: str = "Clerk") -> LifecycleService:
    store = CapabilityStore(Actor.create(username="u", role=role, capabilities=caps))
    return LifecycleService(POLICY, CapabilityGate(store))


def _acq(status, type_="RawMaterials", **extra) -> EntityRecord:
    return EntityRecord.from_payload(EntityType.ACQUISITION, {"id": 1, "status": status, "type": type_, **extra})


def test_offered_is_legal_intersect_permitted() -> None:
    service = _service(C.ACQUISITIONS_RECEIVE, C.ACQUISITIONS_CANCEL)
    assert service.available_actions(_acq("Draft")) == ["receive", "cancel"]


def test_admin_sees_all_legal_actions_in_table_order() -> None:
    service = _service(role="Admin")
    assert service.available_actions(_acq("Draft")) == ["edit", "receive", "cancel"]
    assert service.available_actions(_acq("ReadyForProcessing", "RecyclableMaterials")) == ["process", "cancel"]


def test_terminal_status_offers_nothing_even_to_admin() -> None:
    service = _service(role="Admin")
    assert service.available_actions(_acq("Received")) == []
    assert service.available_actions(_acq(2)) == []


def test_process_requires_recyclable_subtype() -> None:
    service = _service(role="Admin")
    assert "process" not in service.available_actions(_acq("ReadyForProcessing", "RawMaterials"))


def test_logged_out_offers_nothing() -> None:
    service = LifecycleService(POLICY, CapabilityGate(CapabilityStore()))
    assert service.available_actions(_acq("Draft")) == []


def test_entity_without_machine_offers_nothing() -> None:
    client = EntityRecord.from_payload(EntityType.CLIENT, {"id": 3, "name": "ACME"})
    assert _service(role="Admin").available_actions(client) == []


def test_server_flags_override_the_table() -> None:
    service = _service(role="Admin")
    # server says receive is not possible although the table allows it
    assert service.available_actions(_acq("Draft", canReceive=False, canEdit=True, canDelete=True)) == [
        "edit",
        "cancel",
    ]
    # server forbids cancel on a ready-for-processing acquisition
    assert service.available_actions(_acq("ReadyForProcessing", "RecyclableMaterials", canDelete=False)) == [
        "process"
    ]


def test_server_flag_does_not_bypass_capabilities() -> None:
    service = _service(C.ACQUISITIONS_EDIT)
    assert service.available_actions(_acq("Draft", canReceive=True, canEdit=True)) == ["edit"]


def test_readiness_flag_disables_with_hint() -> None:
    service = _service(role="Admin")
    plan = EntityRecord.from_payload(EntityType.PRODUCTION_PLAN, {"id": 5, "status": "Planned", "canProduce": False})
    described = service.describe_actions(plan)
    execute = next(s for s in described if s.action == "execute")
    assert not execute.enabled
    assert execute.hint
    assert service.available_actions(plan) == ["cancel"]

    ready = EntityRecord.from_payload(EntityType.PRODUCTION_PLAN, {"id": 5, "status": "Planned", "canProduce": True})
    assert service.available_actions(ready) == ["execute", "cancel"]


def test_material_activity_actions() -> None:
    service = _service(C.INVENTORY_ACTIVATE, C.INVENTORY_DEACTIVATE)
    active = EntityRecord.from_payload(EntityType.MATERIAL, {"id": 1, "isActive": True})
    inactive = EntityRecord.from_payload(EntityType.MATERIAL, {"id": 1, "isActive": False})
    assert service.available_actions(active) == ["deactivate"]
    assert service.available_actions(inactive) == ["activate"]


# --------------------------------------------------------------------------- #
#  TransitionService
# --------------------------------------------------------------------------- #

@pytest.fixture
def wiring():
    actor = Actor.create(username="clerk", role="Clerk", user_id=4,
                         capabilities=[C.ACQUISITIONS_RECEIVE, C.ACQUISITIONS_CANCEL])
    store = CapabilityStore(actor)
    lifecycle = LifecycleService(POLICY, CapabilityGate(store))
    backend = InMemoryBackendGateway(actor, policy=POLICY)
    audit = AuditLogger()
    service = TransitionService(backend, lifecycle, store, audit)
    yield backend, service, audit
    audit.close()


def test_request_returns_backend_record_and_audits(wiring) -> None:
    backend, service, audit = wiring
    (acq_id,) = backend.seed(EntityType.ACQUISITION, [{"title": "PET", "status": "Draft", "type": "RecyclableMaterials"}])
    updated = service.request(backend.get("acquisition", acq_id), "receive")
    assert updated.status == "ReadyForProcessing"

    (entry,) = audit.query_logs(feature="lifecycle")
    assert entry.event == "receive"
    assert entry.username == "clerk"
    assert entry.reference_id == f"acquisition:{acq_id}"


def test_request_for_action_not_offered_never_reaches_backend(wiring) -> None:
    backend, service, audit = wiring
    (acq_id,) = backend.seed(EntityType.ACQUISITION, [{"title": "Steel", "status": "Draft", "type": "RawMaterials"}])
    with pytest.raises(PolicyViolationError):
        service.request(backend.get("acquisition", acq_id), "edit")
    assert ("transition", EntityType.ACQUISITION) not in backend.calls
    assert audit.query_logs(event="edit_denied")


def test_stale_client_gets_server_message_verbatim(wiring) -> None:
    backend, service, audit = wiring
    (acq_id,) = backend.seed(EntityType.ACQUISITION, [{"title": "Steel", "status": "Draft", "type": "RawMaterials"}])
    stale = backend.get("acquisition", acq_id)
    backend.transition(EntityType.ACQUISITION, acq_id, "receive")  # someone else was faster

    with pytest.raises(TransitionRejectedError) as info:
        service.request(stale, "receive")
    assert info.value.message == "Only draft acquisitions can be received"
    assert audit.query_logs(event="receive_rejected", level="WARNING")


def test_transport_failure_propagates_as_backend_error(wiring) -> None:
    backend, service, audit = wiring
    (acq_id,) = backend.seed(EntityType.ACQUISITION, [{"title": "Steel", "status": "Draft", "type": "RawMaterials"}])
    backend.fail_next("transition")
    with pytest.raises(BackendError) as info:
        service.request(backend.get("acquisition", acq_id), "cancel")
    assert not isinstance(info.value, TransitionRejectedError)
    assert audit.query_logs(event="cancel_failed", level="ERROR")


def test_target_status_follows_table_and_subtype() -> None:
    service = _service(role="Admin")
    assert service.target_status(_acq("Draft"), "receive") == "Received"
    assert service.target_status(_acq("Draft", "RecyclableMaterials"), "receive") == "ReadyForProcessing"
    assert service.target_status(_acq("Draft"), "edit") == "Draft"
    assert service.target_status(_acq("Received"), "receive") is None


def test_target_status_for_flag_allowed_action_outside_table() -> None:
    service = _service(role="Admin")
    # server allows receiving although the table has no rule from this status
    flagged = _acq("ReadyForProcessing", "RawMaterials", canReceive=True)
    assert service.target_status(flagged, "receive") == "Received"
