"""Tests for the bundled lifecycle machines and machine validation."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.exceptions.errors import LifecycleConfigError
from core.models.entity import EntityType
from lifecycle.enum.statuses import AcquisitionStatus, OrderStatus, ProductionPlanStatus
from lifecycle.models.state_machine import StateMachine
from lifecycle.services.policy.workflow_policy import WorkflowPolicy


@pytest.fixture(scope="module")
def policy() -> WorkflowPolicy:
    return WorkflowPolicy.load_default()


def test_bundled_policy_declares_all_lifecycle_entities(policy: WorkflowPolicy) -> None:
    assert set(policy.entity_types) == {
        EntityType.ACQUISITION,
        EntityType.ORDER,
        EntityType.PRODUCTION_PLAN,
        EntityType.RECYCLABLE_PRODUCTION_PLAN,
        EntityType.MATERIAL,
        EntityType.USER,
    }
    assert not policy.has_machine(EntityType.CLIENT)


def test_machine_states_match_status_enums(policy: WorkflowPolicy) -> None:
    assert policy.machine_for("acquisition").states == tuple(s.value for s in AcquisitionStatus)
    assert policy.machine_for("order").states == tuple(s.value for s in OrderStatus)
    assert policy.machine_for("production_plan").states == tuple(s.value for s in ProductionPlanStatus)


def test_acquisition_transitions(policy: WorkflowPolicy) -> None:
    m = policy.machine_for(EntityType.ACQUISITION)
    assert m.actions_from("Draft", "RawMaterials") == ["edit", "receive", "cancel"]
    assert m.next_status("Draft", "receive", "RawMaterials") == "Received"
    assert m.next_status("Draft", "receive", "RecyclableMaterials") == "ReadyForProcessing"
    assert m.next_status("Draft", "edit", "RawMaterials") == "Draft"
    assert m.actions_from("ReadyForProcessing", "RecyclableMaterials") == ["process", "cancel"]
    assert m.next_status("ReadyForProcessing", "process", "RecyclableMaterials") == "Received"
    assert m.rule_for("ReadyForProcessing", "process", "RawMaterials") is None
    assert m.actions_from("Received", "RawMaterials") == []
    assert m.actions_from("Cancelled") == []


def test_order_cancel_from_every_non_terminal_state(policy: WorkflowPolicy) -> None:
    m = policy.machine_for(EntityType.ORDER)
    for status in ("Draft", "Pending", "Processing", "Shipped"):
        assert m.next_status(status, "cancel") == "Cancelled"
    for status in ("Delivered", "Cancelled"):
        assert m.actions_from(status) == []
    assert m.next_status("Pending", "process") == "Processing"
    assert m.rule_for("Processing", "process") is None


def test_production_plans(policy: WorkflowPolicy) -> None:
    plan = policy.machine_for(EntityType.PRODUCTION_PLAN)
    assert plan.next_status("Planned", "execute") == "InProgress"
    assert plan.next_status("InProgress", "receive") == "Completed"
    assert plan.rule_for("Draft", "execute").requires == "canProduce"

    recyclable = policy.machine_for(EntityType.RECYCLABLE_PRODUCTION_PLAN)
    assert recyclable.next_status("Draft", "execute") == "Completed"
    assert recyclable.actions_from("InProgress") == ["cancel"]


def test_activity_machines(policy: WorkflowPolicy) -> None:
    for entity_type in (EntityType.MATERIAL, EntityType.USER):
        m = policy.machine_for(entity_type)
        assert m.actions_from("Active") == ["edit", "deactivate"]
        assert m.actions_from("Inactive") == ["activate"]


def test_terminal_states_have_no_outgoing_rules(policy: WorkflowPolicy) -> None:
    for entity_type in policy.entity_types:
        m = policy.machine_for(entity_type)
        for status in m.terminal:
            assert m.actions_from(status) == []


def test_server_flags_map_to_actions(policy: WorkflowPolicy) -> None:
    m = policy.machine_for(EntityType.ACQUISITION)
    assert m.flag_for("receive") == "canReceive"
    assert m.flag_for("cancel") == "canDelete"
    assert m.flag_for("process") is None


def _machine(**overrides) -> dict:
    data = {
        "states": ["Open", "Closed"],
        "terminal": ["Closed"],
        "transitions": [{"from": ["Open"], "action": "close", "to": "Closed", "capability": "Orders.Cancel"}],
    }
    data.update(overrides)
    return data


def test_validation_rejects_undeclared_state() -> None:
    bad = _machine(transitions=[{"from": ["Open"], "action": "close", "to": "Gone", "capability": "Orders.Cancel"}])
    with pytest.raises(LifecycleConfigError):
        StateMachine.from_dict("order", bad)


def test_validation_rejects_terminal_outgoing_rule() -> None:
    bad = _machine(transitions=[{"from": ["Closed"], "action": "reopen", "to": "Open", "capability": "Orders.Edit"}])
    with pytest.raises(LifecycleConfigError):
        StateMachine.from_dict("order", bad)


def test_validation_rejects_unknown_capability() -> None:
    bad = _machine(transitions=[{"from": ["Open"], "action": "close", "to": "Closed", "capability": "Orders.Zap"}])
    with pytest.raises(LifecycleConfigError):
        StateMachine.from_dict("order", bad)


def test_load_from_directory_reads_custom_table(tmp_path: Path) -> None:
    (tmp_path / "lifecycle_transitions.json").write_text(
        json.dumps({"machines": {"order": _machine()}}), encoding="utf-8"
    )
    policy = WorkflowPolicy.load_from_directory(tmp_path)
    assert policy.entity_types == [EntityType.ORDER]
    assert policy.machine_for("order").next_status("Open", "close") == "Closed"


def test_missing_directory_falls_back_to_bundled(tmp_path: Path) -> None:
    policy = WorkflowPolicy.load_from_directory(tmp_path / "nowhere")
    assert policy.has_machine(EntityType.ACQUISITION)


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "lifecycle_transitions.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(LifecycleConfigError):
        WorkflowPolicy.load_configured(str(path))
