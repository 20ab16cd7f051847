from __future__ import annotations

from capabilities.enum.capability import Capability
from capabilities.logic.capability_gate import CapabilityGate, GateConstraints, NO_CONSTRAINTS
from capabilities.logic.capability_store import CapabilityStore
from core.models.actor import Actor


def _gate(*caps: Capability, role: str = "Clerk") -> CapabilityGate:
    return CapabilityGate(CapabilityStore(Actor.create(username="u", role=role, capabilities=caps)))


def test_no_constraints_always_permitted() -> None:
    assert _gate().evaluate(NO_CONSTRAINTS)
    assert NO_CONSTRAINTS.is_empty


def test_required_decides_alone() -> None:
    gate = _gate(Capability.CLIENTS_VIEW)
    # required fails, any_of would pass: required wins
    constraints = GateConstraints.of(Capability.CLIENTS_EDIT, any_of=[Capability.CLIENTS_VIEW])
    assert not gate.evaluate(constraints)
    assert gate.evaluate(GateConstraints.of("Clients.View", all_of=[Capability.CLIENTS_DELETE]))


def test_any_of_takes_precedence_over_all_of() -> None:
    gate = _gate(Capability.CLIENTS_VIEW)
    constraints = GateConstraints.of(
        any_of=[Capability.CLIENTS_VIEW, Capability.CLIENTS_EDIT],
        all_of=[Capability.CLIENTS_VIEW, Capability.CLIENTS_EDIT],
    )
    assert gate.evaluate(constraints)


def test_all_of_used_when_others_empty() -> None:
    gate = _gate(Capability.CLIENTS_VIEW)
    assert not gate.evaluate(GateConstraints.of(all_of=[Capability.CLIENTS_VIEW, Capability.CLIENTS_EDIT]))
    assert _gate(Capability.CLIENTS_VIEW, Capability.CLIENTS_EDIT).evaluate(
        GateConstraints.of(all_of=[Capability.CLIENTS_VIEW, Capability.CLIENTS_EDIT])
    )


def test_guard_returns_action_or_none() -> None:
    gate = _gate(Capability.ORDERS_CANCEL)
    assert gate.guard("cancel", GateConstraints.of(Capability.ORDERS_CANCEL)) == "cancel"
    assert gate.guard("process", GateConstraints.of(Capability.ORDERS_PROCESS)) is None


def test_filter_keeps_order_of_permitted_actions() -> None:
    gate = _gate(Capability.ORDERS_EDIT, Capability.ORDERS_CANCEL)
    actions = [
        ("edit", GateConstraints.of(Capability.ORDERS_EDIT)),
        ("process", GateConstraints.of(Capability.ORDERS_PROCESS)),
        ("cancel", GateConstraints.of(Capability.ORDERS_CANCEL)),
        ("view", NO_CONSTRAINTS),
    ]
    assert gate.filter(actions) == ["edit", "cancel", "view"]


def test_admin_passes_every_gate() -> None:
    gate = _gate(role="Admin")
    assert gate.evaluate(GateConstraints.of(Capability.ROLES_MANAGE_PERMISSIONS))
    assert gate.evaluate(GateConstraints.of(all_of=list(Capability)))


def test_logged_out_gate_denies_constrained_actions() -> None:
    gate = CapabilityGate(CapabilityStore())
    assert not gate.evaluate(GateConstraints.of(Capability.ORDERS_VIEW))
    assert gate.evaluate(NO_CONSTRAINTS)
