"""Tests for CapabilityStore and the Capability enumeration."""
from __future__ import annotations

import pytest

from capabilities.enum.capability import Capability
from capabilities.logic.capability_store import CapabilityStore
from core.exceptions.errors import UnknownCapabilityError
from core.models.actor import Actor


def _store(role: str = "Clerk", caps=()) -> CapabilityStore:
    return CapabilityStore(Actor.create(username="u", role=role, capabilities=caps))


def test_admin_grants_everything_even_without_explicit_capabilities() -> None:
    store = _store(role="Admin")
    assert store.has(Capability.ROLES_MANAGE_PERMISSIONS)
    assert store.has_any([])
    assert store.has_all([])
    assert store.has_any([Capability.ORDERS_CANCEL, Capability.USERS_EDIT])
    assert store.has_all(list(Capability))


def test_admin_check_runs_before_key_parsing() -> None:
    store = _store(role="Admin")
    assert store.has("Nope.Unknown")
    assert store.has_all(["Nope.Unknown"])


def test_admin_role_match_is_exact() -> None:
    store = _store(role="admin")
    assert not store.has(Capability.ORDERS_VIEW)


def test_non_admin_membership() -> None:
    store = _store(caps=[Capability.ACQUISITIONS_VIEW, "Acquisitions.Receive"])
    assert store.has(Capability.ACQUISITIONS_VIEW)
    assert store.has("Acquisitions.Receive")
    assert not store.has(Capability.ACQUISITIONS_CANCEL)


def test_has_any_and_has_all() -> None:
    store = _store(caps=[Capability.ORDERS_VIEW, Capability.ORDERS_EDIT])
    assert store.has_any([Capability.ORDERS_CANCEL, Capability.ORDERS_EDIT])
    assert not store.has_any([Capability.ORDERS_CANCEL, Capability.ORDERS_PROCESS])
    assert not store.has_any([])
    assert store.has_all([Capability.ORDERS_VIEW, Capability.ORDERS_EDIT])
    assert not store.has_all([Capability.ORDERS_VIEW, Capability.ORDERS_CANCEL])
    assert store.has_all([])


def test_empty_store_fails_closed() -> None:
    store = CapabilityStore()
    assert not store.is_loaded
    assert not store.has(Capability.ORDERS_VIEW)
    assert not store.has_any([Capability.ORDERS_VIEW])
    assert not store.has_all([])


def test_unload_fails_closed_even_for_admin() -> None:
    store = _store(role="Admin")
    store.unload()
    assert store.actor is None
    assert not store.has(Capability.ORDERS_VIEW)
    assert not store.has_all([])


def test_unknown_key_raises_for_non_admin() -> None:
    store = _store(caps=[Capability.ORDERS_VIEW])
    with pytest.raises(UnknownCapabilityError):
        store.has("Orders.Teleport")
    with pytest.raises(ValueError):
        store.has_any(["Orders.View", "Orders.Teleport"])


def test_capability_parse_and_split() -> None:
    cap = Capability.parse(" Production.Execute ")
    assert cap is Capability.PRODUCTION_EXECUTE
    assert cap.domain == "Production"
    assert cap.action == "Execute"
    with pytest.raises(UnknownCapabilityError):
        Capability.parse("")


def test_by_domain_groups_in_declaration_order() -> None:
    groups = Capability.by_domain()
    assert list(groups)[:3] == ["Acquisitions", "Inventory", "Production"]
    assert groups["Roles"] == [Capability.ROLES_VIEW_TAB, Capability.ROLES_MANAGE_PERMISSIONS]
    assert sum(len(v) for v in groups.values()) == len(Capability)


def test_actor_from_session_payload_drops_unknown_keys() -> None:
    actor = Actor.from_session_payload(
        {
            "id": "7",
            "username": "maria",
            "role": "Operator",
            "permissions": ["Orders.View", "Legacy.Thing", "Orders.Process"],
        }
    )
    assert actor.user_id == 7
    assert actor.capabilities == frozenset({Capability.ORDERS_VIEW, Capability.ORDERS_PROCESS})
    assert not actor.is_admin
