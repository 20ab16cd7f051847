"""Lifecycle service.

Derives the actions offered for one entity:

    offered = status/type-legal actions  ∩  capability-permitted actions

in table order. Server-computed flags (e.g. ``canReceive``) replace the
status-table check for the action they cover; capability gating still
applies. Actions whose readiness flag (``requires``) is False are not
offered; ``describe_actions`` lists them as disabled with a hint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from capabilities.logic.capability_gate import CapabilityGate, GateConstraints
from core.models.entity import EntityRecord
from lifecycle.models.state_machine import StateMachine, TransitionRule
from lifecycle.services.policy.workflow_policy import WorkflowPolicy

logger = logging.getLogger(__name__)

READINESS_HINTS = {
    "canProduce": "Insufficient materials in stock",
}


@dataclass(frozen=True)
class ActionState:
    """An action as presented on a row: enabled, or disabled with a hint."""

    action: str
    enabled: bool = True
    hint: Optional[str] = None


class LifecycleService:
    def __init__(self, policy: WorkflowPolicy, gate: CapabilityGate) -> None:
        self._policy = policy
        self._gate = gate

    @property
    def policy(self) -> WorkflowPolicy:
        return self._policy

    def machine_for(self, entity: EntityRecord) -> Optional[StateMachine]:
        return self._policy.machine_for(entity.entity_type)

    def legal_rule(self, entity: EntityRecord, action: str) -> Optional[TransitionRule]:
        """Rule that makes ``action`` legal for the entity's status/type, ignoring capabilities."""
        machine = self.machine_for(entity)
        if machine is None:
            return None
        flag = machine.flag_for(action)
        flag_value = entity.flag(flag) if flag else None
        if flag_value is None:
            return machine.rule_for(entity.status, action, entity.subtype)
        if not flag_value:
            return None
        return machine.rule_for(entity.status, action, entity.subtype) or machine.rule_for_action(
            action, entity.subtype
        )

    def describe_actions(self, entity: EntityRecord) -> List[ActionState]:
        machine = self.machine_for(entity)
        if machine is None:
            return []

        states: List[ActionState] = []
        for action in machine.actions():
            rule = self.legal_rule(entity, action)
            if rule is None:
                continue
            if not self._gate.evaluate(GateConstraints(required=rule.capability)):
                continue
            if rule.requires and entity.flag(rule.requires) is False:
                hint = READINESS_HINTS.get(rule.requires, f"Not ready ({rule.requires})")
                states.append(ActionState(action, enabled=False, hint=hint))
                continue
            states.append(ActionState(action))

        logger.debug(
            "Actions for %s #%s in %s: %s",
            entity.entity_type.value, entity.id, entity.status, [s.action for s in states if s.enabled],
        )
        return states

    def available_actions(self, entity: EntityRecord) -> List[str]:
        return [s.action for s in self.describe_actions(entity) if s.enabled]

    def is_available(self, entity: EntityRecord, action: str) -> bool:
        return action in self.available_actions(entity)

    def target_status(self, entity: EntityRecord, action: str) -> Optional[str]:
        """Status the backend is expected to report after ``action``."""
        rule = self.legal_rule(entity, action)
        if rule is None:
            return None
        # a server flag may allow the action from a status the table does not list
        expected = self.machine_for(entity).next_status(entity.status, action, entity.subtype)
        return expected if expected is not None else rule.target(entity.status, entity.subtype)
