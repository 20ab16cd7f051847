"""
state_machine.py

Finite state machines of entity lifecycles.

=====================================================================
Model
=====================================================================
A machine is a set of named states plus an ordered list of transition
rules. A rule offers ``action`` from any of ``from_states`` and moves the
entity to ``to`` (None keeps the status, e.g. "edit"). Rules may be limited
to entity subtypes, may land in a subtype-specific state and may require a
server readiness flag (e.g. ``canProduce``).

Machines are validated when built: every referenced state must be declared,
terminal states have no outgoing rules and capability keys must parse.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Mapping, Optional, Tuple

from capabilities.enum.capability import Capability
from core.exceptions.errors import LifecycleConfigError, UnknownCapabilityError


@dataclass(frozen=True)
class TransitionRule:
    action: str
    from_states: FrozenSet[str]
    to: Optional[str]
    capability: Capability
    subtypes: FrozenSet[str] = frozenset()
    to_by_subtype: Mapping[str, str] = field(default_factory=dict)
    requires: Optional[str] = None

    def matches_subtype(self, subtype: Optional[str]) -> bool:
        return not self.subtypes or subtype in self.subtypes

    def applies(self, status: Optional[str], subtype: Optional[str] = None) -> bool:
        return status in self.from_states and self.matches_subtype(subtype)

    def target(self, status: Optional[str], subtype: Optional[str] = None) -> Optional[str]:
        """Status after the transition (``status`` itself for self-transitions)."""
        if subtype is not None and subtype in self.to_by_subtype:
            return self.to_by_subtype[subtype]
        return self.to if self.to is not None else status

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransitionRule":
        from_raw = data.get("from") or []
        if isinstance(from_raw, str):
            from_raw = [from_raw]
        try:
            capability = Capability.parse(data.get("capability"))
        except UnknownCapabilityError as ex:
            raise LifecycleConfigError(str(ex)) from ex
        return cls(
            action=str(data.get("action", "")).strip(),
            from_states=frozenset(str(s) for s in from_raw),
            to=data.get("to"),
            capability=capability,
            subtypes=frozenset(str(s) for s in (data.get("subtypes") or [])),
            to_by_subtype=dict(data.get("to_by_subtype") or {}),
            requires=data.get("requires"),
        )


@dataclass(frozen=True)
class StateMachine:
    """
    :param name: Entity type the machine belongs to
    :param states: All states, in server ordinal order
    :param initial: State of a newly created entity
    :param terminal: States without outgoing transitions
    :param completed: States counted as done for urgency purposes
    :param rules: Ordered transition rules; order defines action order
    :param server_flags: Server flag name -> action it decides (e.g. canReceive -> receive)
    """

    name: str
    states: Tuple[str, ...]
    initial: str
    terminal: FrozenSet[str] = frozenset()
    completed: FrozenSet[str] = frozenset()
    rules: Tuple[TransitionRule, ...] = ()
    server_flags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        known = set(self.states)
        problems: List[str] = []

        if self.initial not in known:
            problems.append(f"initial state {self.initial!r} is not declared")
        for label, group in (("terminal", self.terminal), ("completed", self.completed)):
            for s in sorted(group - known):
                problems.append(f"{label} state {s!r} is not declared")

        for rule in self.rules:
            if not rule.action:
                problems.append("transition without action")
            for s in sorted(rule.from_states - known):
                problems.append(f"{rule.action}: source state {s!r} is not declared")
            if rule.to is not None and rule.to not in known:
                problems.append(f"{rule.action}: target state {rule.to!r} is not declared")
            for s in sorted(set(rule.to_by_subtype.values()) - known):
                problems.append(f"{rule.action}: target state {s!r} is not declared")
            for s in sorted(rule.from_states & self.terminal):
                problems.append(f"{rule.action}: terminal state {s!r} has an outgoing transition")
            if not rule.from_states:
                problems.append(f"{rule.action}: no source states")

        actions = {r.action for r in self.rules}
        for flag, action in self.server_flags.items():
            if action not in actions:
                problems.append(f"server flag {flag!r} maps to unknown action {action!r}")

        if problems:
            raise LifecycleConfigError(f"Invalid state machine {self.name!r}: " + "; ".join(problems))

    # ---- queries -------------------------------------------------------------
    def rule_for(self, status: Optional[str], action: str, subtype: Optional[str] = None) -> Optional[TransitionRule]:
        for rule in self.rules:
            if rule.action == action and rule.applies(status, subtype):
                return rule
        return None

    def rule_for_action(self, action: str, subtype: Optional[str] = None) -> Optional[TransitionRule]:
        """First rule for ``action`` regardless of status."""
        for rule in self.rules:
            if rule.action == action and rule.matches_subtype(subtype):
                return rule
        return None

    def actions(self) -> List[str]:
        """All actions of the machine, in table order."""
        seen: List[str] = []
        for rule in self.rules:
            if rule.action not in seen:
                seen.append(rule.action)
        return seen

    def actions_from(self, status: Optional[str], subtype: Optional[str] = None) -> List[str]:
        seen: List[str] = []
        for rule in self.rules:
            if rule.applies(status, subtype) and rule.action not in seen:
                seen.append(rule.action)
        return seen

    def next_status(self, status: Optional[str], action: str, subtype: Optional[str] = None) -> Optional[str]:
        rule = self.rule_for(status, action, subtype)
        return rule.target(status, subtype) if rule else None

    def flag_for(self, action: str) -> Optional[str]:
        for flag, flagged_action in self.server_flags.items():
            if flagged_action == action:
                return flag
        return None

    def is_terminal(self, status: Optional[str]) -> bool:
        return status in self.terminal

    def is_completed(self, status: Optional[str]) -> bool:
        return status in self.completed

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "StateMachine":
        states = tuple(str(s) for s in (data.get("states") or []))
        if not states:
            raise LifecycleConfigError(f"State machine {name!r} declares no states")
        return cls(
            name=name,
            states=states,
            initial=str(data.get("initial") or states[0]),
            terminal=frozenset(str(s) for s in (data.get("terminal") or [])),
            completed=frozenset(str(s) for s in (data.get("completed") or [])),
            rules=tuple(TransitionRule.from_dict(r) for r in (data.get("transitions") or [])),
            server_flags={str(k): str(v) for k, v in (data.get("server_flags") or {}).items()},
        )

