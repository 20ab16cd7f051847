"""Declarative capability gate for actions.

An action protected by a gate is either offered or absent: a denied action is
never rendered disabled. Exactly one constraint decides, chosen by
precedence ``required`` > ``any_of`` > ``all_of``; without constraints the
action is always permitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, TypeVar

from capabilities.enum.capability import Capability
from capabilities.logic.capability_store import CapabilityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class GateConstraints:
    required: Optional[Capability] = None
    any_of: Tuple[Capability, ...] = ()
    all_of: Tuple[Capability, ...] = ()

    @classmethod
    def of(
        cls,
        required: Capability | str | None = None,
        *,
        any_of: Iterable[Capability | str] = (),
        all_of: Iterable[Capability | str] = (),
    ) -> "GateConstraints":
        """Build constraints, parsing string keys strictly."""
        return cls(
            required=Capability.parse(required) if required is not None else None,
            any_of=tuple(Capability.parse(c) for c in any_of),
            all_of=tuple(Capability.parse(c) for c in all_of),
        )

    @property
    def is_empty(self) -> bool:
        return self.required is None and not self.any_of and not self.all_of


NO_CONSTRAINTS = GateConstraints()


class CapabilityGate:
    def __init__(self, store: CapabilityStore) -> None:
        self._store = store

    def evaluate(self, constraints: GateConstraints) -> bool:
        if constraints.required is not None:
            allowed = self._store.has(constraints.required)
        elif constraints.any_of:
            allowed = self._store.has_any(constraints.any_of)
        elif constraints.all_of:
            allowed = self._store.has_all(constraints.all_of)
        else:
            allowed = True
        logger.debug("Gate %s -> %s", constraints, allowed)
        return allowed

    def guard(self, action: T, constraints: GateConstraints) -> Optional[T]:
        """Return ``action`` when permitted, otherwise None."""
        return action if self.evaluate(constraints) else None

    def filter(self, gated: Iterable[Tuple[T, GateConstraints]]) -> List[T]:
        """Keep the permitted actions of ``(action, constraints)`` pairs, in order."""
        return [action for action, constraints in gated if self.evaluate(constraints)]
