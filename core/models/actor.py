"""
actor.py

Defines the authenticated actor evaluated for authorization decisions.
An Actor is built once from the persisted session data at login, stays
immutable for the whole session and is discarded on logout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Mapping, Optional

from capabilities.enum.capability import Capability
from core.exceptions.errors import UnknownCapabilityError

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Admin"


@dataclass(frozen=True)
class Actor:
    """
    Authenticated user context.

    :param user_id: Server-side user id (None for anonymous/bootstrap actors)
    :param username: Login name, used for audit entries
    :param role: Role name as delivered by the server ("Admin" is the superuser)
    :param capabilities: Explicitly granted capabilities
    """

    user_id: Optional[int]
    username: str
    role: str
    capabilities: FrozenSet[Capability] = field(default_factory=frozenset)

    def __str__(self) -> str:
        return f"Actor({self.user_id}): {self.username} [{self.role}], {len(self.capabilities)} capabilities"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @classmethod
    def create(
        cls,
        *,
        username: str,
        role: str,
        capabilities: Iterable[Capability | str] = (),
        user_id: Optional[int] = None,
    ) -> "Actor":
        """Build an actor, parsing capability keys strictly."""
        caps = frozenset(Capability.parse(c) for c in capabilities)
        return cls(user_id=user_id, username=username, role=role, capabilities=caps)

    @classmethod
    def from_session_payload(cls, payload: Mapping[str, Any]) -> "Actor":
        """
        Build an actor from persisted session data (the login response's user).

        Expected keys: ``id``, ``username``, ``role``, ``permissions``.
        Unknown capability keys are dropped: the console never invents or
        infers a capability.
        """
        caps = set()
        for raw in payload.get("permissions") or []:
            try:
                caps.add(Capability.parse(raw))
            except UnknownCapabilityError:
                logger.warning("Dropping unknown capability key from session: %r", raw)

        user_id = payload.get("id")
        return cls(
            user_id=int(user_id) if user_id is not None else None,
            username=str(payload.get("username") or ""),
            role=str(payload.get("role") or ""),
            capabilities=frozenset(caps),
        )
