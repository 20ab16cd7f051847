"""Capability store.

Answers "may the current actor do X?" for the whole session.

Key principles:
- The Admin role short-circuits every query to True, before any key parsing.
- Without a loaded actor every query is False (fail closed).
- Only explicitly granted capabilities count; nothing is inferred.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from capabilities.enum.capability import Capability
from core.models.actor import Actor

logger = logging.getLogger(__name__)


class CapabilityStore:
    """Holds the session's actor and evaluates capability queries against it."""

    def __init__(self, actor: Optional[Actor] = None) -> None:
        self._actor: Optional[Actor] = actor

    # ---- lifecycle -----------------------------------------------------------
    def load(self, actor: Actor) -> None:
        self._actor = actor
        logger.debug("Capability store loaded for %s", actor)

    def unload(self) -> None:
        self._actor = None
        logger.debug("Capability store unloaded")

    @property
    def actor(self) -> Optional[Actor]:
        return self._actor

    @property
    def is_loaded(self) -> bool:
        return self._actor is not None

    # ---- queries -------------------------------------------------------------
    def has(self, capability: Capability | str) -> bool:
        actor = self._actor
        if actor is None:
            return False
        if actor.is_admin:
            return True
        return Capability.parse(capability) in actor.capabilities

    def has_any(self, capabilities: Iterable[Capability | str]) -> bool:
        actor = self._actor
        if actor is None:
            return False
        if actor.is_admin:
            return True
        wanted = [Capability.parse(c) for c in capabilities]
        return any(c in actor.capabilities for c in wanted)

    def has_all(self, capabilities: Iterable[Capability | str]) -> bool:
        actor = self._actor
        if actor is None:
            return False
        if actor.is_admin:
            return True
        wanted = [Capability.parse(c) for c in capabilities]
        return all(c in actor.capabilities for c in wanted)
