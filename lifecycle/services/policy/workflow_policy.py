"""Workflow policy service.

Holds the lifecycle state machines of all entity types.
Reads from lifecycle_transitions.json; the bundled file ships with the
package and is used when no other location is configured or the configured
file does not exist.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from core.exceptions.errors import LifecycleConfigError
from core.models.entity import EntityType
from lifecycle.models.state_machine import StateMachine

logger = logging.getLogger(__name__)

POLICY_FILE_NAME = "lifecycle_transitions.json"
BUNDLED_DIRECTORY = Path(__file__).resolve().parents[2] / "config"


class WorkflowPolicy:
    """Lookup of state machines by entity type."""

    def __init__(self, machines: Iterable[StateMachine]) -> None:
        self._machines: Dict[str, StateMachine] = {}
        for machine in machines:
            try:
                key = EntityType(machine.name).value
            except ValueError:
                raise LifecycleConfigError(f"State machine for unknown entity type {machine.name!r}") from None
            self._machines[key] = machine

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowPolicy":
        raw = data.get("machines")
        if not isinstance(raw, dict):
            raise LifecycleConfigError("Lifecycle policy must contain a 'machines' object")
        return cls(StateMachine.from_dict(name, body) for name, body in raw.items())

    @classmethod
    def load_from_file(cls, policy_file: str | Path) -> "WorkflowPolicy":
        path = Path(policy_file)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as ex:
            raise LifecycleConfigError(f"Invalid lifecycle policy {path}: {ex}") from ex
        policy = cls.from_dict(data)
        logger.info("Loaded lifecycle policy from %s (%d machines)", path, len(policy._machines))
        return policy

    @classmethod
    def load_from_directory(cls, directory: str | Path) -> "WorkflowPolicy":
        """
        Load the policy from lifecycle_transitions.json in ``directory``.

        Falls back to the bundled policy when the file does not exist.
        """
        policy_file = Path(directory) / POLICY_FILE_NAME
        if not policy_file.exists():
            logger.warning("Lifecycle policy file not found: %s, using bundled policy", policy_file)
            return cls.load_default()
        return cls.load_from_file(policy_file)

    @classmethod
    def load_default(cls) -> "WorkflowPolicy":
        return cls.load_from_file(BUNDLED_DIRECTORY / POLICY_FILE_NAME)

    @classmethod
    def load_configured(cls, transitions_file: Optional[str]) -> "WorkflowPolicy":
        """Load from a configured file path; empty means the bundled policy."""
        if not transitions_file:
            return cls.load_default()
        path = Path(transitions_file)
        if path.is_dir():
            return cls.load_from_directory(path)
        if not path.exists():
            logger.warning("Lifecycle policy file not found: %s, using bundled policy", path)
            return cls.load_default()
        return cls.load_from_file(path)

    def machine_for(self, entity_type: EntityType | str) -> Optional[StateMachine]:
        return self._machines.get(EntityType(entity_type).value)

    def has_machine(self, entity_type: EntityType | str) -> bool:
        return self.machine_for(entity_type) is not None

    @property
    def entity_types(self) -> list[EntityType]:
        return [EntityType(k) for k in self._machines]
