"""
core/common/session_events.py

Defines event objects for session changes.

The session is owned by SessionContext. Other components can subscribe to these
events to react to login/logout without direct coupling.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from core.models.actor import Actor


SessionEventType = Literal["login", "logout"]


@dataclass(frozen=True, slots=True)
class UserSessionEvent:
    """Represents a session change event."""

    type: SessionEventType
    old_actor: Optional[Actor]
    new_actor: Optional[Actor]
    reason: str
    ts_utc: datetime
