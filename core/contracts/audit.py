"""core/contracts/audit.py
======================

Audit trail contracts.

Transition attempts are recorded through this interface so that the sink
(SQLite file, in-memory database, remote) stays replaceable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class IAuditLogger(ABC):
    """Write-only audit trail logger."""

    @abstractmethod
    def log(
        self,
        feature: str,
        event: str,
        *,
        user_id: Optional[int] = None,
        username: Optional[str] = None,
        level: str = "INFO",
        reference_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Any:
        """Write an audit event."""
