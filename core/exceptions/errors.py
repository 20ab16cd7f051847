"""Console-wide exceptions.

Authorization denials are never raised: a denied action is simply absent.
Everything else that can go wrong between the console and the backend is
expressed through the types below.
"""
from __future__ import annotations

from typing import Optional


class ConsoleError(Exception):
    """Base exception for the console."""


class UnknownCapabilityError(ConsoleError, ValueError):
    """Raised when a capability key is not part of the shared enumeration."""


class LifecycleConfigError(ConsoleError):
    """Raised when a lifecycle transition table is inconsistent."""


class PolicyViolationError(ConsoleError):
    """Raised when an action is requested that is not currently offered."""


class BackendError(ConsoleError):
    """Raised when the backend answers with an error.

    ``message`` is the server's text, passed on verbatim to the view.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransitionRejectedError(BackendError):
    """The backend refused a lifecycle transition."""


class LoadFailedError(BackendError):
    """A page or statistics fetch failed."""
