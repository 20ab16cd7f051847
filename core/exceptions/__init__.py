"""Shared exception types."""

from core.exceptions.errors import (
    BackendError,
    ConsoleError,
    LifecycleConfigError,
    LoadFailedError,
    PolicyViolationError,
    TransitionRejectedError,
    UnknownCapabilityError,
)

__all__ = [
    "BackendError",
    "ConsoleError",
    "LifecycleConfigError",
    "LoadFailedError",
    "PolicyViolationError",
    "TransitionRejectedError",
    "UnknownCapabilityError",
]
