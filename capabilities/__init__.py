"""Capability engine: which actions the current actor may see."""

from capabilities.enum.capability import Capability

__all__ = ["Capability"]
