from .capability_gate import CapabilityGate, GateConstraints, NO_CONSTRAINTS
from .capability_store import CapabilityStore

__all__ = ["CapabilityGate", "CapabilityStore", "GateConstraints", "NO_CONSTRAINTS"]
