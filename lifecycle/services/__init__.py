"""Services layer for entity lifecycles.

Action derivation, transition requests and policy evaluation.
"""

from lifecycle.services.lifecycle_service import ActionState, LifecycleService
from lifecycle.services.policy.workflow_policy import WorkflowPolicy
from lifecycle.services.transition_service import TransitionService

__all__ = [
    "ActionState",
    "LifecycleService",
    "TransitionService",
    "WorkflowPolicy",
]
