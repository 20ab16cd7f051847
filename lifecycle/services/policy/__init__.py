from lifecycle.services.policy.workflow_policy import WorkflowPolicy

__all__ = ["WorkflowPolicy"]
