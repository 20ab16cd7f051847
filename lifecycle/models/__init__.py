from lifecycle.models.state_machine import StateMachine, TransitionRule

__all__ = ["StateMachine", "TransitionRule"]
