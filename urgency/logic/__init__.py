from urgency.logic.urgency_classifier import UrgencyClassifier, days_until

__all__ = ["UrgencyClassifier", "days_until"]
