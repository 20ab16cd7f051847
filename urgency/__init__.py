"""Due-date urgency classification."""
