"""Entity lifecycle state machines and transition services."""
