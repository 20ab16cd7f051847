"""core.contracts

Central, stable interfaces (ABCs) shared across the feature packages.

Design goals:
- Features depend on contracts, not on concrete implementations from other features.
- Backends and audit sinks are swappable (REST, in-memory, SQLite).

This package intentionally contains only interfaces.
"""
