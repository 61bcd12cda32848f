"""Git Backlog - backlog REST API plus pre-commit helpers."""

__version__ = "1.0.0"
