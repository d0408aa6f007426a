"""Saltbox Package.

Entry point for the Saltbox API server: a posts scaffolding API plus
organization-scoped validation requests kept in a key-value store.

Exported Functions:
    main: Entry point for the saltbox console command
"""
from .saltbox import main, configure_logging

__all__ = ["main", "configure_logging"]
