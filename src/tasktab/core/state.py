"""State management for tasktab.

This module provides a unified interface to state models, migration,
persistence and the engine. The implementation is split into smaller
modules:
- models.py: State data models
- migration.py: Upgrade of legacy stored documents
- stores.py / persistence.py: Key-value stores and the fallback chain
- engine.py: The operations that mutate state
"""

from __future__ import annotations

from .engine import KEEP, StateEngine
from .migration import migrate, migrate_document
from .models import (
    AppState,
    Background,
    EditTarget,
    FinishedEntry,
    Priority,
    Task,
    Theme,
    ViewState,
)
from .persistence import StatePersister
from .stores import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "AppState",
    "Background",
    "EditTarget",
    "FinishedEntry",
    "KEEP",
    "Priority",
    "StateEngine",
    "StatePersister",
    "Task",
    "Theme",
    "ViewState",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "migrate",
    "migrate_document",
]
