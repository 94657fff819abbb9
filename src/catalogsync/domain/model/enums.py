"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Classification(StrEnum):
    """Per-record verdict produced by catalog reconciliation."""

    ADDED = "added"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REMOVED = "removed"


class SyncStatus(StrEnum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SyncTrigger(StrEnum):
    MANUAL = "manual"
    SCHEDULED = "scheduled"


class OwnerPolicy(StrEnum):
    """How newly synced apps without a developer mapping get an owner."""

    FIRST_VERIFIED = "first_verified"
    FIXED = "fixed"
    NONE = "none"


class CategoryChangeKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    UNCHANGED = "unchanged"
