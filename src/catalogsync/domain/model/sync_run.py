"""Sync run log entries and the counters they persist."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from catalogsync.domain.errors import InvalidRunTransitionError
from catalogsync.domain.model.catalog import utcnow
from catalogsync.domain.model.enums import Classification, SyncStatus, SyncTrigger

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True)
class SyncStats:
    added: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = 0
    errors: int = 0

    def record(self, classification: Classification, count: int = 1) -> None:
        match classification:
            case Classification.ADDED:
                self.added += count
            case Classification.UPDATED:
                self.updated += count
            case Classification.UNCHANGED:
                self.unchanged += count
            case Classification.REMOVED:
                self.removed += count

    def record_error(self, count: int = 1) -> None:
        self.errors += count

    @property
    def total(self) -> int:
        return self.added + self.updated + self.unchanged + self.removed + self.errors

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(eq=False, kw_only=True)
class SyncRun:
    """One execution of fetch -> reconcile -> apply.

    ``running`` is the only non-terminal status; ``complete`` and ``fail`` may
    each be called once, and only from ``running``.
    """

    id: UUID = field(default_factory=uuid4)
    status: SyncStatus = SyncStatus.RUNNING
    trigger: SyncTrigger = SyncTrigger.MANUAL
    started_at: datetime = field(default_factory=utcnow)
    ended_at: datetime | None = None
    added: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = 0
    errors: int = 0
    error: str | None = None

    @property
    def is_running(self) -> bool:
        return self.status is SyncStatus.RUNNING

    @property
    def stats(self) -> SyncStats:
        return SyncStats(
            added=self.added,
            updated=self.updated,
            unchanged=self.unchanged,
            removed=self.removed,
            errors=self.errors,
        )

    def complete(self, stats: SyncStats, *, at: datetime | None = None) -> None:
        self._finish(SyncStatus.COMPLETED, stats, error=None, at=at)

    def fail(self, stats: SyncStats, error: str, *, at: datetime | None = None) -> None:
        self._finish(SyncStatus.FAILED, stats, error=error, at=at)

    def _finish(
        self,
        status: SyncStatus,
        stats: SyncStats,
        *,
        error: str | None,
        at: datetime | None,
    ) -> None:
        if not self.is_running:
            raise InvalidRunTransitionError(
                f"Sync run {self.id} is already {self.status}; cannot mark it {status}"
            )
        self.status = status
        self.added = stats.added
        self.updated = stats.updated
        self.unchanged = stats.unchanged
        self.removed = stats.removed
        self.errors = stats.errors
        self.error = error
        self.ended_at = at or utcnow()
