"""Plan types shared by the reconciler and the mutation applier.

The plan is the contract between the read-only classification step and the
write step; keeping it explicit keeps the reconciler free of I/O.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from catalogsync.domain.model import Classification, SyncStats

if TYPE_CHECKING:
    from collections.abc import Iterator
    from uuid import UUID

    from catalogsync.domain.model import CatalogBaselineEntry, SourceRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class ClassifiedRecord:
    """Verdict for one source record or one orphaned catalog entry.

    ``record`` is set for ADDED/UPDATED/UNCHANGED, ``entry`` for
    UPDATED/UNCHANGED/REMOVED.
    """

    classification: Classification
    record: SourceRecord | None = None
    entry: CatalogBaselineEntry | None = None

    @property
    def bundle_id(self) -> str | None:
        if self.record is not None:
            return self.record.bundle_id
        if self.entry is not None:
            return self.entry.primary_bundle_id
        return None

    @property
    def entry_id(self) -> UUID | None:
        return self.entry.id if self.entry is not None else None


@dataclass(frozen=True, slots=True)
class ReconciliationPlan:
    items: tuple[ClassifiedRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[ClassifiedRecord]:
        return iter(self.items)

    def by_classification(self, classification: Classification) -> tuple[ClassifiedRecord, ...]:
        return tuple(item for item in self.items if item.classification is classification)

    def counts(self) -> dict[Classification, int]:
        counter = Counter(item.classification for item in self.items)
        return {classification: counter.get(classification, 0) for classification in Classification}


class FailureReason(StrEnum):
    MISSING_CATEGORY = "missing_category"
    MISSING_OWNER = "missing_owner"
    MISSING_ENTRY = "missing_entry"
    WRITE_FAILED = "write_failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class Applied:
    classification: Classification
    bundle_id: str | None
    entry_id: UUID | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Failed:
    classification: Classification
    bundle_id: str | None
    reason: FailureReason
    detail: str | None = None


type RecordResult = Applied | Failed


@dataclass(slots=True)
class ApplyReport:
    stats: SyncStats = field(default_factory=SyncStats)
    results: list[RecordResult] = field(default_factory=list["RecordResult"])

    @property
    def failures(self) -> list[Failed]:
        return [result for result in self.results if isinstance(result, Failed)]
