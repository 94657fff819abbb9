"""Persist reconciliation verdicts, one independent unit of work per record.

A failing record becomes a ``Failed`` result and is counted; it never aborts the
batch or rolls back other records. ``REMOVED`` entries are only flagged
unsupported, never deleted, so ratings/downloads/favourites keep their target.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.cache import TtlCache
from catalogsync.domain.errors import SyncTimeoutError
from catalogsync.domain.model import CatalogEntry, Classification, utcnow

from .contracts import Applied, ApplyReport, Failed, FailureReason

if TYPE_CHECKING:
    from datetime import datetime

    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork, CatalogUnitOfWorkFactory

    from .contracts import ClassifiedRecord, ReconciliationPlan, RecordResult
    from .policy import OwnerResolver

log = getLogger(__name__)

DEFAULT_LOOKUP_TTL_SECONDS = 300.0


def _default_lookup_cache() -> TtlCache[str, str]:
    return TtlCache(ttl_seconds=DEFAULT_LOOKUP_TTL_SECONDS)


@dataclass(slots=True)
class MutationApplier:
    unit_of_work_factory: CatalogUnitOfWorkFactory
    owner_resolver: OwnerResolver
    lookup_cache: TtlCache[str, str] = field(default_factory=_default_lookup_cache)
    concurrency: int = 1
    clock: Callable[[], datetime] = utcnow
    monotonic: Callable[[], float] = time.monotonic

    def apply(self, plan: ReconciliationPlan, *, deadline: float | None = None) -> ApplyReport:
        """Apply ``plan`` and return per-record results with aggregated stats.

        ``deadline`` is a ``monotonic`` timestamp; records not started by then are
        skipped and ``SyncTimeoutError`` is raised with the partial stats.
        """

        report = ApplyReport()
        removed = plan.by_classification(Classification.REMOVED)
        pending = [item for item in plan if item.classification is not Classification.REMOVED]

        timed_out = False
        for result in self._run_records(pending, deadline):
            if result is None:
                timed_out = True
                continue
            self._record(report, result)

        if not timed_out and removed:
            if self._expired(deadline):
                timed_out = True
            else:
                for result in self._deactivate(removed):
                    self._record(report, result)

        if timed_out:
            raise SyncTimeoutError(
                "Sync deadline exceeded while applying changes", stats=report.stats
            )
        return report

    def _run_records(
        self,
        items: list[ClassifiedRecord],
        deadline: float | None,
    ) -> list[RecordResult | None]:
        if self.concurrency <= 1 or len(items) <= 1:
            results: list[RecordResult | None] = []
            for item in items:
                if self._expired(deadline):
                    results.extend(None for _ in range(len(items) - len(results)))
                    break
                results.append(self._apply_one(item))
            return results

        def task(item: ClassifiedRecord) -> RecordResult | None:
            if self._expired(deadline):
                return None
            return self._apply_one(item)

        with ThreadPoolExecutor(
            max_workers=self.concurrency, thread_name_prefix="catalog-apply"
        ) as executor:
            return list(executor.map(task, items))

    def _expired(self, deadline: float | None) -> bool:
        return deadline is not None and self.monotonic() >= deadline

    @staticmethod
    def _record(report: ApplyReport, result: RecordResult) -> None:
        report.results.append(result)
        if isinstance(result, Failed):
            report.stats.record_error()
        else:
            report.stats.record(result.classification)

    def _apply_one(self, item: ClassifiedRecord) -> RecordResult:
        try:
            match item.classification:
                case Classification.ADDED:
                    return self._add(item)
                case Classification.UPDATED:
                    return self._update(item)
                case _:
                    return Applied(
                        classification=item.classification,
                        bundle_id=item.bundle_id,
                        entry_id=item.entry_id,
                    )
        except Exception as exc:  # noqa: BLE001
            log.warning("Failed to apply %s for %s: %s", item.classification, item.bundle_id, exc)
            return Failed(
                classification=item.classification,
                bundle_id=item.bundle_id,
                reason=FailureReason.WRITE_FAILED,
                detail=str(exc),
            )

    def _add(self, item: ClassifiedRecord) -> RecordResult:
        record = item.record
        if record is None:
            raise ValueError("ADDED verdict without a source record")

        with self.unit_of_work_factory() as uow:
            category_id = self._resolve_category(uow, record.category_id)
            if category_id is None:
                log.warning(
                    "Missing category %r for app %s (%s)",
                    record.category_id,
                    record.name,
                    record.bundle_id,
                )
                return Failed(
                    classification=Classification.ADDED,
                    bundle_id=record.bundle_id,
                    reason=FailureReason.MISSING_CATEGORY,
                    detail=record.category_id,
                )
            developer_id = self._resolve_owner(uow)
            if developer_id is None:
                log.warning("No owner developer for app %s (%s)", record.name, record.bundle_id)
                return Failed(
                    classification=Classification.ADDED,
                    bundle_id=record.bundle_id,
                    reason=FailureReason.MISSING_OWNER,
                    detail=str(self.owner_resolver.policy),
                )

            entry = CatalogEntry.from_source(
                record,
                category_id=category_id,
                developer_id=developer_id,
                at=self.clock(),
            )
            uow.repositories.apps.add(entry)
            uow.commit()
            log.debug("Created app %s (%s)", entry.id, record.bundle_id)
            return Applied(
                classification=Classification.ADDED,
                bundle_id=record.bundle_id,
                entry_id=entry.id,
            )

    def _update(self, item: ClassifiedRecord) -> RecordResult:
        record = item.record
        if record is None or item.entry is None:
            raise ValueError("UPDATED verdict without a source record and a matched entry")

        with self.unit_of_work_factory() as uow:
            entry = uow.repositories.apps.get(item.entry.id)
            if entry is None:
                return Failed(
                    classification=Classification.UPDATED,
                    bundle_id=record.bundle_id,
                    reason=FailureReason.MISSING_ENTRY,
                    detail=str(item.entry.id),
                )
            now = self.clock()
            if record.category_id is not None and record.category_id != entry.category_id:
                category_id = self._resolve_category(uow, record.category_id)
                if category_id is None:
                    log.warning(
                        "Unknown category %r for app %s; keeping %s",
                        record.category_id,
                        record.bundle_id,
                        entry.category_id,
                    )
                else:
                    entry.move_to_category(category_id, at=now)
            entry.apply_source(record, at=now)
            uow.commit()
            return Applied(
                classification=Classification.UPDATED,
                bundle_id=record.bundle_id,
                entry_id=entry.id,
            )

    def _deactivate(self, items: tuple[ClassifiedRecord, ...]) -> list[RecordResult]:
        entry_ids = [item.entry_id for item in items if item.entry_id is not None]
        try:
            with self.unit_of_work_factory() as uow:
                uow.repositories.apps.mark_unsupported(entry_ids, at=self.clock())
                uow.commit()
        except Exception as exc:  # noqa: BLE001
            log.warning("Failed to flag %d removed apps unsupported: %s", len(entry_ids), exc)
            return [
                Failed(
                    classification=Classification.REMOVED,
                    bundle_id=item.bundle_id,
                    reason=FailureReason.WRITE_FAILED,
                    detail=str(exc),
                )
                for item in items
            ]
        log.info("Flagged %d apps no longer in the source as unsupported", len(entry_ids))
        return [
            Applied(
                classification=Classification.REMOVED,
                bundle_id=item.bundle_id,
                entry_id=item.entry_id,
            )
            for item in items
        ]

    def _resolve_category(self, uow: CatalogUnitOfWork, category_id: str | None) -> str | None:
        if category_id is None:
            return None

        def load() -> str | None:
            category = uow.repositories.categories.get(category_id)
            return category.id if category is not None else None

        return self.lookup_cache.get_or_load(f"category:{category_id}", load)

    def _resolve_owner(self, uow: CatalogUnitOfWork) -> str | None:
        return self.lookup_cache.get_or_load(
            self.owner_resolver.cache_key,
            lambda: self.owner_resolver.resolve(uow.repositories.developers),
        )


__all__ = ["Applied", "ApplyReport", "Failed", "FailureReason", "MutationApplier"]
