"""Run one catalog sync: fetch, load baseline, reconcile, apply, log the run."""

from __future__ import annotations

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.cache import TtlCache
from catalogsync.domain.errors import SyncTimeoutError
from catalogsync.domain.model import Classification, SyncStats, SyncTrigger, utcnow
from catalogsync.domain.reconciliation import MutationApplier, OwnerResolver, reconcile
from catalogsync.domain.sync_log import finish_run, list_sync_runs, start_run

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from catalogsync.config.sync import SyncConfig
    from catalogsync.domain.model import CatalogBaselineEntry, SourceRecord
    from catalogsync.domain.ports.fetching import CatalogSource
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWorkFactory
    from catalogsync.domain.reconciliation import Failed

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncCatalogResult:
    run_id: UUID | None
    stats: SyncStats
    failures: tuple[Failed, ...] = ()
    preview: bool = False
    planned: dict[Classification, int] = field(default_factory=dict[Classification, int])

    @property
    def errors(self) -> int:
        return self.stats.errors


def sync_catalog(
    *,
    source: CatalogSource,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    config: SyncConfig,
    owner_resolver: OwnerResolver | None = None,
    trigger: SyncTrigger = SyncTrigger.MANUAL,
    clock: Callable[[], datetime] = utcnow,
    monotonic: Callable[[], float] = time.monotonic,
    lookup_cache: TtlCache[str, str] | None = None,
    preview: bool = False,
) -> SyncCatalogResult:
    """Reconcile the local catalog with ``source`` and persist the outcome.

    A run that reaches the apply step completes even when individual records
    fail; their count is in ``stats.errors``. Source, baseline and timeout
    failures mark the run failed and are re-raised. ``preview`` classifies
    only: no run row is written and nothing is applied.
    """

    deadline = monotonic() + config.timeout_seconds if config.timeout_seconds else None
    resolver = owner_resolver or OwnerResolver(
        policy=config.owner_policy, developer_id=config.owner_developer_id
    )

    if preview:
        records, baseline = _load_inputs(source, unit_of_work_factory, deadline, monotonic)
        plan = reconcile(records, baseline)
        stats = SyncStats()
        for classification, count in plan.counts().items():
            stats.record(classification, count)
        log.info("Previewed catalog sync: %s", stats.as_dict())
        return SyncCatalogResult(run_id=None, stats=stats, preview=True, planned=plan.counts())

    run = start_run(
        unit_of_work_factory,
        trigger=trigger,
        now=clock(),
        stale_after=timedelta(minutes=config.stale_run_minutes),
    )
    stats = SyncStats()
    try:
        records, baseline = _load_inputs(source, unit_of_work_factory, deadline, monotonic)
        plan = reconcile(records, baseline)
        applier = MutationApplier(
            unit_of_work_factory=unit_of_work_factory,
            owner_resolver=resolver,
            lookup_cache=(
                lookup_cache
                if lookup_cache is not None
                else TtlCache(ttl_seconds=config.lookup_cache_ttl_seconds)
            ),
            concurrency=config.concurrency,
            clock=clock,
            monotonic=monotonic,
        )
        report = applier.apply(plan, deadline=deadline)
    except SyncTimeoutError as exc:
        _record_failure(unit_of_work_factory, run.id, exc.stats or stats, f"timeout: {exc}", clock)
        raise
    except KeyboardInterrupt:
        _record_failure(unit_of_work_factory, run.id, stats, "interrupted", clock)
        raise
    except Exception as exc:
        log.exception("Catalog sync run %s failed", run.id)
        _record_failure(unit_of_work_factory, run.id, stats, _describe(exc), clock)
        raise

    finish_run(unit_of_work_factory, run.id, report.stats, now=clock())
    return SyncCatalogResult(
        run_id=run.id,
        stats=report.stats,
        failures=tuple(report.failures),
        planned=plan.counts(),
    )


def _load_inputs(
    source: CatalogSource,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    deadline: float | None,
    monotonic: Callable[[], float],
) -> tuple[Sequence[SourceRecord], list[CatalogBaselineEntry]]:
    # The fetch runs on a worker while the baseline loads here; store sessions
    # stay on the calling thread.
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="catalog-fetch")
    try:
        pending = executor.submit(source.fetch)
        with unit_of_work_factory() as uow:
            baseline = uow.repositories.apps.baseline()
        remaining = None if deadline is None else max(deadline - monotonic(), 0.0)
        try:
            records = pending.result(timeout=remaining)
        except FutureTimeoutError as exc:
            raise SyncTimeoutError("Timed out waiting for the catalog source") from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    log.info("Fetched %d source records; baseline has %d entries", len(records), len(baseline))
    return records, baseline


def _record_failure(
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    run_id: UUID,
    stats: SyncStats,
    error: str,
    clock: Callable[[], datetime],
) -> None:
    try:
        finish_run(unit_of_work_factory, run_id, stats, error=error, now=clock())
    except Exception:
        log.exception("Could not mark sync run %s as failed", run_id)


def _describe(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


__all__ = ["SyncCatalogResult", "list_sync_runs", "sync_catalog"]
