"""Lifecycle of sync runs: at most one ``running`` row, terminal states are final."""

from __future__ import annotations

from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import SyncAlreadyRunningError
from catalogsync.domain.model import SyncRun, SyncStats, SyncTrigger, utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWorkFactory

log = getLogger(__name__)

DEFAULT_STALE_AFTER = timedelta(hours=1)
ABANDONED_MESSAGE = "abandoned: run did not finish before a newer run started"


def start_run(
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    *,
    trigger: SyncTrigger = SyncTrigger.MANUAL,
    now: datetime | None = None,
    stale_after: timedelta = DEFAULT_STALE_AFTER,
) -> SyncRun:
    """Insert a new ``running`` row, refusing while another run is in flight.

    A ``running`` row older than ``stale_after`` belongs to a crashed process
    and is closed as failed first.
    """

    started_at = now or utcnow()
    with unit_of_work_factory() as uow:
        runs = uow.repositories.sync_runs
        for existing in runs.running():
            if started_at - existing.started_at < stale_after:
                raise SyncAlreadyRunningError(
                    f"Sync run {existing.id} has been running since "
                    f"{existing.started_at:%Y-%m-%d %H:%M:%S}"
                )
            log.warning("Closing stale sync run %s started at %s", existing.id, existing.started_at)
            existing.fail(existing.stats, ABANDONED_MESSAGE, at=started_at)
        run = SyncRun(trigger=trigger, started_at=started_at)
        runs.add(run)
        uow.commit()
    log.info("Started %s sync run %s", trigger, run.id)
    return run


def finish_run(
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    run_id: UUID,
    stats: SyncStats,
    *,
    error: str | None = None,
    now: datetime | None = None,
) -> SyncRun:
    """Move the run to ``failed`` when ``error`` is given, else to ``completed``."""

    with unit_of_work_factory() as uow:
        run = uow.repositories.sync_runs.get(run_id)
        if run is None:
            raise LookupError(f"Unknown sync run {run_id}")
        if error is None:
            run.complete(stats, at=now)
        else:
            run.fail(stats, error, at=now)
        uow.commit()
    log.info(
        "Sync run %s %s: added=%d updated=%d unchanged=%d removed=%d errors=%d",
        run.id,
        run.status,
        stats.added,
        stats.updated,
        stats.unchanged,
        stats.removed,
        stats.errors,
    )
    return run


def list_sync_runs(
    unit_of_work_factory: CatalogUnitOfWorkFactory, limit: int = 20
) -> list[SyncRun]:
    with unit_of_work_factory() as uow:
        return uow.repositories.sync_runs.recent(limit)
