"""Application orchestration entry points wiring the default adapters."""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.catalog_source import (
    HttpCatalogSource,
    HttpCategorySource,
    JsonFileCatalogSource,
)
from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from catalogsync.config import ConfigurationError, get_catalog_source_config, get_sync_config
from catalogsync.domain.cache import TtlCache
from catalogsync.domain.catalog_sync import SyncCatalogResult, list_sync_runs, sync_catalog
from catalogsync.domain.model import SyncTrigger
from catalogsync.domain.reconciliation import CategorySyncResult, sync_categories
from catalogsync.domain.scheduling import run_periodically

if TYPE_CHECKING:
    from pathlib import Path

    from catalogsync.config import SyncConfig
    from catalogsync.domain.model import SyncRun
    from catalogsync.domain.ports.fetching import CatalogSource, CategorySource
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWorkFactory

log = getLogger(__name__)


def _default_unit_of_work_factory() -> CatalogUnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def build_catalog_source(*, source_file: Path | None = None) -> CatalogSource:
    if source_file is not None:
        return JsonFileCatalogSource(source_file)
    return HttpCatalogSource.from_config(get_catalog_source_config())


def sync_catalog_from_source(
    *,
    source: CatalogSource | None = None,
    source_file: Path | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    trigger: SyncTrigger = SyncTrigger.MANUAL,
    lookup_cache: TtlCache[str, str] | None = None,
    preview: bool = False,
) -> SyncCatalogResult:
    """Synchronise the local catalog with the configured external source."""

    effective_config = config or get_sync_config()
    effective_source = source or build_catalog_source(source_file=source_file)
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    log.info(
        "Starting catalog sync: trigger=%s, concurrency=%s, timeout=%s, preview=%s",
        trigger,
        effective_config.concurrency,
        effective_config.timeout_seconds,
        preview,
    )

    result = sync_catalog(
        source=effective_source,
        unit_of_work_factory=effective_uow,
        config=effective_config,
        trigger=trigger,
        lookup_cache=lookup_cache,
        preview=preview,
    )

    stats = result.stats
    log.info(
        "Finished catalog sync: added=%d, updated=%d, unchanged=%d, removed=%d, errors=%d",
        stats.added,
        stats.updated,
        stats.unchanged,
        stats.removed,
        stats.errors,
    )
    return result


def sync_category_tree(
    *,
    url: str | None = None,
    category_source: CategorySource | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    preview: bool = False,
) -> CategorySyncResult:
    """Bring the local category tree in line with the source's category page."""

    if category_source is None:
        resolved_url = url or get_catalog_source_config().categories_url
        if resolved_url is None:
            raise ConfigurationError("No category URL given and CATALOG_CATEGORIES_URL is unset")
        category_source = HttpCategorySource(url=resolved_url)
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()

    nodes = category_source.fetch_categories()
    return sync_categories(nodes, unit_of_work_factory=effective_uow, preview=preview)


def recent_sync_runs(
    *,
    limit: int = 20,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> list[SyncRun]:
    return list_sync_runs(unit_of_work_factory or _default_unit_of_work_factory(), limit)


def schedule_catalog_sync(
    *,
    interval_hours: float | None = None,
    run_immediately: bool = True,
    stop_event: threading.Event | None = None,
    source: CatalogSource | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
    config: SyncConfig | None = None,
    max_iterations: int | None = None,
) -> int:
    """Run scheduled syncs until ``stop_event`` is set; returns the iteration count."""

    effective_config = config or get_sync_config()
    effective_source = source or build_catalog_source()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    hours = interval_hours if interval_hours is not None else effective_config.interval_hours
    # shared across runs so category and owner lookups survive between iterations
    lookup_cache: TtlCache[str, str] = TtlCache(
        ttl_seconds=effective_config.lookup_cache_ttl_seconds
    )

    def job() -> None:
        sync_catalog_from_source(
            source=effective_source,
            unit_of_work_factory=effective_uow,
            config=effective_config,
            trigger=SyncTrigger.SCHEDULED,
            lookup_cache=lookup_cache,
        )

    log.info("Scheduling catalog sync every %.2f hours", hours)
    return run_periodically(
        job,
        interval=hours * 3600,
        stop_event=stop_event,
        run_immediately=run_immediately,
        max_iterations=max_iterations,
    )
