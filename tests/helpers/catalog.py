"""Reusable fakes and builders for catalog sync tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from catalogsync.domain.errors import StoreUnavailableError, StoreWriteError
from catalogsync.domain.model import (
    CatalogEntry,
    Category,
    Developer,
    SourceRecord,
    SyncRun,
    SyncStatus,
    baseline_of,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from uuid import UUID

    from catalogsync.domain.model import CatalogBaselineEntry

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def make_record(bundle_id: str, version: str = "1.0", **fields: object) -> SourceRecord:
    values: dict[str, object] = {"name": bundle_id.rsplit(".", 1)[-1].title(), **fields}
    return SourceRecord(bundle_id=bundle_id, version=version, **values)  # type: ignore[arg-type]


def make_entry(
    *bundle_ids: str,
    version: str = "1.0",
    category_id: str = "cat-1",
    developer_id: str = "dev-1",
    is_supported: bool = True,
    created_at: datetime = T0,
    **fields: object,
) -> CatalogEntry:
    name = str(fields.pop("name", bundle_ids[0] if bundle_ids else "app"))
    entry = CatalogEntry(
        name=name,
        version=version,
        category_id=category_id,
        developer_id=developer_id,
        is_supported=is_supported,
        created_at=created_at,
        updated_at=created_at,
        **fields,  # type: ignore[arg-type]
    )
    for bundle_id in bundle_ids:
        entry.add_bundle_id(bundle_id)
    return entry


class FakeClock:
    """Wall clock and monotonic clock that only move when told to."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start
        self.seconds = 0.0

    def __call__(self) -> datetime:
        return self.now

    def monotonic(self) -> float:
        return self.seconds

    def advance(self, seconds: float) -> None:
        self.seconds += seconds
        self.now += timedelta(seconds=seconds)


class StaticCatalogSource:
    """In-memory catalog source; optionally fails or advances a clock on fetch."""

    def __init__(
        self,
        records: Iterable[SourceRecord] = (),
        *,
        error: Exception | None = None,
        on_fetch: Callable[[], None] | None = None,
    ) -> None:
        self.records = list(records)
        self.error = error
        self.on_fetch = on_fetch
        self.calls = 0

    def fetch(self) -> list[SourceRecord]:
        self.calls += 1
        if self.on_fetch is not None:
            self.on_fetch()
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeCatalogEntryRepository:
    def __init__(self, entries: Iterable[CatalogEntry] = ()) -> None:
        self.entries: dict[UUID, CatalogEntry] = {entry.id: entry for entry in entries}
        self.reject_bundle_ids: set[str] = set()
        self.baseline_error: Exception | None = None
        self.mark_unsupported_error: Exception | None = None
        self.mark_unsupported_calls: list[list[UUID]] = []
        self._lock = threading.Lock()

    def add(self, entity: CatalogEntry) -> None:
        if set(entity.bundle_ids) & self.reject_bundle_ids:
            raise StoreWriteError(f"rejected {entity.primary_bundle_id}")
        with self._lock:
            self.entries[entity.id] = entity

    def baseline(self) -> list[CatalogBaselineEntry]:
        if self.baseline_error is not None:
            raise self.baseline_error
        ordered = sorted(self.entries.values(), key=lambda entry: entry.created_at)
        return baseline_of(ordered)

    def get(self, entry_id: UUID) -> CatalogEntry | None:
        return self.entries.get(entry_id)

    def find_by_bundle_id(self, bundle_id: str) -> CatalogEntry | None:
        for entry in self.entries.values():
            if bundle_id in entry.bundle_ids:
                return entry
        return None

    def mark_unsupported(self, entry_ids: Sequence[UUID], *, at: datetime) -> int:
        self.mark_unsupported_calls.append(list(entry_ids))
        if self.mark_unsupported_error is not None:
            raise self.mark_unsupported_error
        touched = 0
        for entry_id in entry_ids:
            entry = self.entries.get(entry_id)
            if entry is not None:
                entry.mark_unsupported(at=at)
                touched += 1
        return touched

    def by_bundle_id(self, bundle_id: str) -> CatalogEntry:
        entry = self.find_by_bundle_id(bundle_id)
        assert entry is not None, bundle_id
        return entry


class FakeCategoryRepository:
    def __init__(self, categories: Iterable[Category] = ()) -> None:
        self.categories: dict[str, Category] = {category.id: category for category in categories}
        self.lookups = 0

    def add(self, entity: Category) -> None:
        self.categories[entity.id] = entity

    def get(self, category_id: str) -> Category | None:
        self.lookups += 1
        return self.categories.get(category_id)

    def list_all(self) -> list[Category]:
        return list(self.categories.values())


class FakeDeveloperRepository:
    def __init__(self, developers: Iterable[Developer] = ()) -> None:
        self.developers: dict[str, Developer] = {dev.id: dev for dev in developers}
        self.lookups = 0

    def add(self, entity: Developer) -> None:
        self.developers[entity.id] = entity

    def get(self, developer_id: str) -> Developer | None:
        self.lookups += 1
        return self.developers.get(developer_id)

    def first_verified(self) -> Developer | None:
        self.lookups += 1
        verified = [dev for dev in self.developers.values() if dev.verified]
        return min(verified, key=lambda dev: dev.created_at) if verified else None


class FakeSyncRunRepository:
    def __init__(self, runs: Iterable[SyncRun] = ()) -> None:
        self.runs: dict[UUID, SyncRun] = {run.id: run for run in runs}

    def add(self, entity: SyncRun) -> None:
        self.runs[entity.id] = entity

    def get(self, run_id: UUID) -> SyncRun | None:
        return self.runs.get(run_id)

    def running(self) -> list[SyncRun]:
        return [run for run in self.runs.values() if run.status is SyncStatus.RUNNING]

    def recent(self, limit: int) -> list[SyncRun]:
        ordered = sorted(self.runs.values(), key=lambda run: run.started_at, reverse=True)
        return ordered[:limit]


@dataclass(slots=True)
class FakeCatalogRepositories:
    apps: FakeCatalogEntryRepository = field(default_factory=FakeCatalogEntryRepository)
    categories: FakeCategoryRepository = field(default_factory=FakeCategoryRepository)
    developers: FakeDeveloperRepository = field(default_factory=FakeDeveloperRepository)
    sync_runs: FakeSyncRunRepository = field(default_factory=FakeSyncRunRepository)


class FakeCatalogUnitOfWork:
    """Unit of work over shared in-memory repositories; writes are visible immediately."""

    def __init__(self, store: FakeCatalogStore) -> None:
        self._store = store
        self.repositories = store.repositories
        self.committed = False
        self.rollback_called = False

    def __enter__(self) -> FakeCatalogUnitOfWork:
        self._store.record_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: object | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.committed = True
        self._store.record_commit()

    def rollback(self) -> None:
        self.rollback_called = True


class FakeCatalogStore:
    """Owns the fake repositories and hands out units of work over them."""

    def __init__(
        self,
        *,
        entries: Iterable[CatalogEntry] = (),
        categories: Iterable[Category] = (),
        developers: Iterable[Developer] = (),
        runs: Iterable[SyncRun] = (),
    ) -> None:
        self.repositories = FakeCatalogRepositories(
            apps=FakeCatalogEntryRepository(entries),
            categories=FakeCategoryRepository(categories),
            developers=FakeDeveloperRepository(developers),
            sync_runs=FakeSyncRunRepository(runs),
        )
        self.opened = 0
        self.commits = 0
        self._lock = threading.Lock()

    def record_open(self) -> None:
        with self._lock:
            self.opened += 1

    def record_commit(self) -> None:
        with self._lock:
            self.commits += 1

    def unit_of_work(self) -> FakeCatalogUnitOfWork:
        return FakeCatalogUnitOfWork(self)

    @property
    def apps(self) -> FakeCatalogEntryRepository:
        return self.repositories.apps

    @property
    def sync_runs(self) -> FakeSyncRunRepository:
        return self.repositories.sync_runs


def default_store(*entries: CatalogEntry) -> FakeCatalogStore:
    """Store with one category ``cat-1`` and one verified developer ``dev-1``."""

    return FakeCatalogStore(
        entries=entries,
        categories=[Category(id="cat-1", name="Utilities"), Category(id="cat-2", name="Games")],
        developers=[Developer(id="dev-1", name="Marketplace", verified=True, created_at=T0)],
    )


def unavailable_store_error() -> StoreUnavailableError:
    return StoreUnavailableError("catalog store offline")


if TYPE_CHECKING:
    from catalogsync.domain.ports.fetching import CatalogSource
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork

    _source_check: CatalogSource = StaticCatalogSource()
    _uow_check: CatalogUnitOfWork = FakeCatalogUnitOfWork(FakeCatalogStore())
