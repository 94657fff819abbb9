"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from catalogsync.domain.model import CatalogEntry, Category, Developer, SyncRun

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from catalogsync.domain.model import CatalogBaselineEntry


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CatalogEntryRepository(Repository[CatalogEntry], Protocol):
    """Persistence contract for catalog entries (apps)."""

    def baseline(self) -> list[CatalogBaselineEntry]:
        """Return the comparison projection of every entry.

        Raises ``StoreUnavailableError`` when the store cannot be read.
        """
        ...

    def get(self, entry_id: UUID) -> CatalogEntry | None: ...

    def find_by_bundle_id(self, bundle_id: str) -> CatalogEntry | None: ...

    def mark_unsupported(self, entry_ids: Sequence[UUID], *, at: datetime) -> int: ...


@runtime_checkable
class CategoryRepository(Repository[Category], Protocol):
    def get(self, category_id: str) -> Category | None: ...

    def list_all(self) -> list[Category]: ...


@runtime_checkable
class DeveloperRepository(Repository[Developer], Protocol):
    def get(self, developer_id: str) -> Developer | None: ...

    def first_verified(self) -> Developer | None: ...


@runtime_checkable
class SyncRunRepository(Repository[SyncRun], Protocol):
    def get(self, run_id: UUID) -> SyncRun | None: ...

    def running(self) -> list[SyncRun]: ...

    def recent(self, limit: int) -> list[SyncRun]: ...
