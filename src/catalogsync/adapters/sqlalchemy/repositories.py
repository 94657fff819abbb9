"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from itertools import batched
from typing import TYPE_CHECKING, cast

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from catalogsync.adapters.sqlalchemy.mappings import (
    app_bundle_id_table,
    app_table,
    category_table,
    developer_table,
    sync_run_table,
)
from catalogsync.domain.errors import StoreUnavailableError
from catalogsync.domain.model import (
    CatalogBaselineEntry,
    CatalogEntry,
    Category,
    Developer,
    SyncRun,
    SyncStatus,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

# keeps IN lists below the sqlite bound-parameter limit
_UPDATE_BATCH_SIZE = 500


class SqlAlchemyCatalogEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CatalogEntry) -> None:
        self.session.add(entity)

    def baseline(self) -> list[CatalogBaselineEntry]:
        entry_stmt = select(
            app_table.c.id,
            app_table.c.version,
            app_table.c.category_id,
            app_table.c.developer_id,
            app_table.c.updated_at,
            app_table.c.is_supported,
        ).order_by(app_table.c.created_at, app_table.c.id)
        key_stmt = select(
            app_bundle_id_table.c._app_id,  # noqa: SLF001
            app_bundle_id_table.c.value,
        ).order_by(app_bundle_id_table.c._app_id, app_bundle_id_table.c.position)  # noqa: SLF001
        try:
            entry_rows = self.session.execute(entry_stmt).all()
            key_rows = self.session.execute(key_stmt).all()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Cannot load catalog baseline: {exc}") from exc

        keys_by_entry: dict[UUID, list[str]] = {}
        for app_id, value in key_rows:
            keys_by_entry.setdefault(app_id, []).append(value)

        return [
            CatalogBaselineEntry(
                id=row.id,
                bundle_ids=tuple(keys_by_entry.get(row.id, ())),
                version=row.version,
                category_id=row.category_id,
                developer_id=row.developer_id,
                updated_at=row.updated_at,
                is_supported=row.is_supported,
            )
            for row in entry_rows
        ]

    def get(self, entry_id: UUID) -> CatalogEntry | None:
        return self.session.get(CatalogEntry, entry_id)

    def find_by_bundle_id(self, bundle_id: str) -> CatalogEntry | None:
        stmt = (
            select(app_bundle_id_table.c._app_id)  # noqa: SLF001
            .where(app_bundle_id_table.c.value == bundle_id)
            .limit(1)
        )
        entry_id = self.session.execute(stmt).scalar_one_or_none()
        if entry_id is None:
            return None
        return self.session.get(CatalogEntry, entry_id)

    def mark_unsupported(self, entry_ids: Sequence[UUID], *, at: datetime) -> int:
        """Flag the given entries unsupported in bulk; returns the number of rows touched."""

        touched = 0
        for chunk in batched(entry_ids, _UPDATE_BATCH_SIZE):
            stmt = (
                update(app_table)
                .where(app_table.c.id.in_(chunk))
                .values(is_supported=False, updated_at=at)
            )
            result = cast("CursorResult[object]", self.session.execute(stmt))
            touched += result.rowcount
        return touched


class SqlAlchemyCategoryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Category) -> None:
        self.session.add(entity)

    def get(self, category_id: str) -> Category | None:
        return self.session.get(Category, category_id)

    def list_all(self) -> list[Category]:
        stmt = select(Category).order_by(category_table.c.name, category_table.c.id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyDeveloperRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Developer) -> None:
        self.session.add(entity)

    def get(self, developer_id: str) -> Developer | None:
        return self.session.get(Developer, developer_id)

    def first_verified(self) -> Developer | None:
        stmt = (
            select(Developer)
            .where(developer_table.c.verified.is_(True))
            .order_by(developer_table.c.created_at, developer_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()


class SqlAlchemySyncRunRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SyncRun) -> None:
        self.session.add(entity)

    def get(self, run_id: UUID) -> SyncRun | None:
        return self.session.get(SyncRun, run_id)

    def running(self) -> list[SyncRun]:
        stmt = (
            select(SyncRun)
            .where(sync_run_table.c.status == SyncStatus.RUNNING)
            .order_by(sync_run_table.c.started_at)
        )
        return list(self.session.execute(stmt).scalars())

    def recent(self, limit: int) -> list[SyncRun]:
        stmt = select(SyncRun).order_by(sync_run_table.c.started_at.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from catalogsync.domain.ports.persistence import (
        CatalogEntryRepository,
        CategoryRepository,
        DeveloperRepository,
        SyncRunRepository,
    )

    _session_stub = cast("Session", object())
    _app_repo: CatalogEntryRepository = SqlAlchemyCatalogEntryRepository(_session_stub)
    _category_repo: CategoryRepository = SqlAlchemyCategoryRepository(_session_stub)
    _developer_repo: DeveloperRepository = SqlAlchemyDeveloperRepository(_session_stub)
    _sync_run_repo: SyncRunRepository = SqlAlchemySyncRunRepository(_session_stub)
