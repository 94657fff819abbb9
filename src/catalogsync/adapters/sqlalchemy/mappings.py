"""SQLAlchemy mapping metadata for the catalog domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
    text,
)
from sqlalchemy.orm import configure_mappers, relationship

from catalogsync.domain.model import (
    BundleIdentifier,
    CatalogEntry,
    Category,
    Developer,
    SyncRun,
    SyncStatus,
    SyncTrigger,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _str_enum(enum_cls: type[StrEnum]) -> Enum:
    # stored by value so raw SQL (the running-run index) can match on it
    return Enum(enum_cls, native_enum=False, values_callable=_enum_values, validate_strings=True)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog tables ----------------------------------------------------------------

category_table = Table(
    "category",
    mapper_registry.metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("parent_id", String(64), ForeignKey("category.id"), nullable=True),
    Column("external_id", String, nullable=True, unique=True),
    Index("ix_category_name_parent", "name", "parent_id"),
)

developer_table = Table(
    "developer",
    mapper_registry.metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String, nullable=False),
    Column("verified", Boolean, nullable=False, default=False),
    Column("created_at", UTCDateTime(), nullable=False),
)

app_table = Table(
    "app",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("version", String, nullable=False),
    Column("description", Text, nullable=True),
    Column("category_id", String(64), ForeignKey("category.id"), nullable=False, index=True),
    Column("subcategory_id", String(64), nullable=True),
    Column("developer_id", String(64), ForeignKey("developer.id"), nullable=False, index=True),
    Column("tags", JSON, nullable=False, default=list),
    Column("screenshots", JSON, nullable=False, default=list),
    Column("icon", String, nullable=True),
    Column("website", String, nullable=True),
    Column("price", String, nullable=True),
    Column("vendor", String, nullable=True),
    Column("license", String, nullable=True),
    Column("file_size", Integer, nullable=True),
    Column("download_url", String, nullable=True),
    Column("download_count", Integer, nullable=False, default=0),
    Column("requirements", Text, nullable=True),
    Column("release_date", UTCDateTime(), nullable=True),
    Column("last_scan_date", UTCDateTime(), nullable=True),
    Column("published", Boolean, nullable=False, default=True),
    Column("is_beta", Boolean, nullable=False, default=False),
    Column("is_supported", Boolean, nullable=False, default=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

# One row per identity key; the unique value keeps key sets disjoint across apps.
app_bundle_id_table = Table(
    "app_bundle_id",
    mapper_registry.metadata,
    Column("id", Integer, key="_id", primary_key=True, autoincrement=True),
    Column(
        "app_id",
        UUIDColumnType,
        ForeignKey("app.id", ondelete="CASCADE"),
        key="_app_id",
        nullable=False,
        index=True,
    ),
    Column("value", String, nullable=False, unique=True),
    Column("position", Integer, nullable=False, default=0),
)

# Sync log ----------------------------------------------------------------------

sync_run_table = Table(
    "sync_run",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("status", _str_enum(SyncStatus), nullable=False),
    Column("trigger", _str_enum(SyncTrigger), nullable=False),
    Column("started_at", UTCDateTime(), nullable=False, index=True),
    Column("ended_at", UTCDateTime(), nullable=True),
    Column("added", Integer, nullable=False, default=0),
    Column("updated", Integer, nullable=False, default=0),
    Column("unchanged", Integer, nullable=False, default=0),
    Column("removed", Integer, nullable=False, default=0),
    Column("errors", Integer, nullable=False, default=0),
    Column("error", Text, nullable=True),
    Index(
        "uq_sync_run_single_running",
        "status",
        unique=True,
        sqlite_where=text("status = 'running'"),
        postgresql_where=text("status = 'running'"),
    ),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Category, category_table)
    mapper_registry.map_imperatively(Developer, developer_table)
    mapper_registry.map_imperatively(BundleIdentifier, app_bundle_id_table)
    mapper_registry.map_imperatively(
        CatalogEntry,
        app_table,
        properties={
            "_bundle_identifiers": relationship(
                BundleIdentifier,
                cascade="all, delete-orphan",
                order_by=app_bundle_id_table.c.position,
                lazy="selectin",
            ),
        },
    )
    mapper_registry.map_imperatively(SyncRun, sync_run_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
