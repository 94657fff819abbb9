"""SQLAlchemy adapter package for catalogsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCatalogEntryRepository,
    SqlAlchemyCategoryRepository,
    SqlAlchemyDeveloperRepository,
    SqlAlchemySyncRunRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogEntryRepository",
    "SqlAlchemyCategoryRepository",
    "SqlAlchemyDeveloperRepository",
    "SqlAlchemySyncRunRepository",
    "SqlAlchemyUnitOfWork",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
