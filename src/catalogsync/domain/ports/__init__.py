"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import CatalogSource, CategorySource
from .persistence import (
    CatalogEntryRepository,
    CategoryRepository,
    DeveloperRepository,
    Repository,
    SyncRunRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    CatalogUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogEntryRepository",
    "CatalogRepositories",
    "CatalogSource",
    "CatalogUnitOfWork",
    "CatalogUnitOfWorkFactory",
    "CategoryRepository",
    "CategorySource",
    "DeveloperRepository",
    "Repository",
    "RepositoryCollection",
    "SyncRunRepository",
    "UnitOfWork",
]
