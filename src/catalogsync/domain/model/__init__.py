"""Public domain model surface."""

from __future__ import annotations

from catalogsync.domain.model.catalog import (
    BundleIdentifier,
    CatalogBaselineEntry,
    CatalogEntry,
    Category,
    Developer,
    baseline_of,
    new_id,
    utcnow,
)
from catalogsync.domain.model.enums import (
    CategoryChangeKind,
    Classification,
    OwnerPolicy,
    SyncStatus,
    SyncTrigger,
)
from catalogsync.domain.model.source import CategoryNode, SourceRecord
from catalogsync.domain.model.sync_run import SyncRun, SyncStats

__all__ = [  # noqa: RUF022
    # catalog
    "BundleIdentifier",
    "CatalogBaselineEntry",
    "CatalogEntry",
    "Category",
    "Developer",
    "baseline_of",
    "new_id",
    "utcnow",
    # source values
    "CategoryNode",
    "SourceRecord",
    # sync log
    "SyncRun",
    "SyncStats",
    # enums
    "CategoryChangeKind",
    "Classification",
    "OwnerPolicy",
    "SyncStatus",
    "SyncTrigger",
]
