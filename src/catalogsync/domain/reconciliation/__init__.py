"""Reconciliation of the external catalog against the local catalog."""

from __future__ import annotations

from .apply import MutationApplier
from .categories import CategoryChange, CategorySyncResult, default_description, sync_categories
from .contracts import (
    Applied,
    ApplyReport,
    ClassifiedRecord,
    Failed,
    FailureReason,
    ReconciliationPlan,
    RecordResult,
)
from .engine import build_key_index, classify, reconcile
from .policy import OwnerResolver

__all__ = [
    "Applied",
    "ApplyReport",
    "CategoryChange",
    "CategorySyncResult",
    "ClassifiedRecord",
    "Failed",
    "FailureReason",
    "MutationApplier",
    "OwnerResolver",
    "ReconciliationPlan",
    "RecordResult",
    "build_key_index",
    "classify",
    "default_description",
    "reconcile",
    "sync_categories",
]
