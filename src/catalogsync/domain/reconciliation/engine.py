"""Catalog reconciliation: classify source records against the local baseline.

Pure function over two sequences; no store or network access happens here.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.model import Classification

from .contracts import ClassifiedRecord, ReconciliationPlan

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from catalogsync.domain.model import CatalogBaselineEntry, SourceRecord

log = getLogger(__name__)


def build_key_index(
    baseline: Iterable[CatalogBaselineEntry],
) -> dict[str, CatalogBaselineEntry]:
    """Map every identity key to the entry that owns it.

    Primary keys are indexed before secondary keys, and the first entry to claim
    a key keeps it, so overlapping key sets resolve deterministically.
    """

    entries = list(baseline)
    index: dict[str, CatalogBaselineEntry] = {}
    for entry in entries:
        primary = entry.primary_bundle_id
        if primary is None:
            continue
        owner = index.setdefault(primary, entry)
        if owner is not entry:
            log.warning(
                "Bundle id %s claimed by entries %s and %s; keeping %s",
                primary,
                owner.id,
                entry.id,
                owner.id,
            )
    for entry in entries:
        for key in entry.bundle_ids[1:]:
            index.setdefault(key, entry)
    return index


def classify(record: SourceRecord, match: CatalogBaselineEntry | None) -> Classification:
    if match is None:
        return Classification.ADDED
    if not match.is_supported:
        # reappeared in the source: reactivate
        return Classification.UPDATED
    if match.version != record.version:
        return Classification.UPDATED
    return Classification.UNCHANGED


def reconcile(
    source_records: Sequence[SourceRecord],
    baseline: Sequence[CatalogBaselineEntry],
    *,
    include_unsupported_in_removed: bool = False,
) -> ReconciliationPlan:
    """Classify every source record and every orphaned catalog entry.

    An entry is kept alive when *any* of its bundle ids is present in the source;
    it is ``REMOVED`` only when none is. Entries already flagged unsupported are
    not reported as removed again unless ``include_unsupported_in_removed``.
    """

    index = build_key_index(baseline)
    items: list[ClassifiedRecord] = []

    for record in source_records:
        match = index.get(record.bundle_id)
        items.append(
            ClassifiedRecord(classification=classify(record, match), record=record, entry=match)
        )

    seen_keys = {record.bundle_id for record in source_records}
    for entry in baseline:
        if any(key in seen_keys for key in entry.bundle_ids):
            continue
        if not entry.is_supported and not include_unsupported_in_removed:
            continue
        items.append(ClassifiedRecord(classification=Classification.REMOVED, entry=entry))

    plan = ReconciliationPlan(tuple(items))
    log.debug("Reconciled %d source records against %d entries", len(source_records), len(baseline))
    return plan
