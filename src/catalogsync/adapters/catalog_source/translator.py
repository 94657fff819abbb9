"""Translate catalog source payloads into domain values."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalogsync.domain.model import CategoryNode, SourceRecord

from .schema import AppPayload, CategoryPayload

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

log = getLogger(__name__)


def _as_tuple(values: list[str] | None) -> tuple[str, ...] | None:
    return tuple(values) if values is not None else None


def parse_source_record(payload: AppPayload | Mapping[str, object]) -> SourceRecord:
    app = payload if isinstance(payload, AppPayload) else AppPayload.model_validate(payload)
    return SourceRecord(
        bundle_id=app.bundle_id,
        name=app.name,
        version=app.version,
        description=app.description,
        category_id=app.category_id,
        subcategory_id=app.subcategory_id,
        tags=_as_tuple(app.tags),
        screenshots=_as_tuple(app.screenshots),
        icon=app.icon,
        website=app.website,
        price=app.price,
        vendor=app.vendor,
        license=app.license,
        file_size=app.file_size,
        download_url=app.download_url,
        download_count=app.download_count,
        requirements=app.requirements,
        release_date=app.release_date,
        last_scan_date=app.last_scan_date,
    )


def unique_by_bundle_id(records: Iterable[SourceRecord]) -> list[SourceRecord]:
    """Keep the first record per bundle id; later duplicates are dropped."""

    seen: set[str] = set()
    unique: list[SourceRecord] = []
    for record in records:
        if record.bundle_id in seen:
            log.warning("Dropping duplicate source record for bundle id %s", record.bundle_id)
            continue
        seen.add(record.bundle_id)
        unique.append(record)
    return unique


def parse_category_node(payload: Mapping[str, object]) -> CategoryNode:
    category = CategoryPayload.model_validate(payload)
    return CategoryNode(
        external_id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        children=tuple(parse_category_nodes(category.children or ())),
    )


def parse_category_nodes(items: Sequence[object]) -> list[CategoryNode]:
    """Parse a list of category nodes, dropping (and logging) invalid ones."""

    nodes: list[CategoryNode] = []
    for item in items:
        if not isinstance(item, Mapping):
            log.warning("Skipping category entry of type %s", type(item).__name__)
            continue
        try:
            nodes.append(parse_category_node(item))  # pyright: ignore[reportUnknownArgumentType]
        except ValidationError as exc:
            log.warning("Skipping invalid category %r: %s", item.get("name"), exc)  # pyright: ignore[reportUnknownMemberType]
    return nodes
