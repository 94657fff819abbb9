"""Values read from the external catalog source.

These exist for the duration of one sync run only and are never persisted as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class SourceRecord:
    """Canonical app record as published by the external source.

    ``None`` means the source did not supply the field; such fields never
    overwrite existing catalog values.
    """

    bundle_id: str
    name: str
    version: str
    description: str | None = None
    category_id: str | None = None
    subcategory_id: str | None = None
    tags: tuple[str, ...] | None = None
    screenshots: tuple[str, ...] | None = None
    icon: str | None = None
    website: str | None = None
    price: str | None = None
    vendor: str | None = None
    license: str | None = None
    file_size: int | None = None
    download_url: str | None = None
    download_count: int | None = None
    requirements: str | None = None
    release_date: datetime | None = None
    last_scan_date: datetime | None = None

    def present_fields(self) -> dict[str, object]:
        """Return the fields the source actually supplied, identity excluded."""

        present: dict[str, object] = {}
        for item in fields(self):
            if item.name == "bundle_id":
                continue
            value = getattr(self, item.name)
            if value is not None:
                present[item.name] = value
        return present


@dataclass(frozen=True, slots=True, kw_only=True)
class CategoryNode:
    """One node of the source's category tree."""

    external_id: str
    name: str
    slug: str | None = None
    description: str | None = None
    children: tuple[CategoryNode, ...] = ()

    def walk(self) -> tuple[CategoryNode, ...]:
        nodes: list[CategoryNode] = [self]
        for child in self.children:
            nodes.extend(child.walk())
        return tuple(nodes)
