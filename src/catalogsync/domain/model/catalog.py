"""Catalog domain entities. ``CatalogEntry`` is the aggregate root owning its bundle ids."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.model.source import SourceRecord


def new_id() -> UUID:
    return uuid4()


def new_key() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


# Fields a source record may overwrite on an existing entry. Category linkage is
# resolved separately because it has to point at an existing category row.
SOURCE_UPDATABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "description",
        "version",
        "subcategory_id",
        "tags",
        "screenshots",
        "icon",
        "website",
        "price",
        "vendor",
        "license",
        "file_size",
        "download_url",
        "download_count",
        "requirements",
        "release_date",
        "last_scan_date",
    }
)


@dataclass(eq=False, kw_only=True)
class Category:
    id: str = field(default_factory=new_key)
    name: str
    slug: str | None = None
    description: str | None = None
    parent_id: str | None = None
    external_id: str | None = None


@dataclass(eq=False, kw_only=True)
class Developer:
    id: str = field(default_factory=new_key)
    name: str
    verified: bool = False
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class BundleIdentifier:
    """One external identity key of a catalog entry; ``position`` 0 is the primary key."""

    value: str
    position: int = 0


@dataclass(eq=False, kw_only=True)
class CatalogEntry:
    id: UUID = field(default_factory=new_id)
    name: str
    version: str
    category_id: str
    developer_id: str
    description: str | None = None
    subcategory_id: str | None = None
    tags: list[str] = field(default_factory=list[str])
    screenshots: list[str] = field(default_factory=list[str])
    icon: str | None = None
    website: str | None = None
    price: str | None = None
    vendor: str | None = None
    license: str | None = None
    file_size: int | None = None
    download_url: str | None = None
    download_count: int = 0
    requirements: str | None = None
    release_date: datetime | None = None
    last_scan_date: datetime | None = None
    published: bool = True
    is_beta: bool = False
    is_supported: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    _bundle_identifiers: list[BundleIdentifier] = field(
        default_factory=list["BundleIdentifier"], repr=False
    )

    @property
    def bundle_ids(self) -> tuple[str, ...]:
        ordered = sorted(self._bundle_identifiers, key=lambda item: item.position)
        return tuple(item.value for item in ordered)

    @property
    def primary_bundle_id(self) -> str | None:
        ids = self.bundle_ids
        return ids[0] if ids else None

    def add_bundle_id(self, value: str) -> None:
        if value in self.bundle_ids:
            return
        position = max((item.position for item in self._bundle_identifiers), default=-1) + 1
        self._bundle_identifiers.append(BundleIdentifier(value=value, position=position))

    @classmethod
    def from_source(
        cls,
        record: SourceRecord,
        *,
        category_id: str,
        developer_id: str,
        at: datetime | None = None,
    ) -> CatalogEntry:
        """Build a new, supported and published entry for a record first seen in the source."""

        when = at or utcnow()
        entry = cls(
            name=record.name,
            version=record.version,
            category_id=category_id,
            developer_id=developer_id,
            created_at=when,
            updated_at=when,
        )
        entry._assign(record.present_fields())  # noqa: SLF001
        entry.add_bundle_id(record.bundle_id)
        return entry

    def apply_source(self, record: SourceRecord, *, at: datetime | None = None) -> list[str]:
        """Partially update from ``record``; absent source fields keep their value.

        Returns the names of the fields that were written.
        """

        changed = self._assign(record.present_fields())
        self.add_bundle_id(record.bundle_id)
        self.mark_supported(at=at)
        return changed

    def move_to_category(self, category_id: str, *, at: datetime | None = None) -> None:
        if category_id == self.category_id:
            return
        self.category_id = category_id
        self.updated_at = at or utcnow()

    def mark_unsupported(self, *, at: datetime | None = None) -> None:
        self.is_supported = False
        self.updated_at = at or utcnow()

    def mark_supported(self, *, at: datetime | None = None) -> None:
        self.is_supported = True
        self.updated_at = at or utcnow()

    def _assign(self, values: dict[str, object]) -> list[str]:
        changed: list[str] = []
        for name, value in values.items():
            if name not in SOURCE_UPDATABLE_FIELDS:
                continue
            if isinstance(value, tuple):
                value = list(value)  # noqa: PLW2901
            setattr(self, name, value)
            changed.append(name)
        return changed


@dataclass(frozen=True, slots=True, kw_only=True)
class CatalogBaselineEntry:
    """Comparison projection of a ``CatalogEntry`` (no descriptive fields)."""

    id: UUID
    bundle_ids: tuple[str, ...]
    version: str
    category_id: str | None = None
    developer_id: str | None = None
    updated_at: datetime | None = None
    is_supported: bool = True

    @property
    def primary_bundle_id(self) -> str | None:
        return self.bundle_ids[0] if self.bundle_ids else None

    @classmethod
    def of(cls, entry: CatalogEntry) -> CatalogBaselineEntry:
        return cls(
            id=entry.id,
            bundle_ids=entry.bundle_ids,
            version=entry.version,
            category_id=entry.category_id,
            developer_id=entry.developer_id,
            updated_at=entry.updated_at,
            is_supported=entry.is_supported,
        )


def baseline_of(entries: Iterable[CatalogEntry]) -> list[CatalogBaselineEntry]:
    return [CatalogBaselineEntry.of(entry) for entry in entries]
