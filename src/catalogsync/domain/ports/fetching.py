"""Ports for reading the external catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import CategoryNode, SourceRecord


@runtime_checkable
class CatalogSource(Protocol):
    """Fetch the full external app catalog.

    Raises ``SourceUnavailableError`` when the source cannot be reached and
    ``SourceFormatError`` when its data cannot be normalised. Must not touch
    local state.
    """

    def fetch(self) -> Sequence[SourceRecord]: ...


@runtime_checkable
class CategorySource(Protocol):
    """Fetch the external category tree (root nodes with nested children)."""

    def fetch_categories(self) -> Sequence[CategoryNode]: ...


__all__ = ["CatalogSource", "CategorySource"]
