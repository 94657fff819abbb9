"""Keep the local category tree in step with the source's category tree.

Nodes are matched by the source's id first and by ``(name, parent)`` second, so
categories created by hand before the first sync are adopted instead of
duplicated. Nothing is ever deleted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.model import Category, CategoryChangeKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import CategoryNode
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWorkFactory

log = getLogger(__name__)


def default_description(name: str) -> str:
    return f"Apps in the {name} category"


@dataclass(frozen=True, slots=True, kw_only=True)
class CategoryChange:
    kind: CategoryChangeKind
    name: str
    parent_name: str | None = None
    description: str | None = None
    old_description: str | None = None
    old_parent_id: str | None = None


@dataclass(slots=True)
class CategorySyncResult:
    changes: list[CategoryChange] = field(default_factory=list["CategoryChange"])
    preview: bool = False

    def count(self, kind: CategoryChangeKind) -> int:
        return sum(1 for change in self.changes if change.kind is kind)

    @property
    def summary(self) -> dict[str, int]:
        return {str(kind): self.count(kind) for kind in CategoryChangeKind}


@dataclass(slots=True)
class _CategoryIndex:
    by_external_id: dict[str, Category] = field(default_factory=dict[str, Category])
    by_name_parent: dict[tuple[str, str | None], Category] = field(
        default_factory=dict[tuple[str, str | None], Category]
    )
    by_id: dict[str, Category] = field(default_factory=dict[str, Category])

    def add(self, category: Category) -> None:
        self.by_id[category.id] = category
        if category.external_id is not None:
            self.by_external_id.setdefault(category.external_id, category)
        self.by_name_parent.setdefault((category.name, category.parent_id), category)

    def match(self, node: CategoryNode, parent_id: str | None) -> Category | None:
        found = self.by_external_id.get(node.external_id)
        if found is None:
            found = self.by_name_parent.get((node.name, parent_id))
        return found


def sync_categories(
    nodes: Sequence[CategoryNode],
    *,
    unit_of_work_factory: CatalogUnitOfWorkFactory,
    preview: bool = False,
) -> CategorySyncResult:
    """Create or update categories for every node of the source tree.

    With ``preview`` the same changes are computed inside the unit of work and
    then rolled back.
    """

    result = CategorySyncResult(preview=preview)
    with unit_of_work_factory() as uow:
        categories = uow.repositories.categories
        index = _CategoryIndex()
        for category in categories.list_all():
            index.add(category)

        def visit(node: CategoryNode, parent: Category | None) -> None:
            parent_id = parent.id if parent is not None else None
            parent_name = parent.name if parent is not None else None
            description = node.description or default_description(node.name)
            existing = index.match(node, parent_id)

            if existing is None:
                category = Category(
                    name=node.name,
                    slug=node.slug,
                    description=description,
                    parent_id=parent_id,
                    external_id=node.external_id,
                )
                categories.add(category)
                index.add(category)
                log.debug("Create category %s (%s)", node.name, node.external_id)
                result.changes.append(
                    CategoryChange(
                        kind=CategoryChangeKind.CREATE,
                        name=node.name,
                        parent_name=parent_name,
                        description=node.description,
                    )
                )
            else:
                category = existing
                if (
                    category.description != description
                    or category.parent_id != parent_id
                    or category.external_id != node.external_id
                ):
                    result.changes.append(
                        CategoryChange(
                            kind=CategoryChangeKind.UPDATE,
                            name=node.name,
                            parent_name=parent_name,
                            description=node.description,
                            old_description=category.description,
                            old_parent_id=category.parent_id,
                        )
                    )
                    category.description = description
                    category.parent_id = parent_id
                    category.external_id = node.external_id
                    if node.slug is not None:
                        category.slug = node.slug
                    log.debug("Update category %s (%s)", node.name, category.id)
                else:
                    result.changes.append(
                        CategoryChange(
                            kind=CategoryChangeKind.UNCHANGED,
                            name=node.name,
                            parent_name=parent_name,
                        )
                    )

            for child in node.children:
                visit(child, category)

        for node in nodes:
            visit(node, None)

        if preview:
            uow.rollback()
        else:
            uow.commit()

    log.info(
        "Category sync%s: %s",
        " (preview)" if preview else "",
        ", ".join(f"{kind}={count}" for kind, count in result.summary.items()),
    )
    return result
