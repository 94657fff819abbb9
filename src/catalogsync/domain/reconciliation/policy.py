"""Ownership policy for apps first seen in the external source.

The source carries no developer mapping, so new entries need an owner picked by
configuration rather than by the data itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from catalogsync.domain.model import OwnerPolicy

if TYPE_CHECKING:
    from catalogsync.domain.ports.persistence import DeveloperRepository


@dataclass(frozen=True, slots=True)
class OwnerResolver:
    policy: OwnerPolicy = OwnerPolicy.FIRST_VERIFIED
    developer_id: str | None = None

    def __post_init__(self) -> None:
        if self.policy is OwnerPolicy.FIXED and not self.developer_id:
            raise ValueError("OwnerPolicy.FIXED requires a developer_id")

    @property
    def cache_key(self) -> str:
        return f"owner:{self.policy}:{self.developer_id or ''}"

    def resolve(self, developers: DeveloperRepository) -> str | None:
        """Return the developer id that should own a newly synced app, if any."""

        match self.policy:
            case OwnerPolicy.FIRST_VERIFIED:
                developer = developers.first_verified()
            case OwnerPolicy.FIXED:
                developer = developers.get(self.developer_id or "")
            case OwnerPolicy.NONE:
                developer = None
        return developer.id if developer is not None else None
