"""Catalog source backed by a local JSON export."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalogsync.domain.errors import SourceFormatError, SourceUnavailableError

from .schema import CatalogPage
from .translator import parse_source_record, unique_by_bundle_id

if TYPE_CHECKING:
    from pathlib import Path

    from catalogsync.domain.model import SourceRecord


@dataclass(frozen=True, slots=True)
class JsonFileCatalogSource:
    """Read a catalog page (or a bare list of apps) from ``path``."""

    path: Path

    def fetch(self) -> list[SourceRecord]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read catalog file {self.path}: {exc}") from exc
        try:
            page = CatalogPage.model_validate(json.loads(raw))
        except json.JSONDecodeError as exc:
            raise SourceFormatError(f"Catalog file {self.path} is not valid JSON") from exc
        except ValidationError as exc:
            msg = f"Catalog file {self.path} has an unexpected shape: {exc}"
            raise SourceFormatError(msg) from exc
        return unique_by_bundle_id(parse_source_record(app) for app in page.apps)
