"""HTTP source for the external app catalog."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.domain.errors import SourceFormatError, SourceUnavailableError

from .schema import CatalogPage
from .translator import parse_source_record, unique_by_bundle_id

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.config.source import CatalogSourceConfig
    from catalogsync.domain.model import SourceRecord
    from catalogsync.domain.ports.fetching import CatalogSource

log = getLogger(__name__)

APPS_PATH = "apps"
DEFAULT_MAX_PAGES = 1000


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpCatalogSource:
    """Page through ``GET {base_url}/apps?page=N`` until ``totalPages`` is reached."""

    resilience: ResilienceConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    path: str = APPS_PATH
    max_pages: int = DEFAULT_MAX_PAGES

    @classmethod
    def from_config(cls, config: CatalogSourceConfig) -> HttpCatalogSource:
        return cls(resilience=config.resilience)

    def fetch(self) -> list[SourceRecord]:
        return asyncio.run(self._fetch_async())

    async def _fetch_async(self) -> list[SourceRecord]:
        """Collect every page or raise; a partial catalog would read as removals."""

        records: list[SourceRecord] = []
        page = 1
        async with self.client_factory(self.resilience) as client:
            while True:
                catalog_page = await self._request_page(client, page)
                records.extend(parse_source_record(app) for app in catalog_page.apps)
                total_pages = catalog_page.total_pages
                if page >= total_pages:
                    break
                if not catalog_page.apps:
                    raise SourceFormatError(
                        f"Catalog page {page} is empty but the source reports {total_pages} pages"
                    )
                if page >= self.max_pages:
                    raise SourceFormatError(
                        f"Catalog reports {total_pages} pages, more than the limit of "
                        f"{self.max_pages}"
                    )
                page += 1
        log.debug("Fetched %d records over %d pages", len(records), page)
        return unique_by_bundle_id(records)

    async def _request_page(self, client: ResilientClient, page: int) -> CatalogPage:
        try:
            response = await client.get(self.path, params={"page": page})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailableError(
                f"Catalog source answered {exc.response.status_code} for page {page}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"Catalog source unreachable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceFormatError(f"Catalog page {page} is not valid JSON") from exc
        try:
            return CatalogPage.model_validate(payload)
        except ValidationError as exc:
            raise SourceFormatError(f"Catalog page {page} has an unexpected shape: {exc}") from exc


if TYPE_CHECKING:
    _source_check: CatalogSource = HttpCatalogSource(resilience=ResilienceConfig(name="check"))
