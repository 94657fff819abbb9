"""Category tree source: a JSON endpoint or a page embedding Next.js data."""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final, cast

import httpx

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.config.http_resilience import RateLimit, ResilienceConfig
from catalogsync.domain.errors import SourceFormatError, SourceUnavailableError

from .translator import parse_category_nodes

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.domain.model import CategoryNode
    from catalogsync.domain.ports.fetching import CategorySource

log = getLogger(__name__)

_NEXT_DATA: Final[re.Pattern[str]] = re.compile(
    r'<script[^>]*id="__NEXT_DATA__"[^>]*>(?P<payload>.*?)</script>', re.DOTALL
)
_CATEGORY_PATH: Final[tuple[str, ...]] = ("props", "pageProps", "categoriesData", "data")
_BROWSER_HEADERS: Final[dict[str, str]] = {
    "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) catalogsync",
}


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="catalog-categories",
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        cache=None,
        default_headers=_BROWSER_HEADERS,
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def extract_next_data(html: str) -> object:
    match = _NEXT_DATA.search(html)
    if match is None:
        raise SourceFormatError("Page does not embed __NEXT_DATA__")
    try:
        return json.loads(match.group("payload"))
    except json.JSONDecodeError as exc:
        raise SourceFormatError("Embedded __NEXT_DATA__ is not valid JSON") from exc


def category_items(document: object) -> list[object]:
    """Locate the list of root category nodes inside a decoded document."""

    if isinstance(document, list):
        return cast(list[object], document)
    current: object = document
    for key in _CATEGORY_PATH:
        if not isinstance(current, Mapping):
            break
        current = cast(Mapping[str, object], current).get(key)
    else:
        if isinstance(current, list):
            return cast(list[object], current)
    if isinstance(document, Mapping):
        data = cast(Mapping[str, object], document).get("data")
        if isinstance(data, list):
            return cast(list[object], data)
    raise SourceFormatError("Category data not found in the response")


def parse_category_document(body: str) -> list[CategoryNode]:
    stripped = body.lstrip()
    if stripped.startswith(("{", "[")):
        try:
            document = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise SourceFormatError("Category response is not valid JSON") from exc
    else:
        document = extract_next_data(body)

    items = category_items(document)
    nodes = parse_category_nodes(items)
    if not nodes:
        raise SourceFormatError("No valid categories found in the response")
    if len(nodes) != len(items):
        log.warning("Dropped %d invalid root categories", len(items) - len(nodes))
    return nodes


@dataclass(slots=True)
class HttpCategorySource:
    url: str
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def fetch_categories(self) -> list[CategoryNode]:
        body = asyncio.run(self._fetch_body())
        return parse_category_document(body)

    async def _fetch_body(self) -> str:
        async with self.client_factory(self.resilience) as client:
            try:
                response = await client.get(self.url, follow_redirects=True)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise SourceUnavailableError(
                    f"Category page answered {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                raise SourceUnavailableError(f"Category page unreachable: {exc}") from exc
        return response.text


if TYPE_CHECKING:
    _category_source_check: CategorySource = HttpCategorySource(url="https://example.invalid")
