from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from catalogsync.adapters.catalog_source import HttpCatalogSource
from catalogsync.config.http_resilience import ResilienceConfig, RetryPolicy
from catalogsync.domain.errors import SourceFormatError, SourceUnavailableError
from tests.helpers.http import make_client_factory

if TYPE_CHECKING:
    from tests.helpers.http import Handler


def _app(bundle_id: str, version: str = "1.0") -> dict[str, object]:
    return {"bundleId": bundle_id, "name": bundle_id.title(), "version": version}


def _source(resilience: ResilienceConfig, handler: Handler, **kwargs: int) -> HttpCatalogSource:
    return HttpCatalogSource(
        resilience=resilience, client_factory=make_client_factory(handler), **kwargs
    )


def test_fetch_walks_all_pages(resilience: ResilienceConfig) -> None:
    pages = {
        "1": {"apps": [_app("a"), _app("b")], "page": 1, "totalPages": 2},
        "2": {"apps": [_app("c")], "page": 2, "totalPages": 2},
    }
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/apps"
        page = request.url.params["page"]
        seen.append(page)
        return httpx.Response(200, json=pages[page])

    records = _source(resilience, handler).fetch()

    assert [record.bundle_id for record in records] == ["a", "b", "c"]
    assert seen == ["1", "2"]


def test_empty_page_before_last_is_format_error(resilience: ResilienceConfig) -> None:
    pages = {
        "1": [_app("a")],
        "2": [],
        "3": [_app("c")],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        page = request.url.params["page"]
        return httpx.Response(200, json={"apps": pages[page], "totalPages": 3})

    with pytest.raises(SourceFormatError, match="page 2 is empty"):
        _source(resilience, handler).fetch()


def test_empty_catalog_is_accepted(resilience: ResilienceConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, json={"apps": [], "totalPages": 1})

    assert _source(resilience, handler).fetch() == []


def test_more_pages_than_limit_is_format_error(resilience: ResilienceConfig) -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        calls.append(page)
        return httpx.Response(200, json={"apps": [_app(f"app{page}")], "totalPages": 50})

    with pytest.raises(SourceFormatError, match="limit of 3"):
        _source(resilience, handler, max_pages=3).fetch()

    assert calls == [1, 2, 3]


def test_last_page_at_limit_is_complete(resilience: ResilienceConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        return httpx.Response(200, json={"apps": [_app(f"app{page}")], "totalPages": 3})

    records = _source(resilience, handler, max_pages=3).fetch()

    assert [record.bundle_id for record in records] == ["app1", "app2", "app3"]


def test_duplicate_bundle_ids_keep_first(resilience: ResilienceConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, json=[_app("a", "1.0"), _app("a", "2.0")])

    records = _source(resilience, handler).fetch()

    assert [(r.bundle_id, r.version) for r in records] == [("a", "1.0")]


def test_server_error_is_source_unavailable(resilience: ResilienceConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(500, text="boom")

    with pytest.raises(SourceUnavailableError, match="500"):
        _source(resilience, handler).fetch()


def test_connection_error_is_source_unavailable(resilience: ResilienceConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(SourceUnavailableError, match="unreachable"):
        _source(resilience, handler).fetch()


def test_transient_error_is_retried() -> None:
    resilience = ResilienceConfig(
        name="catalog-test",
        base_url="https://catalog.example/api/",
        retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
        cache=None,
    )
    responses = iter([httpx.Response(503), httpx.Response(200, json=[_app("a")])])

    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return next(responses)

    records = _source(resilience, handler).fetch()

    assert [record.bundle_id for record in records] == ["a"]


def test_invalid_json_is_format_error(resilience: ResilienceConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(SourceFormatError, match="not valid JSON"):
        _source(resilience, handler).fetch()


def test_unexpected_shape_is_format_error(resilience: ResilienceConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, json={"apps": [{"name": "No bundle id", "version": "1"}]})

    with pytest.raises(SourceFormatError, match="unexpected shape"):
        _source(resilience, handler).fetch()
