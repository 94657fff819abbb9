from __future__ import annotations

import pytest

from catalogsync.config.http_resilience import ResilienceConfig, RetryPolicy


@pytest.fixture
def resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="catalog-test",
        base_url="https://catalog.example/api/",
        retry=RetryPolicy(total=0),
        cache=None,
    )


@pytest.fixture
def app_payload() -> dict[str, object]:
    return {
        "bundleId": "com.example.notes",
        "name": "Notes",
        "version": "3.1",
        "description": "Plain text notes",
        "categoryId": 7,
        "tags": ["text", " ", "notes "],
        "screenshots": ["https://cdn.example/1.png"],
        "website": "  ",
        "price": 0,
        "fileSize": 1024,
        "downloadCount": 12,
        "releaseDate": "2024-05-01T10:00:00Z",
        "unknownField": "ignored",
    }
