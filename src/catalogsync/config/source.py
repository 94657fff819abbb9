"""External catalog source configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_var
from .errors import InvalidConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

CATALOG_SOURCE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class CatalogSourceConfig:
    """Holds the external catalog endpoint and its HTTP behaviour."""

    base_url: str
    resilience: ResilienceConfig
    categories_url: str | None = None
    token: str | None = None


def build_source_resilience(
    base_url: str,
    *,
    token: str | None = None,
    cache: CacheConfig | None = None,
) -> ResilienceConfig:
    headers = {"Accept": "application/json"}
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"
    return ResilienceConfig(
        name="catalog-source",
        base_url=base_url,
        timeout_seconds=CATALOG_SOURCE_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=cache or CacheConfig(enabled=False),
        default_headers=headers,
    )


def get_catalog_source_config(*, cache: CacheConfig | None = None) -> CatalogSourceConfig:
    base_url = require_env_var("CATALOG_SOURCE_URL").rstrip("/")
    token = optional_env_var("CATALOG_SOURCE_TOKEN")
    cache_backend = optional_env_var("CATALOG_SOURCE_CACHE")
    if cache is None and cache_backend is not None:
        if cache_backend not in {"memory", "sqlite"}:
            raise InvalidConfigurationError(
                "CATALOG_SOURCE_CACHE", f"must be memory or sqlite, got {cache_backend!r}"
            )
        cache = CacheConfig(enabled=True, backend=cache_backend)  # type: ignore[arg-type]
    return CatalogSourceConfig(
        base_url=base_url,
        resilience=build_source_resilience(base_url, token=token, cache=cache),
        categories_url=optional_env_var("CATALOG_CATEGORIES_URL"),
        token=token,
    )
