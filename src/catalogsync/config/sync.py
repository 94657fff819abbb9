"""Synchronization defaults for catalog sync runs."""

from __future__ import annotations

from dataclasses import dataclass

from catalogsync.domain.model import OwnerPolicy

from .env import env_float, env_int, optional_env_var
from .errors import ConfigurationError, InvalidConfigurationError

DEFAULT_CONCURRENCY = 4
DEFAULT_TIMEOUT_SECONDS = 300.0
DEFAULT_INTERVAL_HOURS = 24.0
DEFAULT_STALE_RUN_MINUTES = 60.0
DEFAULT_LOOKUP_CACHE_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class SyncConfig:
    concurrency: int = DEFAULT_CONCURRENCY
    timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS
    interval_hours: float = DEFAULT_INTERVAL_HOURS
    stale_run_minutes: float = DEFAULT_STALE_RUN_MINUTES
    lookup_cache_ttl_seconds: float = DEFAULT_LOOKUP_CACHE_TTL_SECONDS
    owner_policy: OwnerPolicy = OwnerPolicy.FIRST_VERIFIED
    owner_developer_id: str | None = None

    def __post_init__(self) -> None:
        if self.owner_policy is OwnerPolicy.FIXED and not self.owner_developer_id:
            raise ConfigurationError("Owner policy 'fixed' requires an owner developer id")


def _parse_owner_policy(raw: str | None) -> OwnerPolicy:
    if raw is None:
        return OwnerPolicy.FIRST_VERIFIED
    try:
        return OwnerPolicy(raw.lower())
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in OwnerPolicy)
        raise InvalidConfigurationError(
            "CATALOGSYNC_OWNER_POLICY", f"must be one of {choices}, got {raw!r}"
        ) from exc


def get_sync_config() -> SyncConfig:
    timeout = env_float("CATALOGSYNC_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, minimum=0.0)
    return SyncConfig(
        concurrency=env_int("CATALOGSYNC_CONCURRENCY", DEFAULT_CONCURRENCY, minimum=1),
        timeout_seconds=timeout or None,
        interval_hours=env_float(
            "CATALOGSYNC_INTERVAL_HOURS", DEFAULT_INTERVAL_HOURS, minimum=0.01
        ),
        stale_run_minutes=env_float(
            "CATALOGSYNC_STALE_RUN_MINUTES", DEFAULT_STALE_RUN_MINUTES, minimum=0.0
        ),
        lookup_cache_ttl_seconds=env_float(
            "CATALOGSYNC_LOOKUP_CACHE_TTL", DEFAULT_LOOKUP_CACHE_TTL_SECONDS, minimum=0.0
        ),
        owner_policy=_parse_owner_policy(optional_env_var("CATALOGSYNC_OWNER_POLICY")),
        owner_developer_id=optional_env_var("CATALOGSYNC_OWNER_DEVELOPER_ID"),
    )
