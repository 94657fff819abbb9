from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from catalogsync.config import (
    ConfigurationError,
    InvalidConfigurationError,
    MissingConfigurationError,
    SyncConfig,
    configure_logging,
    get_catalog_source_config,
    get_data_directory,
    get_database_config,
    get_sync_config,
    require_env_var,
)
from catalogsync.domain.model import OwnerPolicy

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

_SYNC_VARS = (
    "CATALOGSYNC_CONCURRENCY",
    "CATALOGSYNC_TIMEOUT_SECONDS",
    "CATALOGSYNC_INTERVAL_HOURS",
    "CATALOGSYNC_STALE_RUN_MINUTES",
    "CATALOGSYNC_LOOKUP_CACHE_TTL",
    "CATALOGSYNC_OWNER_POLICY",
    "CATALOGSYNC_OWNER_DEVELOPER_ID",
)


@pytest.fixture(autouse=True)
def _clean_sync_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SYNC_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    assert get_sync_config() == SyncConfig()


def test_values_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOGSYNC_CONCURRENCY", "8")
    monkeypatch.setenv("CATALOGSYNC_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("CATALOGSYNC_INTERVAL_HOURS", "12")
    monkeypatch.setenv("CATALOGSYNC_OWNER_POLICY", "FIXED")
    monkeypatch.setenv("CATALOGSYNC_OWNER_DEVELOPER_ID", "dev-9")

    config = get_sync_config()

    assert config.concurrency == 8
    assert config.timeout_seconds is None
    assert config.interval_hours == 12.0
    assert config.owner_policy is OwnerPolicy.FIXED
    assert config.owner_developer_id == "dev-9"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("CATALOGSYNC_CONCURRENCY", "many"),
        ("CATALOGSYNC_CONCURRENCY", "0"),
        ("CATALOGSYNC_TIMEOUT_SECONDS", "-1"),
        ("CATALOGSYNC_OWNER_POLICY", "random"),
    ],
)
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(InvalidConfigurationError, match=name) as excinfo:
        get_sync_config()

    assert excinfo.value.variable == name


def test_fixed_owner_requires_developer_id(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOGSYNC_OWNER_POLICY", "fixed")

    with pytest.raises(ConfigurationError, match="owner developer id"):
        get_sync_config()


def test_source_config_requires_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CATALOG_SOURCE_URL", raising=False)

    with pytest.raises(MissingConfigurationError, match="CATALOG_SOURCE_URL"):
        get_catalog_source_config()


def test_source_config_adds_bearer_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_SOURCE_URL", "https://catalog.example/api/")
    monkeypatch.setenv("CATALOG_SOURCE_TOKEN", "secret")
    monkeypatch.setenv("CATALOG_SOURCE_CACHE", "memory")

    config = get_catalog_source_config()

    assert config.base_url == "https://catalog.example/api"
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Bearer secret"
    assert config.resilience.cache is not None
    assert config.resilience.cache.enabled is True


def test_unknown_source_cache_backend_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_SOURCE_URL", "https://catalog.example/api")
    monkeypatch.setenv("CATALOG_SOURCE_CACHE", "redis")

    with pytest.raises(InvalidConfigurationError, match="CATALOG_SOURCE_CACHE"):
        get_catalog_source_config()


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_data_files_follow_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CATALOGSYNC_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    data_directory = get_data_directory()

    assert data_directory.http_cache() == tmp_path.resolve() / "http_cache.db"
    assert get_database_config().uri == f"sqlite+pysqlite:///{tmp_path.resolve() / 'catalog.db'}"


def test_database_uri_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://catalog@db/catalog")

    assert get_database_config().uri == "postgresql+psycopg://catalog@db/catalog"


def test_default_data_dir_is_per_user(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("CATALOGSYNC_DATA_DIR", raising=False)
    monkeypatch.setattr("sys.platform", "linux")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_data_directory().root == tmp_path.resolve() / "catalogsync"


@pytest.fixture
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        yield
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
        logging.getLogger("httpx").setLevel(logging.NOTSET)


@pytest.mark.parametrize(
    ("verbose", "http_level"),
    [(False, logging.WARNING), (True, logging.NOTSET)],
)
@pytest.mark.usefixtures("restore_logging")
def test_configure_logging_quiets_http_stack(verbose: bool, http_level: int) -> None:
    configure_logging(verbose=verbose, force=True)

    assert logging.getLogger().level == (logging.DEBUG if verbose else logging.INFO)
    assert logging.getLogger("httpx").level == http_level
