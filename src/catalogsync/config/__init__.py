"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .source import CatalogSourceConfig, build_source_resilience, get_catalog_source_config
from .storage import DatabaseConfig, DataDirectory, get_data_directory, get_database_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "CacheConfig",
    "CatalogSourceConfig",
    "ConfigurationError",
    "InvalidConfigurationError",
    "DataDirectory",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "build_source_resilience",
    "configure_logging",
    "get_catalog_source_config",
    "get_data_directory",
    "get_database_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_var",
    "require_env_vars",
]
