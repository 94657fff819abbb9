"""Locations of the local catalog database and HTTP cache."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "catalogsync"
CATALOG_DB_FILENAME: Final[str] = "catalog.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class DataDirectory:
    """Resolved directory holding catalogsync's files; created on first use."""

    root: Path

    def _file(self, filename: str) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root / filename

    def catalog_database(self) -> Path:
        return self._file(CATALOG_DB_FILENAME)

    def http_cache(self) -> Path:
        return self._file(HTTP_CACHE_FILENAME)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_root() -> Path:
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    return Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"


def get_data_directory() -> DataDirectory:
    configured = optional_env_var("CATALOGSYNC_DATA_DIR")
    root = Path(configured) if configured else _platform_data_root() / APP_DIR_NAME
    return DataDirectory(root=root.expanduser().resolve())


def get_database_config(*, data_directory: DataDirectory | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file inside the data directory."""

    uri = optional_env_var("DATABASE_URI")
    if uri is not None:
        return DatabaseConfig(uri=uri)
    directory = data_directory or get_data_directory()
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{directory.catalog_database()}")
