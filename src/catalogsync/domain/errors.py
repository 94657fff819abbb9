"""Error taxonomy for catalog synchronisation.

Source and baseline-store errors are fatal to a run. Per-record problems are
never raised across the record boundary; they surface as ``Failed`` results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.model.sync_run import SyncStats


class CatalogSyncError(RuntimeError):
    """Base class for all catalog sync errors."""


class SourceError(CatalogSyncError):
    """The external catalog could not be read."""


class SourceUnavailableError(SourceError):
    """The external source could not be reached or refused the request."""


class SourceFormatError(SourceError):
    """The external source answered with data that cannot be normalised."""


class StoreError(CatalogSyncError):
    """The catalog store failed."""


class StoreUnavailableError(StoreError):
    """The catalog store could not be read."""


class StoreWriteError(StoreError):
    """A write against the catalog store failed."""


class SyncAlreadyRunningError(CatalogSyncError):
    """Another sync run is still marked as running."""


class SyncTimeoutError(CatalogSyncError):
    """The run exceeded its time budget."""

    def __init__(self, message: str, *, stats: SyncStats | None = None) -> None:
        super().__init__(message)
        self.stats = stats


class InvalidRunTransitionError(CatalogSyncError):
    """A sync run was moved out of a terminal state."""
