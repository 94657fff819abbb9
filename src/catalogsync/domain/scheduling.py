"""Periodic trigger for catalog syncs.

The scheduler does not prevent overlap; the run log refuses a second
concurrent run.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from logging import getLogger

from catalogsync.domain.errors import SyncAlreadyRunningError

log = getLogger(__name__)


def run_periodically(
    job: Callable[[], object],
    *,
    interval: float,
    stop_event: threading.Event | None = None,
    run_immediately: bool = True,
    max_iterations: int | None = None,
) -> int:
    """Call ``job`` every ``interval`` seconds until ``stop_event`` is set.

    A failing iteration is logged and the loop carries on. Returns the number
    of iterations that ran.
    """

    if interval <= 0:
        raise ValueError("interval must be positive")
    stop = stop_event or threading.Event()

    if not run_immediately and stop.wait(interval):
        return 0

    iterations = 0
    while not stop.is_set():
        try:
            job()
        except SyncAlreadyRunningError as exc:
            log.warning("Skipping scheduled sync: %s", exc)
        except Exception:
            log.exception("Scheduled sync failed; next attempt in %.0f seconds", interval)
        iterations += 1
        if max_iterations is not None and iterations >= max_iterations:
            break
        if stop.wait(interval):
            break
    return iterations
