"""Logging setup for the catalogsync CLI and scheduler."""

from __future__ import annotations

import logging

# Per-request chatter from the HTTP stack and migration runner.
NOISY_LOGGERS = ("httpx", "httpcore", "hishel", "alembic.runtime.migration")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Configure the root logger for terminal and cron output.

    ``verbose`` switches to DEBUG and lets the HTTP and migration loggers
    through; otherwise they are held at WARNING.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if verbose else logging.WARNING)
