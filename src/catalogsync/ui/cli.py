from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogsync.app import (
    recent_sync_runs,
    schedule_catalog_sync,
    sync_catalog_from_source,
    sync_category_tree,
)
from catalogsync.config import ConfigurationError, configure_logging, get_sync_config
from catalogsync.domain.errors import SyncAlreadyRunningError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.reconciliation import CategorySyncResult

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_ALREADY_RUNNING = 3


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return parsed


def _positive_float(value: str) -> float:
    parsed = float(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise the app catalog")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Run one catalog sync")
    sync.add_argument(
        "--source-file",
        type=Path,
        help="Read the catalog from a local JSON export instead of the HTTP source",
    )
    sync.add_argument(
        "--preview",
        action="store_true",
        help="Classify only; write nothing",
    )
    sync.add_argument(
        "--concurrency",
        type=_positive_int,
        help="Number of records applied in parallel (defaults to config)",
    )
    sync.add_argument(
        "--timeout",
        type=_positive_float,
        help="Whole-run time budget in seconds (defaults to config)",
    )

    categories = subparsers.add_parser("categories", help="Sync the category tree")
    categories.add_argument("--url", type=str, help="Category page URL (defaults to config)")
    categories.add_argument(
        "--preview",
        action="store_true",
        help="Report the changes without applying them",
    )

    runs = subparsers.add_parser("runs", help="List recent sync runs")
    runs.add_argument(
        "--limit",
        type=_positive_int,
        default=20,
        help="Number of runs to show (default: %(default)s)",
    )

    schedule = subparsers.add_parser("schedule", help="Sync periodically until interrupted")
    schedule.add_argument(
        "--interval-hours",
        type=_positive_float,
        help="Hours between runs (defaults to config)",
    )
    schedule.add_argument(
        "--no-immediate",
        action="store_true",
        help="Wait one interval before the first run",
    )

    return parser.parse_args(list(argv))


def _run_sync(args: argparse.Namespace) -> int:
    config = get_sync_config()
    if args.concurrency is not None:
        config = replace(config, concurrency=args.concurrency)
    if args.timeout is not None:
        config = replace(config, timeout_seconds=args.timeout)

    result = sync_catalog_from_source(
        source_file=args.source_file,
        config=config,
        preview=args.preview,
    )
    stats = result.stats
    summary = (
        f"added={stats.added} updated={stats.updated} unchanged={stats.unchanged} "
        f"removed={stats.removed}"
    )
    if result.preview:
        log.info("Preview: %s", summary)
    elif stats.errors:
        log.warning("Sync completed with %d errors: %s", stats.errors, summary)
        for failure in result.failures:
            log.warning("  %s %s: %s", failure.bundle_id, failure.reason, failure.detail or "")
    else:
        log.info("Sync completed: %s", summary)
    return EXIT_OK


def _log_category_changes(result: CategorySyncResult) -> None:
    for change in result.changes:
        parent = f" (under {change.parent_name})" if change.parent_name else ""
        log.info("%s %s%s", change.kind, change.name, parent)
    prefix = "Category preview" if result.preview else "Category sync"
    log.info("%s: %s", prefix, result.summary)


def _run_categories(args: argparse.Namespace) -> int:
    result = sync_category_tree(url=args.url, preview=args.preview)
    _log_category_changes(result)
    return EXIT_OK


def _run_runs(args: argparse.Namespace) -> int:
    for run in recent_sync_runs(limit=args.limit):
        ended = f"{run.ended_at:%Y-%m-%d %H:%M:%S}" if run.ended_at else "-"
        log.info(
            "%s %-9s %s -> %s added=%d updated=%d unchanged=%d removed=%d errors=%d%s",
            run.id,
            run.status,
            f"{run.started_at:%Y-%m-%d %H:%M:%S}",
            ended,
            run.added,
            run.updated,
            run.unchanged,
            run.removed,
            run.errors,
            f" error={run.error}" if run.error else "",
        )
    return EXIT_OK


def _run_schedule(args: argparse.Namespace) -> int:
    schedule_catalog_sync(
        interval_hours=args.interval_hours,
        run_immediately=not args.no_immediate,
    )
    return EXIT_OK


_COMMANDS = {
    "sync": _run_sync,
    "categories": _run_categories,
    "runs": _run_runs,
    "schedule": _run_schedule,
}


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)

    try:
        code = _COMMANDS[parsed_args.command](parsed_args)
    except KeyboardInterrupt:
        log.info("Closed by user (Ctrl+C)")
        sys.exit(EXIT_OK if parsed_args.command == "schedule" else EXIT_FAILED)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(EXIT_USAGE)
    except SyncAlreadyRunningError as exc:
        log.error("Sync refused: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_ALREADY_RUNNING)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(EXIT_FAILED)
    if code != EXIT_OK:
        sys.exit(code)


def run() -> None:
    load_dotenv()
    main()


if __name__ == "__main__":
    run()
