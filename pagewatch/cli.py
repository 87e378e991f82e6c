"""
Command-line entry point (`pagewatch`).

Runs one watch pass by default. With --interval the process becomes its own
scheduler and repeats the pass every N minutes until interrupted.
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Callable
from pathlib import Path

from pagewatch import __version__
from pagewatch.infrastructure.errors import ConfigError, WatchError
from pagewatch.infrastructure.settings import WatchSettings, load_settings
from pagewatch.notify.webhook import ConsoleNotifier
from pagewatch.observability.logging import get_logger
from pagewatch.observability.telemetry import get_latency_stats
from pagewatch.watch.orchestrator import RunResult, WatchRun

logger = get_logger(__name__)


def run_once(settings: WatchSettings, dry_run: bool = False, parallel: bool = False) -> RunResult:
    """Build a WatchRun from settings and execute a single pass."""
    notifier = ConsoleNotifier() if dry_run else None
    return WatchRun.from_settings(settings, notifier=notifier, parallel=parallel).run()


def run_forever(
    settings: WatchSettings,
    interval_minutes: int,
    dry_run: bool = False,
    parallel: bool = False,
    sleep_fn: Callable[[float], None] = time.sleep,
    max_runs: int | None = None,
) -> int:
    """
    Repeat run_once every interval_minutes. A failed pass is logged and the loop continues.

    Returns:
        Number of passes that reached Done
    """
    completed = 0
    runs = 0
    while max_runs is None or runs < max_runs:
        runs += 1
        try:
            run_once(settings, dry_run=dry_run, parallel=parallel)
            completed += 1
        except WatchError as e:
            logger.error("Watch pass failed: %s", e)
        if max_runs is not None and runs >= max_runs:
            break
        sleep_fn(interval_minutes * 60)
    return completed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Notify a webhook about pages created or updated in the watch window"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        metavar="MINUTES",
        help="Run repeatedly every MINUTES instead of once",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log notification payloads instead of posting them",
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Send per-author notifications concurrently",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file (default: nearest .env above the package)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1

    if args.interval is not None:
        if args.interval <= 0:
            logger.error("--interval must be positive")
            return 1
        try:
            run_forever(settings, args.interval, dry_run=args.dry_run, parallel=args.parallel)
        except KeyboardInterrupt:
            logger.info("Stopped")
        return 0

    try:
        result = run_once(settings, dry_run=args.dry_run, parallel=args.parallel)
    except WatchError as e:
        logger.error("Watch pass failed: %s", e)
        return 1

    logger.info(
        "Run %s in %.2fs: %d notifications sent, %d failed",
        result.state.value,
        get_latency_stats("run.total")["max"],
        result.notifications_sent,
        len(result.failed_authors),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
