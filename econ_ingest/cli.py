"""
Command-line entry point.

Usage:
    econ-ingest sync [--source FRED] [--indicators "GDP,Unemployment Rate"] [--dry-run] [--force]
    econ-ingest status
    econ-ingest init
    econ-ingest trigger [SOURCE]

Exit code is 1 when any indicator failed critically (anything other than
rate limiting or a missing source configuration), 0 otherwise.
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from econ_ingest.core.config import Settings, get_settings
from econ_ingest.core.logging_config import configure_logging
from econ_ingest.core.runtime import SyncRuntime, build_runtime
from econ_ingest.core.sync_orchestrator import SyncResult

logger = logging.getLogger(__name__)


def _print_results(results: List[SyncResult]) -> None:
    for result in results:
        if result.skipped:
            status = "SKIP"
        elif result.success:
            status = "OK"
        else:
            status = "FAIL"
        line = f"  [{status:4}] {result.indicator} ({result.source or '?'}): {result.data_points} points, {result.duration_ms}ms"
        if result.error:
            line += f" - {result.error}"
        print(line)

    failed = sum(1 for r in results if not r.success)
    critical = sum(1 for r in results if r.critical)
    print(
        f"\n{len(results) - failed}/{len(results)} indicators succeeded, "
        f"{failed} failed ({critical} critical)"
    )


async def cmd_sync(runtime: SyncRuntime, args: argparse.Namespace) -> int:
    indicators = None
    if args.indicators:
        indicators = [name.strip() for name in args.indicators.split(",") if name.strip()]

    results = await runtime.orchestrator.sync_batch(
        source=args.source,
        indicators=indicators,
        force=args.force,
        dry_run=args.dry_run,
    )
    if args.dry_run:
        print("Dry run: nothing was written")
    _print_results(results)
    return 1 if any(r.critical for r in results) else 0


async def cmd_status(runtime: SyncRuntime, args: argparse.Namespace) -> int:
    status = {
        "available_sources": runtime.factory.available_sources(),
        "unavailable_sources": runtime.factory.unavailable_sources(),
        "indicators": runtime.orchestrator.get_last_sync_status(),
    }
    print(json.dumps(status, indent=2))
    return 0


async def cmd_init(runtime: SyncRuntime, args: argparse.Namespace) -> int:
    counts = runtime.orchestrator.initialize_indicators()
    print(f"Indicators: {counts['created']} created, {counts['updated']} updated")
    return 0


async def cmd_trigger(runtime: SyncRuntime, args: argparse.Namespace) -> int:
    outcome = await runtime.scheduler.trigger_sync(args.source)
    if outcome["results"]:
        _print_results(outcome["results"])
    if outcome["error"]:
        print(f"Error: {outcome['error']}")
    elif outcome["output"]:
        print(outcome["output"])
    return 0 if outcome["success"] else 1


COMMANDS = {
    "sync": cmd_sync,
    "status": cmd_status,
    "init": cmd_init,
    "trigger": cmd_trigger,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="econ-ingest",
        description="Sync economic indicators from public data providers"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Sync indicators now")
    sync.add_argument(
        "--source", type=str, default=None,
        help="Only sync indicators of this source (e.g. FRED, bls, world-bank)"
    )
    sync.add_argument(
        "--indicators", type=str, default=None,
        help="Comma-separated indicator names"
    )
    sync.add_argument(
        "--dry-run", action="store_true",
        help="Fetch without writing to the database"
    )
    sync.add_argument(
        "--force", action="store_true",
        help="Ignore the freshness window and refetch everything"
    )

    subparsers.add_parser("status", help="Show per-indicator sync status")
    subparsers.add_parser("init", help="Seed the indicator catalog into the database")

    trigger = subparsers.add_parser("trigger", help="Run a scheduler job once")
    trigger.add_argument(
        "source", nargs="?", default=None,
        help="Source to sync (omit for a full sync)"
    )
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    runtime = await build_runtime(settings, seed_indicators=args.command != "init")
    try:
        return await COMMANDS[args.command](runtime, args)
    finally:
        await runtime.close()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(logging.DEBUG if args.verbose else settings.log_level)

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
