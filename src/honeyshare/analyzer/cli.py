"""CLI entry-point for the HoneyShare activity report.

Usage examples
--------------
# Summary of the newest 5000 events in the default database:
honeyshare-report

# Only failed logins, JSONL export included:
honeyshare-report --event-type failedLogin --export out/failed_logins.jsonl
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from honeyshare.analyzer.summary import RECENT_WINDOW, summarize
from honeyshare.contracts.enums import EventType
from honeyshare.shared.logger import setup_logging
from honeyshare.shared.settings import DEFAULT_CONFIG_PATH, ConfigError, load_settings
from honeyshare.simulator.replay import write_jsonl
from honeyshare.store.repository import AuditStore, StoreError


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="honeyshare-report",
        description="HoneyShare report — summarise stored audit events",
    )
    p.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to simulator.yaml (for database_url). Default: config/simulator.yaml",
    )
    p.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL. Overrides $DATABASE_URL and the YAML value.",
    )
    p.add_argument(
        "--limit",
        type=int,
        default=5000,
        help="Analyse at most this many of the newest events. Default: 5000",
    )
    p.add_argument(
        "--event-type",
        choices=[t.value for t in EventType],
        default=None,
        help="Restrict the report to one event type.",
    )
    p.add_argument(
        "--top",
        type=int,
        default=5,
        help="How many origin addresses to list. Default: 5",
    )
    p.add_argument(
        "--export",
        default=None,
        help="Also write the analysed events to this JSONL file.",
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: WARNING",
    )
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        settings = load_settings(args.config, overrides={"database_url": args.database_url})
        store = AuditStore.from_url(settings.database_url)
        events = store.list_events(event_type=args.event_type, limit=args.limit)
        total = store.count_events(event_type=args.event_type)
        now = datetime.now(tz=timezone.utc)
        recent = store.count_since(now - RECENT_WINDOW)
    except (ConfigError, FileNotFoundError, ValueError, StoreError) as exc:
        print(f"report failed: {exc}", file=sys.stderr)
        sys.exit(1)

    summary = summarize(events, now, top_n=args.top)

    print(f"Audit events in store: {total} (analysed newest {summary['total']})")
    print(f"  last 5 minutes: {recent}")
    print(f"  peak per minute: {summary['peak_per_minute']}")
    print(f"  anonymous downloads: {summary['anonymous_download_ratio']:.1%}")
    print("  by type:")
    for name, count in summary["by_type"].items():
        print(f"    {name:<15} {count}")
    print("  top origins:")
    for origin, count in summary["top_origins"].items():
        print(f"    {origin:<15} {count}")

    if args.export:
        write_jsonl(events, Path(args.export))


if __name__ == "__main__":
    main()
