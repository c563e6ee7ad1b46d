"""Командний інтерфейс симулятора аудит-подій HoneyShare.

Usage examples
--------------
# Live mode: generate events until SIGINT/SIGTERM, SIGUSR1 injects an attack
honeyshare-simulator --seed-data

# Replay mode: 10 simulated minutes with attacks at 2 and 6 minutes
honeyshare-simulator --replay-seconds 600 --attack-at 120,360 --seed 42 \
    --database-url sqlite:// --out data/events.csv
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import random as _random_mod
import signal
import sys
from pathlib import Path

from honeyshare.shared.logger import setup_logging
from honeyshare.shared.seed import init_seed
from honeyshare.shared.settings import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    SimulatorSettings,
    load_settings,
)
from honeyshare.simulator.clock import AsyncioClock
from honeyshare.simulator.replay import replay, write_csv, write_jsonl
from honeyshare.simulator.scheduler import AuditSimulator
from honeyshare.simulator.seeding import seed_reference_data
from honeyshare.store.repository import AuditStore, StoreError

log = logging.getLogger(__name__)


def _parse_offsets(raw: str) -> list[float]:
    try:
        return [float(part) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected comma-separated seconds, got {raw!r}") from exc


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="honeyshare-simulator",
        description="Generate synthetic audit events for the HoneyShare honeypot (live or replay).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to simulator.yaml (default: config/simulator.yaml, optional).",
    )
    p.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy database URL. Overrides $DATABASE_URL and the YAML value.",
    )
    p.add_argument(
        "--events-per-second",
        type=float,
        default=None,
        help="Steady-state event rate. Overrides $LOG_EVENTS_PER_SECOND (default 2).",
    )
    p.add_argument(
        "--retention-days",
        type=float,
        default=None,
        help="Delete events older than this. Overrides $LOG_RETENTION_DAYS (default 30).",
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for deterministic output (default: unseeded).",
    )
    # Reference data
    p.add_argument(
        "--seed-data",
        action="store_true",
        default=None,
        help="Wipe and reseed users/files before starting (also $SEED=true).",
    )
    p.add_argument("--seed-users", type=int, default=None, help="Users to seed ($SEED_USERS).")
    p.add_argument("--seed-files", type=int, default=None, help="File links to seed ($SEED_FILES).")
    # Replay mode flags
    p.add_argument(
        "--replay-seconds",
        type=float,
        default=None,
        help="Run offline on simulated time for this many seconds and write the events.",
    )
    p.add_argument(
        "--attack-at",
        type=_parse_offsets,
        default=[],
        help="Replay only: comma-separated offsets (s) at which to inject an attack.",
    )
    p.add_argument(
        "--out",
        type=str,
        default="data/events.csv",
        help="Replay output file (default: data/events.csv).",
    )
    p.add_argument(
        "--format",
        type=str,
        choices=["csv", "jsonl"],
        default="csv",
        help="Replay output format: csv (default) or jsonl.",
    )
    p.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    return p.parse_args(argv)


def _prepare_store(settings: SimulatorSettings, rng: _random_mod.Random) -> AuditStore:
    store = AuditStore.from_url(settings.database_url)
    if settings.seed_on_start:
        seed_reference_data(store, rng, users=settings.seed_users, files=settings.seed_files)
    elif store.user_count() == 0:
        log.warning("No users in %s — login events will be skipped until data is seeded "
                    "(use --seed-data)", settings.database_url)
    return store


def _run_replay(args: argparse.Namespace, settings: SimulatorSettings,
                store: AuditStore, rng: _random_mod.Random) -> None:
    events = replay(
        store,
        duration_sec=args.replay_seconds,
        rng=rng,
        events_per_second=settings.events_per_second,
        retention_days=settings.retention_days,
        attack_offsets=args.attack_at,
    )
    out_path = Path(args.out)
    if args.format == "jsonl":
        if out_path.suffix not in (".jsonl", ".ndjson", ".json"):
            out_path = out_path.with_suffix(".jsonl")
        write_jsonl(events, out_path)
    else:
        if out_path.suffix != ".csv":
            out_path = out_path.with_suffix(".csv")
        write_csv(events, out_path)
    print(f"Simulator replay complete: {len(events)} events -> {out_path}")


def _on_attack_signal(simulator: AuditSimulator) -> None:
    result = simulator.inject_attack()
    level = logging.INFO if result.success else logging.ERROR
    log.log(level, "Attack trigger: %s", result.message)


def _run_live(settings: SimulatorSettings, store: AuditStore, rng: _random_mod.Random) -> None:
    clock = AsyncioClock()
    loop = clock.loop
    simulator = AuditSimulator.from_settings(settings, store, clock, rng)

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, loop.stop)
    sigusr1 = getattr(signal, "SIGUSR1", None)
    if sigusr1 is not None:
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sigusr1, _on_attack_signal, simulator)

    print(f"Simulator live mode -> {settings.database_url}")
    print(f"  rate: {settings.events_per_second:g} events/s, retention: {settings.retention_days:g} days")
    print("  kill -USR1 <pid> injects an attack. Press Ctrl+C to stop.")
    simulator.start()
    try:
        loop.run_forever()
    except KeyboardInterrupt:
        pass
    finally:
        simulator.stop()
        clock.shutdown(wait=True)
        loop.close()
        store.dispose()
    print("\nSimulator stopped.")


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    setup_logging(args.log_level)

    try:
        settings = load_settings(
            config_path=args.config,
            overrides={
                "database_url": args.database_url,
                "events_per_second": args.events_per_second,
                "retention_days": args.retention_days,
                "seed_on_start": args.seed_data,
                "seed_users": args.seed_users,
                "seed_files": args.seed_files,
            },
        )
    except (ConfigError, FileNotFoundError, ValueError) as exc:
        log.error("Invalid configuration: %s", exc)
        sys.exit(2)

    rng = init_seed(args.seed)
    try:
        store = _prepare_store(settings, rng)
    except StoreError as exc:
        log.error("Failed to start simulator: %s", exc)
        sys.exit(1)

    if args.replay_seconds is not None:
        try:
            _run_replay(args, settings, store, rng)
        finally:
            store.dispose()
    else:
        _run_live(settings, store, rng)


if __name__ == "__main__":
    main()
