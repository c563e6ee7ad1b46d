"""Offline replay: run the scheduler on simulated time and dump the events."""

from __future__ import annotations

import logging
import math
import random as _random_mod
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from honeyshare.contracts.audit_event import AuditEvent
from honeyshare.simulator.clock import ManualClock
from honeyshare.simulator.scheduler import AuditSimulator
from honeyshare.store.repository import AuditStore

log = logging.getLogger(__name__)


def replay(
    store: AuditStore,
    duration_sec: float,
    rng: _random_mod.Random,
    events_per_second: float = 2.0,
    retention_days: float = 30.0,
    start: datetime | None = None,
    attack_offsets: Iterable[float] = (),
) -> list[AuditEvent]:
    """Simulate *duration_sec* seconds and return the events, oldest first.

    ``attack_offsets`` are seconds from the start at which an attack is
    injected; offsets outside ``[0, duration_sec]`` are ignored. Bursts still
    running at the end are cut off by the stop.
    """
    if not math.isfinite(duration_sec) or duration_sec <= 0:
        raise ValueError(f"duration_sec must be finite and > 0, got {duration_sec}")
    clock = ManualClock(start)
    simulator = AuditSimulator(
        store,
        clock,
        rng=rng,
        events_per_second=events_per_second,
        retention_days=retention_days,
    )

    simulator.start()
    for offset in sorted(o for o in attack_offsets if 0 <= o <= duration_sec):
        clock.advance(offset - clock.elapsed)
        result = simulator.inject_attack()
        log.info("Replay t=%.0fs: %s", offset, result.message)
    clock.advance(duration_sec - clock.elapsed)
    simulator.stop()
    simulator.injector.cancel_all()

    events = store.list_events(start=clock.start, limit=None, newest_first=False)
    log.info("Replay complete: %d events over %.0fs simulated", len(events), duration_sec)
    return events


# ------------------------------------------------------------------
# Writers
# ------------------------------------------------------------------


def write_csv(events: list[AuditEvent], path: Path) -> None:
    """Write events to a CSV file with header."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(AuditEvent.csv_header() + "\n")
        for ev in events:
            fh.write(ev.to_csv_row() + "\n")
    log.info("Wrote %d events to %s", len(events), path)


def write_jsonl(events: list[AuditEvent], path: Path) -> None:
    """Write events to a JSONL file (one JSON per line)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        for ev in events:
            fh.write(ev.to_json() + "\n")
    log.info("Wrote %d events to %s", len(events), path)
