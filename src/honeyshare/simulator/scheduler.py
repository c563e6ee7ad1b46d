"""AuditSimulator — owns every timer and the shared spike flag.

Three loops run independently once ``start()`` is called:

* steady generation — one event attempt every ``1 / events_per_second`` s;
* spike cycle — quiet for 60–360 s, then 15–45 s of failure-only traffic,
  repeating for the life of the process;
* retention cleanup — first sweep 10 s after start, then hourly.

All timer callbacks run on the clock's timer thread, which is the only place
the spike flag is written or read. Store I/O is handed to ``clock.submit``
with the spike value captured at tick time.
"""

from __future__ import annotations

import logging
import math
import random as _random_mod
from datetime import timedelta
from typing import Any

from honeyshare.contracts.audit_event import AuditEvent
from honeyshare.shared.settings import SimulatorSettings
from honeyshare.simulator.attack import AttackInjector, AttackResult
from honeyshare.simulator.clock import Clock
from honeyshare.simulator.generators import describe_pools
from honeyshare.simulator.reference import ReferenceDataAccessor
from honeyshare.simulator.synthesizer import DEFAULT_MIX, EventMix, EventSynthesizer
from honeyshare.store.repository import AuditStore, StoreError

log = logging.getLogger(__name__)

SPIKE_DELAY_RANGE_SEC = (60.0, 360.0)
SPIKE_DURATION_RANGE_SEC = (15.0, 45.0)
CLEANUP_STARTUP_DELAY_SEC = 10.0
CLEANUP_INTERVAL_SEC = 3600.0


class AuditSimulator:
    def __init__(
        self,
        store: AuditStore,
        clock: Clock,
        rng: _random_mod.Random | None = None,
        events_per_second: float = 2.0,
        retention_days: float = 30.0,
        mix: EventMix = DEFAULT_MIX,
    ) -> None:
        if not math.isfinite(events_per_second) or events_per_second <= 0:
            raise ValueError(f"events_per_second must be finite and > 0, got {events_per_second}")
        if not math.isfinite(retention_days) or retention_days <= 0:
            raise ValueError(f"retention_days must be finite and > 0, got {retention_days}")

        self.store = store
        self.clock = clock
        self.rng = rng or _random_mod.Random()
        self.events_per_second = events_per_second
        self.interval_sec = 1.0 / events_per_second
        self.retention_days = retention_days

        self.reference = ReferenceDataAccessor(store)
        self.synthesizer = EventSynthesizer(self.rng, mix)
        self.injector = AttackInjector(store, clock, self.rng)

        # mutable scheduling state
        self.spike = False
        self._running = False
        self._tick_handle: Any = None
        self._spike_handle: Any = None
        self._cleanup_handle: Any = None

    @classmethod
    def from_settings(
        cls,
        settings: SimulatorSettings,
        store: AuditStore,
        clock: Clock,
        rng: _random_mod.Random | None = None,
    ) -> AuditSimulator:
        return cls(
            store,
            clock,
            rng=rng,
            events_per_second=settings.events_per_second,
            retention_days=settings.retention_days,
        )

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._running:
            log.warning("Audit simulator already running, start() ignored")
            return
        self._running = True
        log.info("Starting audit simulator: %g events/second, retention %g days",
                 self.events_per_second, self.retention_days)
        log.debug("Generator pools: %s", describe_pools())

        self._tick_handle = self.clock.call_later(self.interval_sec, self._tick)
        self._schedule_next_spike()
        self._cleanup_handle = self.clock.call_later(CLEANUP_STARTUP_DELAY_SEC, self._cleanup_tick)

    def stop(self) -> None:
        """Cancel every simulator timer. Writes already submitted still complete."""
        for name in ("_tick_handle", "_spike_handle", "_cleanup_handle"):
            handle = getattr(self, name)
            if handle is not None:
                handle.cancel()
                setattr(self, name, None)
        if self._running:
            log.info("Audit simulator stopped")
        self._running = False
        self.spike = False

    def inject_attack(self) -> AttackResult:
        return self.injector.inject()

    # ------------------------------------------------------------------
    # Steady generation
    # ------------------------------------------------------------------

    def _tick(self) -> None:
        self._tick_handle = self.clock.call_later(self.interval_sec, self._tick)
        self.clock.submit(self.generate_event, self.spike)

    def generate_event(self, spike: bool) -> AuditEvent | None:
        """Synthesize and persist one event; store failures are logged and swallowed."""
        try:
            users = self.reference.recent_users()
            files = self.reference.recent_files()
            event = self.synthesizer.synthesize(spike, users, files, now=self.clock.now())
            if event is None:
                return None
            self.store.create_event(event)
        except StoreError:
            log.exception("Error generating audit event")
            return None
        return event

    # ------------------------------------------------------------------
    # Spike cycle
    # ------------------------------------------------------------------

    def _schedule_next_spike(self) -> None:
        delay = self.rng.uniform(*SPIKE_DELAY_RANGE_SEC)
        log.debug("Next spike in %.0fs", delay)
        self._spike_handle = self.clock.call_later(delay, self._start_spike)

    def _start_spike(self) -> None:
        self.spike = True
        duration = self.rng.uniform(*SPIKE_DURATION_RANGE_SEC)
        log.info("Starting audit log spike: failures only for %.0fs", duration)
        self._spike_handle = self.clock.call_later(duration, self._end_spike)

    def _end_spike(self) -> None:
        self.spike = False
        log.info("Spike ended, returning to normal rate")
        self._schedule_next_spike()

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def _cleanup_tick(self) -> None:
        self._cleanup_handle = self.clock.call_later(CLEANUP_INTERVAL_SEC, self._cleanup_tick)
        self.clock.submit(self.cleanup_old_events)

    def cleanup_old_events(self) -> int:
        """Delete events older than the retention horizon; returns the count."""
        cutoff = self.clock.now() - timedelta(days=self.retention_days)
        try:
            deleted = self.store.delete_events_before(cutoff)
        except StoreError:
            log.exception("Error cleaning up old logs")
            return 0
        if deleted > 0:
            log.info("Cleaned up %d old audit logs (older than %g days)",
                     deleted, self.retention_days)
        return deleted
