"""Attack injection: a time-compressed download burst from one spoofed origin.

Every file link is "downloaded" once by the same anonymous attacker (one IP,
one user agent), spaced evenly so the burst spans a fixed wall-clock window.
The caller gets an answer immediately; the writes land while the burst runs.
"""

from __future__ import annotations

import logging
import random as _random_mod
from dataclasses import dataclass, field
from typing import Any

from honeyshare.contracts.audit_event import AuditEvent
from honeyshare.contracts.enums import EventType
from honeyshare.contracts.reference import FileLink
from honeyshare.simulator.clock import Clock
from honeyshare.simulator.generators import random_ip, user_agent
from honeyshare.simulator.reference import ReferenceDataAccessor
from honeyshare.store.repository import AuditStore, StoreError

log = logging.getLogger(__name__)

ATTACK_WINDOW_SEC = 50.0
ATTACK_DETAIL = "File downloaded successfully - ATTACK SIMULATION"


@dataclass
class AttackBurst:
    """Timers of one injection; cancelling stops the writes not yet fired."""

    origin_address: str
    client_signature: str
    file_count: int
    window_sec: float
    delays: list[float] = field(default_factory=list)
    handles: list[Any] = field(default_factory=list)
    fired: int = 0
    cancelled: bool = False

    @property
    def spacing_sec(self) -> float:
        return self.window_sec / self.file_count

    @property
    def done(self) -> bool:
        return self.cancelled or self.fired >= self.file_count

    def cancel(self) -> int:
        """Cancel every pending write; returns how many were still pending."""
        if self.done:
            return 0
        pending = self.file_count - self.fired
        for handle in self.handles:
            handle.cancel()
        self.cancelled = True
        log.info("Attack burst from %s cancelled (%d writes dropped)",
                 self.origin_address, pending)
        return pending


@dataclass(slots=True)
class AttackResult:
    success: bool
    message: str
    burst: AttackBurst | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}


class AttackInjector:
    """Schedules download bursts; overlapping bursts are independent."""

    def __init__(
        self,
        store: AuditStore,
        clock: Clock,
        rng: _random_mod.Random,
        window_sec: float = ATTACK_WINDOW_SEC,
    ) -> None:
        self.store = store
        self.clock = clock
        self.rng = rng
        self.window_sec = window_sec
        self.reference = ReferenceDataAccessor(store)
        self._bursts: list[AttackBurst] = []

    def active_bursts(self) -> list[AttackBurst]:
        return [b for b in self._bursts if not b.done]

    def inject(self) -> AttackResult:
        log.info("Starting attack injection - downloading all files from a single IP over %.0f seconds",
                 self.window_sec)
        # file list is read inline on the calling thread; only the burst writes are offloaded
        try:
            files = self.reference.all_files()
        except StoreError:
            log.exception("Error injecting attack")
            return AttackResult(success=False, message="Failed to inject attack")

        if not files:
            log.info("Attack injection skipped: no file links to target")
            return AttackResult(success=True, message="No files to attack - nothing scheduled")

        burst = AttackBurst(
            origin_address=random_ip(self.rng),
            client_signature=user_agent(self.rng),
            file_count=len(files),
            window_sec=self.window_sec,
        )
        spacing = burst.spacing_sec
        for index, link in enumerate(files):
            delay = index * spacing
            burst.delays.append(delay)
            burst.handles.append(self.clock.call_later(delay, self._fire, burst, index, link))
        self._bursts.append(burst)

        return AttackResult(
            success=True,
            message=(
                f"Attack injection started - {burst.file_count} downloads from "
                f"{burst.origin_address} over {self.window_sec:.0f} seconds"
            ),
            burst=burst,
        )

    def cancel_all(self) -> int:
        dropped = sum(b.cancel() for b in self._bursts)
        self._bursts.clear()
        return dropped

    # runs on the timer thread
    def _fire(self, burst: AttackBurst, index: int, link: FileLink) -> None:
        burst.fired += 1
        if burst.done and burst in self._bursts:
            self._bursts.remove(burst)
        self.clock.submit(self._write, burst, index, link)

    # runs on the I/O executor
    def _write(self, burst: AttackBurst, index: int, link: FileLink) -> None:
        event = AuditEvent(
            event_type=EventType.DOWNLOAD,
            actor_id=None,
            target_id=link.id,
            origin_address=burst.origin_address,
            client_signature=burst.client_signature,
            detail=ATTACK_DETAIL,
            timestamp=self.clock.now(),
        )
        try:
            self.store.create_event(event)
        except StoreError:
            log.exception("Attack write %d/%d failed", index + 1, burst.file_count)
            return
        if index == burst.file_count - 1:
            log.info("Attack injection completed - %d downloads from %s",
                     burst.file_count, burst.origin_address)
