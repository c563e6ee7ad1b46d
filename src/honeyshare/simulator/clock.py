"""Timer primitives the scheduler and attack injector run on.

``AsyncioClock`` drives live runs: timer callbacks execute on the event loop
thread one at a time, and store I/O goes to a thread pool so it never blocks
the loop. ``ManualClock`` drives replays and tests: time only moves when
``advance`` is called and submitted jobs run inline.
"""

from __future__ import annotations

import abc
import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Any

from honeyshare.contracts.audit_event import utcnow

log = logging.getLogger(__name__)


class Clock(abc.ABC):
    """Wall time, one-shot timers and a place to run blocking jobs."""

    @abc.abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""

    @abc.abstractmethod
    def call_later(self, delay_sec: float, callback: Callable[..., Any], *args: Any) -> Any:
        """Schedule *callback* once; the returned handle has ``cancel()``."""

    @abc.abstractmethod
    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run a blocking job without holding up timer callbacks (fire-and-forget)."""


# ---------------------------------------------------------------------------
# Live clock
# ---------------------------------------------------------------------------

def _report_job_failure(fut: asyncio.Future) -> None:
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        log.error("Background job failed", exc_info=exc)


class AsyncioClock(Clock):
    """Clock backed by an asyncio loop and a small I/O thread pool.

    ``call_later`` and ``submit`` must be called from the loop thread, which
    is where every timer callback runs anyway.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, max_workers: int = 4) -> None:
        self.loop = loop or asyncio.new_event_loop()
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="honeyshare-io")

    def now(self) -> datetime:
        return utcnow()

    def call_later(self, delay_sec: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_sec), callback, *args)

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        fut = self.loop.run_in_executor(self._executor, fn, *args)
        fut.add_done_callback(_report_job_failure)

    def shutdown(self, wait: bool = True) -> None:
        """Let in-flight jobs finish (``wait=True``) and release the pool."""
        self._executor.shutdown(wait=wait)


# ---------------------------------------------------------------------------
# Simulated clock
# ---------------------------------------------------------------------------

class ManualTimer:
    __slots__ = ("when", "callback", "args", "_cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualClock(Clock):
    """Deterministic clock: timers fire in (due time, scheduling order)."""

    def __init__(self, start: datetime | None = None) -> None:
        self.start = start or utcnow()
        self._elapsed = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()
        self.jobs_run = 0

    @property
    def elapsed(self) -> float:
        return self._elapsed

    def now(self) -> datetime:
        return self.start + timedelta(seconds=self._elapsed)

    def call_later(self, delay_sec: float, callback: Callable[..., Any], *args: Any) -> ManualTimer:
        timer = ManualTimer(self._elapsed + max(0.0, delay_sec), callback, args)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self.jobs_run += 1
        fn(*args)

    def pending(self) -> list[ManualTimer]:
        """Live (not cancelled, not yet fired) timers in firing order."""
        return [t for _, _, t in sorted(self._queue) if not t.cancelled()]

    def advance(self, seconds: float) -> int:
        """Move time forward, firing every timer due on the way.

        Timers scheduled by callbacks fire in the same call if they fall due
        before the target time. Returns the number of callbacks run.
        """
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        target = self._elapsed + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled():
                continue
            self._elapsed = when
            timer.callback(*timer.args)
            fired += 1
        self._elapsed = target
        return fired
