"""Tests for honeyshare.simulator.attack — download bursts from one origin."""

from __future__ import annotations

import logging
import random

import pytest

from honeyshare.contracts.enums import EventType
from honeyshare.simulator.attack import ATTACK_DETAIL, ATTACK_WINDOW_SEC, AttackInjector
from honeyshare.simulator.generators import USER_AGENTS, ip_in_allowed_ranges
from honeyshare.store.repository import AuditStore, StoreError
from tests.conftest import seed_store, ts_offset


class UnreadableStore(AuditStore):
    def all_files(self):
        raise StoreError("no such table: file_sharing_links")


class CountingReads(AuditStore):
    def __init__(self, engine) -> None:
        super().__init__(engine)
        self.reads = 0

    def all_files(self):
        self.reads += 1
        return super().all_files()


class FirstWriteFails(AuditStore):
    def __init__(self, engine) -> None:
        super().__init__(engine)
        self.attempts = 0

    def create_event(self, event):
        self.attempts += 1
        if self.attempts == 1:
            raise StoreError("disk I/O error")
        return super().create_event(event)


@pytest.fixture
def injector(seeded_store, clock):
    return AttackInjector(seeded_store, clock, random.Random(3))


# ═══════════════════════════════════════════════════════════════════════════
#  Scheduling
# ═══════════════════════════════════════════════════════════════════════════


class TestInject:
    def test_immediate_result_describes_burst(self, injector, clock):
        result = injector.inject()
        assert result.success
        assert result.message == (
            f"Attack injection started - 5 downloads from {result.burst.origin_address} "
            "over 50 seconds"
        )
        assert result.to_dict() == {"success": True, "message": result.message}
        # nothing written until the clock moves
        assert injector.store.count_events() == 0
        assert len(clock.pending()) == 5

    def test_even_spacing_across_window(self, injector):
        burst = injector.inject().burst
        assert burst.delays == [0.0, 10.0, 20.0, 30.0, 40.0]
        assert burst.delays[-1] == pytest.approx((5 - 1) / 5 * ATTACK_WINDOW_SEC)

    def test_one_download_per_file_from_one_origin(self, injector, clock, seeded_store):
        burst = injector.inject().burst
        clock.advance(ATTACK_WINDOW_SEC)

        events = seeded_store.list_events(limit=None, newest_first=False)
        assert len(events) == 5
        assert {ev.target_id for ev in events} == {f.id for f in seeded_store.all_files()}
        assert [ev.target_id for ev in events] == [f.id for f in seeded_store.all_files()]
        assert {ev.origin_address for ev in events} == {burst.origin_address}
        assert {ev.client_signature for ev in events} == {burst.client_signature}
        for ev in events:
            assert ev.event_type is EventType.DOWNLOAD
            assert ev.actor_id is None
            assert ev.detail == ATTACK_DETAIL
        assert [ev.timestamp for ev in events] == [ts_offset(s) for s in burst.delays]
        assert burst.done
        assert injector.active_bursts() == []

    def test_origin_and_signature_from_pools(self, injector):
        burst = injector.inject().burst
        assert ip_in_allowed_ranges(burst.origin_address)
        assert burst.client_signature in USER_AGENTS

    def test_spacing_shrinks_with_more_files(self, store, clock):
        seed_store(store, users=2, files=100)
        burst = AttackInjector(store, clock, random.Random(4)).inject().burst
        assert burst.spacing_sec == pytest.approx(0.5)
        assert burst.delays[-1] == pytest.approx(49.5)

    def test_completion_logged_once(self, injector, clock, caplog):
        injector.inject()
        with caplog.at_level(logging.INFO, logger="honeyshare.simulator.attack"):
            clock.advance(ATTACK_WINDOW_SEC)
        done = [r for r in caplog.records if "Attack injection completed" in r.getMessage()]
        assert len(done) == 1


class TestNoTargets:
    def test_zero_files_is_a_noop(self, store, clock):
        injector = AttackInjector(store, clock, random.Random(5))
        result = injector.inject()
        assert result.success
        assert result.burst is None
        assert "No files" in result.message
        assert clock.pending() == []

    def test_unreadable_files_reports_failure(self, clock):
        base = AuditStore.from_url("sqlite://")
        injector = AttackInjector(UnreadableStore(base.engine), clock, random.Random(6))
        result = injector.inject()
        assert result.success is False
        assert result.message == "Failed to inject attack"
        assert clock.pending() == []
        base.dispose()

    def test_file_list_read_once_at_inject(self, clock):
        base = AuditStore.from_url("sqlite://")
        seed_store(base, users=1, files=3)
        store = CountingReads(base.engine)
        injector = AttackInjector(store, clock, random.Random(8))
        injector.inject()
        assert store.reads == 1
        clock.advance(ATTACK_WINDOW_SEC)
        assert store.reads == 1
        assert store.count_events() == 3
        base.dispose()


# ═══════════════════════════════════════════════════════════════════════════
#  Concurrency between bursts, cancellation, write failures
# ═══════════════════════════════════════════════════════════════════════════


class TestBurstControl:
    def test_overlapping_bursts_are_independent(self, injector, clock, seeded_store):
        first = injector.inject().burst
        clock.advance(15)
        second = injector.inject().burst
        assert len(injector.active_bursts()) == 2
        clock.advance(ATTACK_WINDOW_SEC)

        assert seeded_store.count_events() == 10
        for burst in (first, second):
            assert burst.fired == 5
        assert injector.active_bursts() == []

    def test_cancel_drops_pending_writes(self, injector, clock, seeded_store):
        burst = injector.inject().burst
        clock.advance(15)
        assert burst.fired == 2
        assert burst.cancel() == 3
        assert burst.done
        clock.advance(ATTACK_WINDOW_SEC)
        assert seeded_store.count_events() == 2
        assert burst.cancel() == 0

    def test_cancel_all(self, injector, clock, seeded_store):
        injector.inject()
        injector.inject()
        assert injector.cancel_all() == 10
        clock.advance(ATTACK_WINDOW_SEC)
        assert seeded_store.count_events() == 0
        assert injector.active_bursts() == []

    def test_failed_write_does_not_abort_burst(self, clock, caplog):
        base = AuditStore.from_url("sqlite://")
        store = FirstWriteFails(base.engine)
        seed_store(store, users=3, files=4)
        injector = AttackInjector(store, clock, random.Random(7))
        injector.inject()
        with caplog.at_level(logging.ERROR):
            clock.advance(ATTACK_WINDOW_SEC)
        assert store.attempts == 4
        assert store.count_events() == 3
        assert "Attack write 1/4 failed" in caplog.text
        base.dispose()
