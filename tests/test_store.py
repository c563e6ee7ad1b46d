"""Tests for honeyshare.store — AuditStore over in-memory SQLite."""

from __future__ import annotations

from datetime import timedelta

import pytest

from honeyshare.contracts.enums import EventType, SharingLevel
from honeyshare.contracts.reference import GlobalSettings
from honeyshare.simulator.reference import REFERENCE_WINDOW, ReferenceDataAccessor
from honeyshare.store.repository import AuditStore, StoreError
from tests.conftest import BASE_TIME, make_event, make_user, seed_store, ts_offset

# ═══════════════════════════════════════════════════════════════════════════
#  Audit events
# ═══════════════════════════════════════════════════════════════════════════


class TestEvents:
    def test_create_and_read_back(self, store):
        ev = make_event(event_type=EventType.LOGIN, actor_id="u1", detail="Successful login")
        store.create_event(ev)
        (back,) = store.list_events()
        assert back == ev
        assert back.timestamp.tzinfo is not None

    def test_newest_first_by_default(self, store):
        for s in (5, 1, 3):
            store.create_event(make_event(timestamp=ts_offset(s)))
        stamps = [e.timestamp for e in store.list_events()]
        assert stamps == [ts_offset(5), ts_offset(3), ts_offset(1)]
        oldest_first = [e.timestamp for e in store.list_events(newest_first=False)]
        assert oldest_first == list(reversed(stamps))

    def test_filters(self, store):
        store.create_event(make_event(event_type=EventType.LOGIN, actor_id="u1"))
        store.create_event(make_event(event_type=EventType.DOWNLOAD, target_id="f1"))
        store.create_event(make_event(event_type=EventType.DOWNLOAD, target_id="f2",
                                      timestamp=ts_offset(60)))

        assert len(store.list_events(event_type=EventType.DOWNLOAD)) == 2
        assert len(store.list_events(event_type="login")) == 1
        assert [e.actor_id for e in store.list_events(actor_id="u1")] == ["u1"]
        assert [e.target_id for e in store.list_events(target_id="f2")] == ["f2"]
        assert len(store.list_events(start=ts_offset(30))) == 1
        assert len(store.list_events(end=ts_offset(30))) == 2

    def test_unknown_event_type_filter_rejected(self, store):
        with pytest.raises(ValueError):
            store.list_events(event_type="logout")

    def test_pagination(self, store):
        for s in range(10):
            store.create_event(make_event(timestamp=ts_offset(s)))
        page = store.list_events(limit=3, offset=3)
        assert [e.timestamp for e in page] == [ts_offset(6), ts_offset(5), ts_offset(4)]
        assert len(store.list_events(limit=None)) == 10

    def test_counts(self, store):
        for s in range(4):
            store.create_event(make_event(timestamp=ts_offset(s * 60)))
        assert store.count_events() == 4
        assert store.count_events(event_type=EventType.LOGIN) == 0
        assert store.count_since(ts_offset(120)) == 2

    def test_delete_before_is_strict(self, store):
        store.create_event(make_event(timestamp=ts_offset(-1)))
        store.create_event(make_event(timestamp=ts_offset(0)))
        store.create_event(make_event(timestamp=ts_offset(1)))
        assert store.delete_events_before(BASE_TIME) == 1
        assert [e.timestamp for e in store.list_events(newest_first=False)] == [
            ts_offset(0),
            ts_offset(1),
        ]

    def test_delete_nothing_returns_zero(self, store):
        assert store.delete_events_before(BASE_TIME) == 0

    def test_duplicate_id_raises_store_error(self, store):
        ev = make_event()
        store.create_event(ev)
        with pytest.raises(StoreError):
            store.create_event(ev)
        assert store.count_events() == 1


# ═══════════════════════════════════════════════════════════════════════════
#  Reference data
# ═══════════════════════════════════════════════════════════════════════════


class TestReferenceData:
    def test_recent_users_newest_first(self, store):
        users, _ = seed_store(store, users=12, files=0)
        recent = store.recent_users(10)
        assert len(recent) == 10
        assert [u.id for u in recent] == [u.id for u in reversed(users)][:10]

    def test_recent_and_all_files_ordering(self, store):
        _, files = seed_store(store, users=2, files=4)
        assert [f.id for f in store.recent_files(2)] == [files[3].id, files[2].id]
        assert [f.id for f in store.all_files()] == [f.id for f in files]

    def test_reference_round_trip_fields(self, store):
        user = store.add_user(make_user(first_name="Grace", last_name="Hopper"))
        (back,) = store.recent_users(1)
        assert back == user
        assert back.full_name == "Grace Hopper"

    def test_duplicate_email_raises(self, store):
        store.add_user(make_user(email="dup@exampleapp.com"))
        with pytest.raises(StoreError):
            store.add_user(make_user(email="dup@exampleapp.com"))
        assert store.user_count() == 1

    def test_empty_store(self, store):
        assert store.recent_users(10) == []
        assert store.recent_files(10) == []
        assert store.all_files() == []
        assert store.get_global_settings() is None

    def test_global_settings_replaced(self, store):
        store.save_global_settings(
            GlobalSettings(allowed_ip_ranges=["14.0.0.1/16"], force_idp_login=False,
                           sharing_level=SharingLevel.FORCE_PASSWORDS)
        )
        store.save_global_settings(
            GlobalSettings(
                allowed_ip_ranges=["27.1.2.3/20", "58.6.0.9/18"],
                force_idp_login=True,
                sharing_level=SharingLevel.ALLOW_PASSWORDS,
                created_at=BASE_TIME,
            )
        )
        got = store.get_global_settings()
        assert got.allowed_ip_ranges == ["27.1.2.3/20", "58.6.0.9/18"]
        assert got.force_idp_login is True
        assert got.sharing_level is SharingLevel.ALLOW_PASSWORDS
        assert got.created_at == BASE_TIME

    def test_clear_keeps_one_email(self, store):
        keep = store.add_user(make_user(email="admin@exampleapp.com",
                                        created_at=BASE_TIME - timedelta(days=1)))
        seed_store(store, users=3, files=2)
        store.create_event(make_event())
        removed = store.clear(keep_email="admin@exampleapp.com")
        assert removed == {"events": 1, "files": 2, "users": 3}
        assert [u.id for u in store.recent_users(10)] == [keep.id]
        assert store.file_count() == 0


class TestOpen:
    def test_unknown_dialect_wrapped(self):
        with pytest.raises(StoreError, match="cannot open database"):
            AuditStore.from_url("nosuchdialect://nowhere")

    def test_file_database_creates_parent_dir(self, tmp_path):
        db = tmp_path / "nested" / "dir" / "audit.db"
        store = AuditStore.from_url(f"sqlite:///{db}")
        try:
            store.create_event(make_event())
            assert db.exists()
            assert store.count_events() == 1
        finally:
            store.dispose()


# ═══════════════════════════════════════════════════════════════════════════
#  Bounded reference window
# ═══════════════════════════════════════════════════════════════════════════


class TestReferenceDataAccessor:
    def test_window_caps_requests(self, store):
        seed_store(store, users=15, files=15)
        ref = ReferenceDataAccessor(store)
        assert len(ref.recent_users()) == REFERENCE_WINDOW
        assert len(ref.recent_files(50)) == REFERENCE_WINDOW
        assert len(ref.recent_users(3)) == 3
        assert len(ref.all_files()) == 15

    def test_fewer_than_window(self, seeded_store):
        ref = ReferenceDataAccessor(seeded_store, window=20)
        assert len(ref.recent_files()) == 5

    def test_invalid_window(self, store):
        with pytest.raises(ValueError):
            ReferenceDataAccessor(store, window=0)

    def test_zero_limit_returns_nothing(self, store):
        seed_store(store, users=3, files=3)
        ref = ReferenceDataAccessor(store)
        assert ref.recent_users(0) == []
        assert ref.recent_files(0) == []
