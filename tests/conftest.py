"""Shared fixtures for HoneyShare simulator tests."""

from __future__ import annotations

import itertools
import random
from datetime import datetime, timedelta, timezone

import pytest

from honeyshare.contracts.audit_event import AuditEvent
from honeyshare.contracts.enums import EventType, FileType, UserRole
from honeyshare.contracts.reference import FileLink, User
from honeyshare.shared.settings import ENV_VARS
from honeyshare.simulator.clock import ManualClock
from honeyshare.store.repository import AuditStore

BASE_TIME = datetime(2026, 2, 26, 10, 0, 0, tzinfo=timezone.utc)
TEST_UA = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

_email_seq = itertools.count(1)

# ── Helpers: build contract objects with sensible defaults ──────────────


def make_user(
    *,
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    email: str | None = None,
    role: UserRole = UserRole.USER,
    created_at: datetime = BASE_TIME,
) -> User:
    if email is None:
        email = f"{first_name.lower()}.{last_name.lower()}.{next(_email_seq)}@exampleapp.com"
    return User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        role=role,
        created_at=created_at,
    )


def make_file_link(
    *,
    owner_id: str,
    file_name: str = "0123456789abcdef",
    file_type: FileType = FileType.PDF,
    expiry_date: datetime | None = None,
    created_at: datetime = BASE_TIME,
) -> FileLink:
    return FileLink(
        owner_id=owner_id,
        file_name=file_name,
        file_type=file_type,
        expiry_date=expiry_date,
        created_at=created_at,
    )


def make_event(
    *,
    event_type: EventType = EventType.DOWNLOAD,
    timestamp: datetime = BASE_TIME,
    actor_id: str | None = None,
    target_id: str | None = None,
    origin_address: str = "14.1.2.3",
    client_signature: str = TEST_UA,
    detail: str | None = None,
) -> AuditEvent:
    return AuditEvent(
        event_type=event_type,
        timestamp=timestamp,
        actor_id=actor_id,
        target_id=target_id,
        origin_address=origin_address,
        client_signature=client_signature,
        detail=detail,
    )


def seed_store(
    store: AuditStore,
    users: int = 10,
    files: int = 5,
    base: datetime = BASE_TIME,
) -> tuple[list[User], list[FileLink]]:
    """Insert *users* and *files* with strictly increasing ``created_at``."""
    created_users = [
        store.add_user(make_user(last_name=f"User{i}", created_at=base - timedelta(minutes=users - i)))
        for i in range(users)
    ]
    created_files = []
    for j in range(files):
        owner = created_users[j % len(created_users)] if created_users else None
        created_files.append(
            store.add_file_link(
                make_file_link(
                    owner_id=owner.id if owner else "no-owner",
                    file_name=f"{j:016x}",
                    created_at=base - timedelta(minutes=files - j),
                )
            )
        )
    return created_users, created_files


def ts_offset(seconds: float = 0, base: datetime = BASE_TIME) -> datetime:
    return base + timedelta(seconds=seconds)


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture
def store():
    """Fresh in-memory SQLite store per test."""
    s = AuditStore.from_url("sqlite://")
    yield s
    s.dispose()


@pytest.fixture
def seeded_store(store):
    """Store with 10 users and 5 file links."""
    seed_store(store)
    return store


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(BASE_TIME)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove simulator environment variables inherited from the shell."""
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
