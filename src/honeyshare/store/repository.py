"""AuditStore — the create/query/delete surface the simulator runs against.

Every operation opens its own session and commits (or rolls back) before
returning, so single event writes are independent and atomic. Timestamps are
stored as naive UTC and handed back timezone-aware.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from honeyshare.contracts.audit_event import AuditEvent
from honeyshare.contracts.enums import EventType, FileType, SharingLevel, UserRole
from honeyshare.contracts.reference import FileLink, GlobalSettings, User
from honeyshare.store.database import create_db_engine, make_session_factory
from honeyshare.store.models import AuditLogRow, Base, FileLinkRow, GlobalSettingsRow, UserRow

log = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """A store operation failed (connection, constraint, SQL error …)."""


# ── timestamp conversion ────────────────────────────────────────────────


def _to_db(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _from_db(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc)


# ── row <-> contract mapping ────────────────────────────────────────────


def _user_from_row(row: UserRow) -> User:
    return User(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        role=UserRole(row.role),
        mfa_enabled=row.mfa_enabled,
        allow_local_login=row.allow_local_login,
        allow_idp_login=row.allow_idp_login,
        active=row.active,
        created_at=_from_db(row.created_at),
    )


def _file_from_row(row: FileLinkRow) -> FileLink:
    return FileLink(
        id=row.id,
        owner_id=row.owner_id,
        file_name=row.file_name,
        file_type=FileType(row.file_type),
        has_password=row.has_password,
        expiry_date=_from_db(row.expiry_date),
        active=row.active,
        created_at=_from_db(row.created_at),
    )


def _event_from_row(row: AuditLogRow) -> AuditEvent:
    return AuditEvent(
        id=row.id,
        timestamp=_from_db(row.timestamp),
        event_type=EventType(row.event_type),
        actor_id=row.user_id,
        target_id=row.file_id,
        origin_address=row.ip_address,
        client_signature=row.user_agent,
        detail=row.details,
    )


class AuditStore:
    """Relational store for users, file links, global settings and audit events."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = make_session_factory(engine)

    @classmethod
    def from_url(cls, url: str, create_schema: bool = True) -> AuditStore:
        try:
            store = cls(create_db_engine(url))
        except SQLAlchemyError as exc:
            raise StoreError(f"cannot open database {url!r}: {exc}") from exc
        if create_schema:
            store.create_schema()
        return store

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"schema creation failed: {exc}") from exc

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Audit events
    # ------------------------------------------------------------------

    def create_event(self, event: AuditEvent) -> AuditEvent:
        with self._session() as session:
            session.add(
                AuditLogRow(
                    id=event.id,
                    timestamp=_to_db(event.timestamp),
                    event_type=event.event_type.value,
                    user_id=event.actor_id,
                    file_id=event.target_id,
                    ip_address=event.origin_address,
                    user_agent=event.client_signature,
                    details=event.detail,
                )
            )
        return event

    def delete_events_before(self, cutoff: datetime) -> int:
        """Bulk-delete events strictly older than *cutoff*; returns the row count."""
        with self._session() as session:
            result = session.execute(
                delete(AuditLogRow).where(AuditLogRow.timestamp < _to_db(cutoff))
            )
            return result.rowcount or 0

    def _event_filters(
        self,
        event_type: EventType | str | None,
        actor_id: str | None,
        target_id: str | None,
        start: datetime | None,
        end: datetime | None,
    ) -> list[Any]:
        clauses: list[Any] = []
        if event_type is not None:
            clauses.append(AuditLogRow.event_type == EventType(event_type).value)
        if actor_id is not None:
            clauses.append(AuditLogRow.user_id == actor_id)
        if target_id is not None:
            clauses.append(AuditLogRow.file_id == target_id)
        if start is not None:
            clauses.append(AuditLogRow.timestamp >= _to_db(start))
        if end is not None:
            clauses.append(AuditLogRow.timestamp <= _to_db(end))
        return clauses

    def list_events(
        self,
        event_type: EventType | str | None = None,
        actor_id: str | None = None,
        target_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = 50,
        offset: int = 0,
        newest_first: bool = True,
    ) -> list[AuditEvent]:
        """Filtered, paginated event listing; ``limit=None`` returns everything."""
        clauses = self._event_filters(event_type, actor_id, target_id, start, end)
        order = AuditLogRow.timestamp.desc() if newest_first else AuditLogRow.timestamp.asc()
        stmt = select(AuditLogRow).where(*clauses).order_by(order).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session() as session:
            return [_event_from_row(r) for r in session.scalars(stmt)]

    def count_events(
        self,
        event_type: EventType | str | None = None,
        actor_id: str | None = None,
        target_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> int:
        clauses = self._event_filters(event_type, actor_id, target_id, start, end)
        stmt = select(func.count()).select_from(AuditLogRow).where(*clauses)
        with self._session() as session:
            return session.scalar(stmt) or 0

    def count_since(self, since: datetime) -> int:
        return self.count_events(start=since)

    # ------------------------------------------------------------------
    # Reference data (read side)
    # ------------------------------------------------------------------

    def recent_users(self, limit: int) -> list[User]:
        stmt = select(UserRow).order_by(UserRow.created_at.desc()).limit(limit)
        with self._session() as session:
            return [_user_from_row(r) for r in session.scalars(stmt)]

    def recent_files(self, limit: int) -> list[FileLink]:
        stmt = select(FileLinkRow).order_by(FileLinkRow.created_at.desc()).limit(limit)
        with self._session() as session:
            return [_file_from_row(r) for r in session.scalars(stmt)]

    def all_files(self) -> list[FileLink]:
        stmt = select(FileLinkRow).order_by(FileLinkRow.created_at.asc())
        with self._session() as session:
            return [_file_from_row(r) for r in session.scalars(stmt)]

    # ------------------------------------------------------------------
    # Reference data (seeding side)
    # ------------------------------------------------------------------

    def add_user(self, user: User) -> User:
        with self._session() as session:
            session.add(
                UserRow(
                    id=user.id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    email=user.email,
                    role=user.role.value,
                    mfa_enabled=user.mfa_enabled,
                    allow_local_login=user.allow_local_login,
                    allow_idp_login=user.allow_idp_login,
                    active=user.active,
                    created_at=_to_db(user.created_at),
                )
            )
        return user

    def add_file_link(self, link: FileLink) -> FileLink:
        with self._session() as session:
            session.add(
                FileLinkRow(
                    id=link.id,
                    owner_id=link.owner_id,
                    file_name=link.file_name,
                    file_type=link.file_type.value,
                    has_password=link.has_password,
                    expiry_date=_to_db(link.expiry_date),
                    active=link.active,
                    created_at=_to_db(link.created_at),
                )
            )
        return link

    def save_global_settings(self, settings: GlobalSettings) -> None:
        """Replace the single global settings row."""
        with self._session() as session:
            session.execute(delete(GlobalSettingsRow))
            session.add(
                GlobalSettingsRow(
                    allowed_ip_ranges=json.dumps(settings.allowed_ip_ranges),
                    force_idp_login=settings.force_idp_login,
                    sharing_level=settings.sharing_level.value,
                    created_at=_to_db(settings.created_at),
                )
            )

    def get_global_settings(self) -> GlobalSettings | None:
        with self._session() as session:
            row = session.scalars(select(GlobalSettingsRow).limit(1)).first()
            if row is None:
                return None
            return GlobalSettings(
                allowed_ip_ranges=json.loads(row.allowed_ip_ranges),
                force_idp_login=row.force_idp_login,
                sharing_level=SharingLevel(row.sharing_level),
                created_at=_from_db(row.created_at),
            )

    def clear(self, keep_email: str | None = None) -> dict[str, int]:
        """Delete events, file links, settings and users (except *keep_email*)."""
        with self._session() as session:
            events = session.execute(delete(AuditLogRow)).rowcount or 0
            files = session.execute(delete(FileLinkRow)).rowcount or 0
            user_stmt = delete(UserRow)
            if keep_email is not None:
                user_stmt = user_stmt.where(UserRow.email != keep_email)
            users = session.execute(user_stmt).rowcount or 0
            session.execute(delete(GlobalSettingsRow))
        return {"events": events, "files": files, "users": users}

    def user_count(self) -> int:
        with self._session() as session:
            return session.scalar(select(func.count()).select_from(UserRow)) or 0

    def file_count(self) -> int:
        with self._session() as session:
            return session.scalar(select(func.count()).select_from(FileLinkRow)) or 0
