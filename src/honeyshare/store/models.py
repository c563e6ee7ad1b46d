"""SQLAlchemy table models for reference data and the audit log."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_id)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default="user")
    mfa_enabled = Column(Boolean, nullable=False, default=False)
    allow_local_login = Column(Boolean, nullable=False, default=True)
    allow_idp_login = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, index=True)


class FileLinkRow(Base):
    __tablename__ = "file_sharing_links"

    id = Column(String(32), primary_key=True, default=_new_id)
    owner_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(10), nullable=False)
    has_password = Column(Boolean, nullable=False, default=False)
    expiry_date = Column(DateTime, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, index=True)


class AuditLogRow(Base):
    """Append-only: rows are inserted and bulk-deleted, never updated."""

    __tablename__ = "audit_logs"

    id = Column(String(32), primary_key=True, default=_new_id)
    timestamp = Column(DateTime, nullable=False, index=True)
    event_type = Column(String(20), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=True, index=True)
    file_id = Column(String(32), ForeignKey("file_sharing_links.id"), nullable=True, index=True)
    ip_address = Column(String(15), nullable=False)
    user_agent = Column(String(512), nullable=False)
    details = Column(Text, nullable=True)


class GlobalSettingsRow(Base):
    __tablename__ = "global_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    allowed_ip_ranges = Column(Text, nullable=False)   # JSON-encoded list
    force_idp_login = Column(Boolean, nullable=False, default=False)
    sharing_level = Column(String(30), nullable=False)
    created_at = Column(DateTime, nullable=False)
