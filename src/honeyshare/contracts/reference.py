"""Reference entities owned by the CRUD layer; read-only to the simulator."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from honeyshare.contracts.audit_event import utcnow
from honeyshare.contracts.enums import FileType, SharingLevel, UserRole


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class User:
    first_name: str
    last_name: str
    email: str
    role: UserRole = UserRole.USER
    mfa_enabled: bool = False
    allow_local_login: bool = True
    allow_idp_login: bool = False
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=_new_id)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(slots=True)
class FileLink:
    """A shared-file link; ``owner_id`` points at a User."""

    owner_id: str
    file_name: str
    file_type: FileType
    has_password: bool = False
    expiry_date: datetime | None = None
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=_new_id)


@dataclass(slots=True)
class GlobalSettings:
    allowed_ip_ranges: list[str]
    force_idp_login: bool
    sharing_level: SharingLevel
    created_at: datetime = field(default_factory=utcnow)
