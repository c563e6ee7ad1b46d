"""Audit Event Contract — canonical data structures shared by all modules."""

from honeyshare.contracts.audit_event import CSV_COLUMNS, AuditEvent
from honeyshare.contracts.enums import EventType, FileType, SharingLevel, UserRole
from honeyshare.contracts.reference import FileLink, GlobalSettings, User

__all__ = [
    "CSV_COLUMNS",
    "AuditEvent",
    "EventType",
    "FileLink",
    "FileType",
    "GlobalSettings",
    "SharingLevel",
    "User",
    "UserRole",
]
