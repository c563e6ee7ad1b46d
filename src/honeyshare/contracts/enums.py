"""Canonical enumerations for audit events and reference data."""

from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    LOGIN = "login"
    DOWNLOAD = "download"
    FAILED_LOGIN = "failedLogin"
    FAILED_DOWNLOAD = "failedDownload"


# login-type events must always name an actor
LOGIN_EVENTS = frozenset({EventType.LOGIN, EventType.FAILED_LOGIN})
DOWNLOAD_EVENTS = frozenset({EventType.DOWNLOAD, EventType.FAILED_DOWNLOAD})
FAILURE_EVENTS = frozenset({EventType.FAILED_LOGIN, EventType.FAILED_DOWNLOAD})


class UserRole(str, Enum):
    USER = "user"
    GUEST = "guest"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class FileType(str, Enum):
    PDF = "pdf"
    XLSX = "xlsx"
    DOCX = "docx"
    PPTX = "pptx"
    TXT = "txt"
    CSV = "csv"
    ZIP = "zip"
    JPG = "jpg"
    PNG = "png"
    MP4 = "mp4"


class SharingLevel(str, Enum):
    DO_NOT_ALLOW_PASSWORDS = "doNotAllowPasswords"
    ALLOW_PASSWORDS = "allowPasswords"
    FORCE_PASSWORDS = "forcePasswords"
