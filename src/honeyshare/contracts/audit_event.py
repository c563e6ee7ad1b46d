"""Canonical AuditEvent data-class — the unit of record written by the simulator."""

from __future__ import annotations

import csv
import io
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from honeyshare.contracts.enums import EventType

# CSV column order, also the key order of AuditEvent.to_dict()
CSV_COLUMNS: list[str] = [
    "id",
    "timestamp",
    "event_type",
    "actor_id",
    "target_id",
    "origin_address",
    "client_signature",
    "detail",
]


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def format_ts(dt: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. ``2026-02-26T10:00:00.250Z``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_ts(raw: str) -> datetime:
    dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """One synthetic audit record (login, download or a failure of either)."""

    # ── mandatory ──
    event_type: EventType
    origin_address: str       # dotted-quad from the allowed range pool
    client_signature: str     # browser user-agent string

    # ── optional ──
    actor_id: str | None = None     # None = anonymous
    target_id: str | None = None    # None = not file-related
    detail: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=_new_id)

    @property
    def is_anonymous(self) -> bool:
        return self.actor_id is None

    # ── serialisation ─────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": format_ts(self.timestamp),
            "event_type": self.event_type.value,
            "actor_id": self.actor_id,
            "target_id": self.target_id,
            "origin_address": self.origin_address,
            "client_signature": self.client_signature,
            "detail": self.detail,
        }

    def to_csv_row(self) -> str:
        """Return a single CSV line (no trailing newline); None becomes an empty cell."""
        row = self.to_dict()
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["" if row[c] is None else row[c] for c in CSV_COLUMNS])
        return buf.getvalue().rstrip("\r\n")

    def to_json(self) -> str:
        """Return compact JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @staticmethod
    def csv_header() -> str:
        return ",".join(CSV_COLUMNS)

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> AuditEvent:
        """Inverse of ``to_dict``; empty strings are read back as None."""
        return cls(
            id=row["id"],
            timestamp=parse_ts(row["timestamp"]),
            event_type=EventType(row["event_type"]),
            actor_id=row.get("actor_id") or None,
            target_id=row.get("target_id") or None,
            origin_address=row.get("origin_address", ""),
            client_signature=row.get("client_signature", ""),
            detail=row.get("detail") or None,
        )
