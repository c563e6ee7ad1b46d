"""Activity summary of audit events (pandas)."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

import pandas as pd

from honeyshare.contracts.audit_event import CSV_COLUMNS, AuditEvent
from honeyshare.contracts.enums import DOWNLOAD_EVENTS, EventType

log = logging.getLogger(__name__)

RECENT_WINDOW = timedelta(minutes=5)


def events_frame(events: Sequence[AuditEvent]) -> pd.DataFrame:
    """One row per event, CSV column order, ``timestamp`` as UTC datetimes."""
    df = pd.DataFrame([ev.to_dict() for ev in events], columns=CSV_COLUMNS)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df


def event_type_counts(df: pd.DataFrame) -> pd.Series:
    """Counts per event type; every type present, zero when absent."""
    order = [t.value for t in EventType]
    return df["event_type"].value_counts().reindex(order, fill_value=0).astype(int)


def top_origins(df: pd.DataFrame, n: int = 5) -> pd.Series:
    """Busiest origin addresses — an attack burst shows up here first."""
    return df["origin_address"].value_counts().head(n)


def events_per_minute(df: pd.DataFrame) -> pd.Series:
    if df.empty:
        return pd.Series(dtype=int)
    return df.set_index("timestamp").resample("1min").size()


def anonymous_download_ratio(df: pd.DataFrame) -> float:
    downloads = df[df["event_type"].isin([t.value for t in DOWNLOAD_EVENTS])]
    if downloads.empty:
        return 0.0
    return float(downloads["actor_id"].isna().mean())


def recent_count(df: pd.DataFrame, now: datetime, window: timedelta = RECENT_WINDOW) -> int:
    if df.empty:
        return 0
    return int((df["timestamp"] >= pd.Timestamp(now - window)).sum())


def summarize(events: Sequence[AuditEvent], now: datetime, top_n: int = 5) -> dict[str, Any]:
    df = events_frame(events)
    summary = {
        "total": len(df),
        "by_type": event_type_counts(df).to_dict(),
        "top_origins": top_origins(df, top_n).to_dict(),
        "recent": recent_count(df, now),
        "anonymous_download_ratio": round(anonymous_download_ratio(df), 3),
        "peak_per_minute": int(events_per_minute(df).max()) if not df.empty else 0,
    }
    log.debug("Summary over %d events: %s", len(df), summary)
    return summary
