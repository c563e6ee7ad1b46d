"""Persistence for reference data and audit events."""

from honeyshare.store.repository import AuditStore, StoreError

__all__ = ["AuditStore", "StoreError"]
