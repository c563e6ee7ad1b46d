"""Bounded, read-only samples of users and file links for event attribution."""

from __future__ import annotations

import logging
from typing import Protocol

from honeyshare.contracts.reference import FileLink, User

log = logging.getLogger(__name__)

# Only the newest N entities are ever attributed to synthetic events.
REFERENCE_WINDOW = 10


class ReferenceSource(Protocol):
    def recent_users(self, limit: int) -> list[User]: ...

    def recent_files(self, limit: int) -> list[FileLink]: ...

    def all_files(self) -> list[FileLink]: ...


class ReferenceDataAccessor:
    """Thin read facade over the store; an empty list means "skip", not failure."""

    def __init__(self, source: ReferenceSource, window: int = REFERENCE_WINDOW) -> None:
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self.source = source
        self.window = window

    def recent_users(self, limit: int | None = None) -> list[User]:
        return self.source.recent_users(self.window if limit is None else min(limit, self.window))

    def recent_files(self, limit: int | None = None) -> list[FileLink]:
        return self.source.recent_files(self.window if limit is None else min(limit, self.window))

    def all_files(self) -> list[FileLink]:
        files = self.source.all_files()
        log.debug("Reference snapshot: %d file links", len(files))
        return files
