"""In-memory registry of visitor sessions."""

import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from photo_survey.services.sessions import RatingSession

DEFAULT_IDLE_SECONDS = 12 * 60 * 60
DEFAULT_MAX_ENTRIES = 10_000


@dataclass
class _Entry:
    session: RatingSession
    expires_at: datetime


@dataclass
class SessionRegistry:
    """Maps opaque visitor ids to their rating sessions.

    Entries are kept in least-recently-used order; once ``max_entries`` is
    reached the oldest visitor is forgotten to make room.
    """

    factory: Callable[[], RatingSession]
    idle_seconds: int
    max_entries: int
    _entries: dict[str, _Entry]
    _lock: threading.Lock

    def __init__(
        self,
        factory: Callable[[], RatingSession],
        idle_seconds: int = DEFAULT_IDLE_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self.factory = factory
        self.idle_seconds = idle_seconds
        self.max_entries = max_entries
        self._entries = {}
        self._lock = threading.Lock()

    def find(self, visitor_id: str | None) -> RatingSession | None:
        """Return a known visitor's session without creating one."""
        if not visitor_id:
            return None
        now = datetime.now(tz=UTC)
        with self._lock:
            self._evict_expired(now)
            entry = self._touch(visitor_id, now)
        return entry.session if entry else None

    def get_or_create(self, visitor_id: str | None) -> tuple[str, RatingSession]:
        """Return the visitor's session, creating one for unknown or idle ids."""
        now = datetime.now(tz=UTC)
        with self._lock:
            self._evict_expired(now)
            entry = self._touch(visitor_id, now) if visitor_id else None
            if entry is None or visitor_id is None:
                visitor_id = secrets.token_urlsafe(32)
                entry = _Entry(
                    session=self.factory(),
                    expires_at=now + timedelta(seconds=self.idle_seconds),
                )
                self._entries[visitor_id] = entry
                self._evict_overflow()
        return visitor_id, entry.session

    def discard(self, visitor_id: str) -> None:
        """Forget a visitor's session."""
        with self._lock:
            self._entries.pop(visitor_id, None)

    def clear(self) -> None:
        """Forget every session."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _touch(self, visitor_id: str, now: datetime) -> _Entry | None:
        entry = self._entries.pop(visitor_id, None)
        if entry is None:
            return None
        entry.expires_at = now + timedelta(seconds=self.idle_seconds)
        self._entries[visitor_id] = entry
        return entry

    def _evict_expired(self, now: datetime) -> None:
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            self._entries.pop(key, None)

    def _evict_overflow(self) -> None:
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            self._entries.pop(oldest)
