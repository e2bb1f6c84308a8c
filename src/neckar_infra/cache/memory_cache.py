"""In-memory expiring cache for credentials and discovery documents."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware UTC now."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached value with an optional absolute expiry."""

    value: Any
    expires_at: datetime | None = None

    def is_valid(self, now: datetime) -> bool:
        """Valid when there is no expiry or the expiry is strictly in the future."""
        return self.expires_at is None or now < self.expires_at


class ExpiringCache:
    """Lazy, pull-based key/value cache; expiry is checked on read.

    The mapping is guarded by a lock so one instance may be shared by
    threads and by tasks on different event loops.
    """

    def __init__(self, clock: Clock = utc_now) -> None:
        """Initialize an empty cache reading time from ``clock``."""
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def now(self) -> datetime:
        """Return the current time from the injected clock."""
        return self._clock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, dropping it first if it has expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("cache_miss", key=key)
                return None
            if entry.is_valid(now):
                logger.debug("cache_hit", key=key)
                return entry.value
            del self._entries[key]
        logger.debug("cache_expired", key=key, expired_at=entry.expires_at)
        return None

    def set(self, key: str, value: Any, expires_at: datetime | None = None) -> None:
        """Insert or overwrite an entry."""
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        """Remove one entry; missing keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)

    def flush(self) -> None:
        """Remove all entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug("cache_flushed", entries=count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Membership ignores expiry; use ``get`` for validity."""
        with self._lock:
            return key in self._entries
