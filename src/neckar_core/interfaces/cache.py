"""Abstract cache interface."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ExpiringCacheClient(Protocol):
    """In-process cache whose entries carry an optional absolute expiry."""

    def now(self) -> datetime:
        """Return the current time as seen by this cache."""
        ...

    def get(self, key: str) -> Any | None:
        """Return an unexpired value, or None; expired entries are dropped."""
        ...

    def set(self, key: str, value: Any, expires_at: datetime | None = None) -> None:
        """Store a value; no expiry means it never expires."""
        ...

    def delete(self, key: str) -> None:
        """Remove one key from the cache."""
        ...

    def flush(self) -> None:
        """Remove every entry."""
        ...
