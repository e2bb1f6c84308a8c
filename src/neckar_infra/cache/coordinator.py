"""Acquire-or-reuse wrapper around the expiring cache."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import TypeVar

import structlog

from neckar_core.interfaces.cache import ExpiringCacheClient

logger = structlog.get_logger()

T = TypeVar("T")

Acquire = Callable[[], Awaitable[tuple[T, float]]]


class CacheCoordinator:
    """Return a cached value when valid, otherwise run ``acquire`` and cache it.

    The expiry of a freshly acquired value is anchored at the moment the
    acquisition started, so a slow acquisition never extends the validity
    window past ``start + ttl``.

    With ``single_flight`` enabled, concurrent callers of the same key wait
    for the one running acquisition and reuse its result. Without it, racing
    callers may each acquire; the last write wins. A coordinator serves one
    event loop at a time.
    """

    def __init__(self, cache: ExpiringCacheClient, single_flight: bool = True) -> None:
        """Initialize with the cache to guard."""
        self._cache = cache
        self._single_flight = single_flight
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def cache(self) -> ExpiringCacheClient:
        """The underlying cache."""
        return self._cache

    def now(self) -> datetime:
        """Current time of the underlying cache clock."""
        return self._cache.now()

    async def with_cache(self, key: str, acquire: Acquire[T]) -> T:
        """Return the valid cached value for ``key`` or acquire and cache a new one.

        Errors raised by ``acquire`` propagate unchanged and nothing is cached.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return cached  # type: ignore[no-any-return]

        if not self._single_flight:
            return await self._acquire(key, acquire)

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached  # type: ignore[no-any-return]
            return await self._acquire(key, acquire)

    async def _acquire(self, key: str, acquire: Acquire[T]) -> T:
        """Run the acquisition and cache its result relative to its start time."""
        logger.debug("credential_acquiring", key=key)
        started_at = self._cache.now()
        value, ttl_seconds = await acquire()
        expires_at = started_at + timedelta(seconds=ttl_seconds)
        self._cache.set(key, value, expires_at)
        logger.info("credential_acquired", key=key, ttl_seconds=ttl_seconds)
        return value

    def flush(self) -> None:
        """Drop every cached value."""
        self._cache.flush()
