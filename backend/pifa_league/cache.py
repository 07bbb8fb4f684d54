from __future__ import annotations

from asyncio import Lock
from collections.abc import Iterable
import time
from typing import Any

from .config import STANDINGS_CACHE_TTL


class TTLCache:
    """In-memory TTL cache for standings tables with async-safe access.

    Every invalidation bumps ``generation``. A reader that computed its value
    before an invalidation passes the generation it started from to
    :meth:`set`, and the stale value is dropped instead of cached.
    """

    def __init__(self, ttl_seconds: float = 300.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[Any, tuple[Any, float]] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def get(self, key: Any) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(
        self,
        key: Any,
        value: Any,
        ttl_seconds: float | None = None,
        *,
        generation: int | None = None,
    ) -> bool:
        """Cache ``value``; return ``False`` if it was computed before an invalidation."""
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        expires_at = time.monotonic() + max(ttl, 0.0)
        async with self._lock:
            if generation is not None and generation != self._generation:
                return False
            if ttl <= 0:
                self._store.pop(key, None)
                return False
            self._store[key] = (value, expires_at)
            return True

    async def invalidate_scopes(self, scopes: Iterable[str | None]) -> None:
        """Drop cached tables for the given competitions and the global table."""
        keys = {("competition", cid) for cid in scopes if cid}
        keys.add(("global",))
        async with self._lock:
            self._generation += 1
            for key in keys:
                self._store.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._generation += 1
            self._store.clear()


standings_cache = TTLCache(ttl_seconds=STANDINGS_CACHE_TTL)
