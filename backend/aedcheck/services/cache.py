"""
AEDCheck Backend — In-Process TTL Cache
========================================

What:  Small key/value cache with a fixed time-to-live and explicit
       invalidation.
Why:   Dashboard expiry counts are expensive aggregate queries but change
       slowly. The cache is an object owned by the application (created in
       main.create_app, stored on app.state) and passed to the services that
       need it, so nothing else shares hidden module-level state.
How:   Entries store (expires_at, value). Expired entries are dropped when
       read, and every PURGE_EVERY writes a full purge runs so keys that are
       never read again (yesterday's date, a departed user's scope) do not
       pile up. The clock is injectable for tests.

Production Upgrade Path:
    Single-process only, like the rate limiter. Multi-worker deployments
    would move this to Redis with the same get/set/invalidate surface.
"""

import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Tuple

_MISSING = object()


class TTLCache:
    """Time-bounded cache. A ttl of 0 disables caching."""

    PURGE_EVERY = 64

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._writes = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return default
        return value

    def set(self, key: Hashable, value: Any) -> None:
        if self.ttl_seconds == 0:
            return
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

        self._writes += 1
        if self._writes % self.PURGE_EVERY == 0:
            self.purge_expired()

    async def get_or_set(
        self,
        key: Hashable,
        factory: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Return the cached value, or await `factory()` and cache its result."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = await factory()
        self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> bool:
        """Drop one key. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)
