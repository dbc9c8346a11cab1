"""
In-process read-through cache with a fixed time-to-live.

Entries older than `ttl` seconds are stale and refetched on the next read.
When full, the entry closest to expiry is evicted.
"""
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)


class TTLCache:
    """Async read-through cache keyed by hashable values."""

    def __init__(self, ttl: float, max_entries: int = 1024, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._locks: Dict[Hashable, Tuple[asyncio.Lock, int]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> Optional[Any]:
        """Return a fresh cached value or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any):
        if key not in self._entries and len(self._entries) >= self.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k][0])
            del self._entries[oldest]
        self._entries[key] = (self._clock() + self.ttl, value)

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for key, calling `loader` on a miss."""
        value = self.get(key)
        if value is not None:
            return value

        # One load per key at a time; other keys are not blocked
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                value = self.get(key)
                if value is not None:
                    return value
                value = await loader()
                if value is not None:
                    self.set(key, value)
                return value
        finally:
            lock, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def invalidate(self, key: Hashable):
        self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str):
        """Drop every tuple key whose first element equals `prefix`."""
        stale = [k for k in self._entries if isinstance(k, tuple) and k and k[0] == prefix]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cache entries for '{prefix}'")

    def clear(self):
        self._entries.clear()
