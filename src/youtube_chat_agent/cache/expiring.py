"""Keyed result cache with per-entry expiry."""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached value and the monotonic time it stops being valid."""

    value: T
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class ExpiringCache:
    """Short-lived cache that shields rate-limited upstream reads.

    Expiry is lazy: an entry past its deadline is dropped the next time it
    is read. There is no background sweep and no capacity bound, callers
    use a small fixed set of keys.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache.

        Args:
            clock: Monotonic time source in seconds. Overridable for tests.
        """
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value for ``key`` or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            # Concurrent readers may race here; losing the pop is harmless
            self._entries.pop(key, None)
            logger.debug("cache_expired key=%s", key)
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store ``value`` under ``key`` until ``ttl`` seconds from now."""
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        """Drop ``key`` if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_load(
        self,
        key: str,
        ttl: float,
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        """Read-through helper: serve from cache or call ``loader`` once.

        Args:
            key: Cache key.
            ttl: Lifetime of a freshly loaded value in seconds.
            loader: Coroutine factory that fetches the upstream value.

        Returns:
            The cached or freshly loaded value.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug("cache_hit key=%s", key)
            return cached  # type: ignore[no-any-return]

        logger.debug("cache_miss key=%s", key)
        value = await loader()
        self.set(key, value, ttl)
        return value

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
