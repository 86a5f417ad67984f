"""
In-process TTL cache.

Holds (value, expiry) pairs keyed by colon-separated strings such as
``users:42``. Expired entries are evicted lazily when looked up; nothing
sweeps the store in the background.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value and its absolute expiry time."""

    value: Any
    expires_at: float


class CacheLayer:
    """In-memory cache with per-entry TTL and prefix invalidation.

    The store is owned by the instance, so several caches (and the services
    using them) can coexist in one process.
    """

    DEFAULT_TTL = 0  # Disabled

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache layer.

        Args:
            default_ttl: Default time-to-live in seconds. Zero disables writes.
            clock: Monotonic time source, replaceable in tests.
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    @property
    def enabled(self) -> bool:
        return self.default_ttl > 0

    def get(self, key: str) -> Optional[Any]:
        """Get cached value if not expired.

        Args:
            key: Cache key.

        Returns:
            Cached value or None if not found or expired.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None

        return entry.value

    def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        """Store value in cache with TTL.

        A TTL of zero or less makes this a no-op.

        Args:
            key: Cache key.
            value: Value to cache.
            ttl_seconds: Time-to-live in seconds. Uses default if not specified.
        """
        if ttl_seconds is None:
            ttl_seconds = self.default_ttl
        if ttl_seconds <= 0:
            return

        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def delete(self, key: str) -> bool:
        """Delete a specific cache entry.

        Returns:
            True if entry was deleted, False if not found.
        """
        return self._entries.pop(key, None) is not None

    def invalidate(self, prefix: str) -> int:
        """Invalidate every entry whose key starts with ``prefix``.

        Args:
            prefix: Key prefix (e.g., "users:" for every cached user).

        Returns:
            Number of entries deleted.
        """
        # Snapshot the keys; the dict shrinks while we iterate
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> int:
        """Clear all cache entries.

        Returns:
            Number of entries removed.
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    @staticmethod
    def make_key(*parts: str) -> str:
        """Create a cache key from multiple parts.

        Args:
            *parts: Key components to join.

        Returns:
            Colon-separated cache key.
        """
        return ":".join(str(p) for p in parts)
