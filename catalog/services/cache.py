"""
In-process caches with time-based expiration.

Provides:
- TimedCache: single-value cache with a fixed freshness window (client side)
- ServerSideCache: keyed get-or-create cache with absolute and sliding
  expiration (server side)

Expiration is checked lazily on access; there is no background sweep.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Generic, TypeVar

from loguru import logger

T = TypeVar("T")

Clock = Callable[[], datetime]


class TimedCache(Generic[T]):
    """
    Holds one value plus the time it was written.

    Usage:
        cache: TimedCache[list[Product]] = TimedCache(timedelta(minutes=5))

        products = cache.get()
        if products is None:
            products = await load()
            cache.set(products)
    """

    def __init__(
        self,
        expiration: timedelta = timedelta(minutes=5),
        clock: Clock = datetime.now,
        debug: bool = False,
    ):
        self._expiration = expiration
        self._clock = clock
        self._debug = debug
        self._value: T | None = None
        # Presence is tracked by the timestamp, so falsy values stay cacheable
        self._written_at: datetime | None = None

    @property
    def expiration(self) -> timedelta:
        return self._expiration

    @property
    def written_at(self) -> datetime | None:
        return self._written_at

    @property
    def has_value(self) -> bool:
        """True if a value was stored, fresh or not."""
        return self._written_at is not None

    def age(self) -> timedelta | None:
        """Time since the value was written, or None when empty."""
        if self._written_at is None:
            return None
        return self._clock() - self._written_at

    def is_valid(self) -> bool:
        """Check if a value is present and younger than the window."""
        age = self.age()
        return age is not None and age < self._expiration

    def get(self) -> T | None:
        """Return the value if still fresh, None otherwise."""
        if self.is_valid():
            self._log("HIT")
            return self._value
        self._log("MISS" if not self.has_value else "EXPIRED")
        return None

    def peek(self) -> T | None:
        """Return the stored value even if it has expired."""
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._written_at = self._clock()
        self._log(f"SET (TTL: {self._expiration.total_seconds()}s)")

    def clear(self) -> None:
        self._value = None
        self._written_at = None
        self._log("CLEAR")

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[TimedCache] {message}")


@dataclass
class CacheEntry(Generic[T]):
    """A server cache entry with both expiration clocks."""

    value: T
    created_at: datetime
    last_access: datetime

    def is_expired(
        self,
        now: datetime,
        absolute: timedelta,
        sliding: timedelta,
    ) -> bool:
        """Expired once either the absolute or the sliding window elapses."""
        return now - self.created_at >= absolute or now - self.last_access >= sliding


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }


class ServerSideCache:
    """
    Get-or-create cache with absolute and sliding expiration.

    An entry lives at most ``absolute_expiration`` after it was created and
    at most ``sliding_expiration`` after it was last read, whichever comes
    first. Each hit resets the sliding clock.

    Two callers missing on the same key at the same time may both run the
    generator. Pass ``exclusive=True`` to serialise check-then-generate per
    key when generation must happen once.

    Usage:
        cache = ServerSideCache(
            absolute_expiration=timedelta(minutes=10),
            sliding_expiration=timedelta(minutes=3),
        )
        products = cache.get_or_create("products", build_products)
    """

    def __init__(
        self,
        absolute_expiration: timedelta = timedelta(minutes=10),
        sliding_expiration: timedelta = timedelta(minutes=3),
        clock: Clock = datetime.now,
        exclusive: bool = False,
        debug: bool = False,
    ):
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._absolute = absolute_expiration
        self._sliding = sliding_expiration
        self._clock = clock
        self._exclusive = exclusive
        self._debug = debug
        self._stats = CacheStats()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return a live entry's value, resetting its sliding clock."""
        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            self._log(f"MISS: {key}")
            return None

        now = self._clock()
        if entry.is_expired(now, self._absolute, self._sliding):
            del self._entries[key]
            self._stats.misses += 1
            self._stats.evictions += 1
            self._log(f"EXPIRED: {key}")
            return None

        entry.last_access = now
        self._stats.hits += 1
        self._log(f"HIT: {key}")
        return entry.value

    def set(self, key: str, value: T) -> T:
        """Store a value under both expiration policies."""
        now = self._clock()
        self._entries[key] = CacheEntry(value=value, created_at=now, last_access=now)
        self._log(
            f"SET: {key} (absolute: {self._absolute.total_seconds()}s, "
            f"sliding: {self._sliding.total_seconds()}s)"
        )
        return value

    def get_or_create(self, key: str, generator: Callable[[], T]) -> T:
        """
        Return the cached value for ``key`` or generate and store it.

        Generator exceptions propagate and nothing is stored.
        """
        if not self._exclusive:
            return self._get_or_create(key, generator)

        with self._lock_for(key):
            return self._get_or_create(key, generator)

    def _get_or_create(self, key: str, generator: Callable[[], T]) -> T:
        # A stored None is indistinguishable from a miss; generators return data
        value = self.get(key)
        if value is not None:
            return value
        return self.set(key, generator())

    def remove(self, key: str) -> bool:
        """Delete a specific key from cache."""
        if key in self._entries:
            del self._entries[key]
            self._log(f"REMOVE: {key}")
            return True
        return False

    def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._entries)
        self._entries.clear()
        self._log(f"CLEAR: {count} entries removed")

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        self._stats.size = len(self._entries)
        return self._stats

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[ServerSideCache] {message}")
