"""
In-memory cache implementation.

Provides a process-local key -> (value, expiry) store and the cache client
that sits in front of the fetcher. Nothing survives a restart: the store is
created empty with the client and dropped with it.
"""

import json
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional, TypeVar

from pubglookup.collectors.fetcher import Fetcher
from pubglookup.core.cancellation import CancellationSignal
from pubglookup.core.exceptions import DecodeError
from pubglookup.core.models import Decodable
from pubglookup.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=Decodable)


@dataclass(frozen=True)
class CacheEntry:
    """A decoded value and the clock reading after which it is stale."""

    value: Any
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now <= self.expires_at


class MemoryCache:
    """Dict-backed cache with TTL-based expiration.

    Expired entries are not swept automatically; they are found on the next
    lookup of the same key and overwritten by the next store. ``cleanup()``
    drops them on demand.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize the cache.

        Args:
            clock: Monotonic clock returning seconds. Injectable for tests.
        """
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Get the stored entry for ``key``, fresh or not."""
        return self._entries.get(key)

    def get(self, key: str) -> Optional[Any]:
        """Get the cached value if present and not expired."""
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self.clock()):
            return entry.value
        return None

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``, replacing any entry."""
        self._entries[key] = CacheEntry(value=value, expires_at=self.clock() + ttl_seconds)

    def delete(self, key: str) -> bool:
        """Delete a specific entry. Returns True if it existed."""
        return self._entries.pop(key, None) is not None

    def invalidate(self, prefix: str) -> int:
        """Delete every entry whose key starts with ``prefix``.

        Returns:
            Number of entries deleted.
        """
        doomed = [k for k in self._entries if k.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def cleanup(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed.
        """
        now = self.clock()
        expired = [k for k, e in self._entries.items() if not e.is_fresh(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> int:
        """Clear all entries. Returns the number removed."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> dict[str, Any]:
        """Get cache statistics, including entry counts by key prefix."""
        now = self.clock()
        valid = sum(1 for e in self._entries.values() if e.is_fresh(now))

        by_prefix: dict[str, int] = {}
        for key, entry in self._entries.items():
            if entry.is_fresh(now):
                prefix = key.split("_", 1)[0]
                by_prefix[prefix] = by_prefix.get(prefix, 0) + 1

        return {
            "total_entries": len(self._entries),
            "valid_entries": valid,
            "expired_entries": len(self._entries) - valid,
            "entries_by_prefix": by_prefix,
        }

    @staticmethod
    def make_key(*parts: str) -> str:
        """Create a cache key from multiple parts.

        Returns:
            Underscore-separated cache key, e.g. ``player_shroud``.
        """
        return "_".join(str(p) for p in parts)


def _ttl_seconds(ttl: float | timedelta) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


class CacheClient:
    """Fetch-with-cache front for a ``Fetcher``.

    Flow of ``get``:

    1. A fresh entry for the key is returned as-is. No fetch, no decode, and
       the cancellation signal is not consulted.
    2. Otherwise the fetcher is called. Any failure propagates untouched and
       nothing is written.
    3. The body is decoded into the requested model. A body that does not fit
       raises ``DecodeError`` and nothing is written.
    4. The decoded value is stored for ``ttl`` and returned.

    Concurrent misses on the same key are not merged: both fetch, and the
    later store wins.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        store: Optional[MemoryCache] = None,
    ):
        """Initialize the cache client.

        Args:
            fetcher: Fetcher used on cache misses.
            store: Optional store. A fresh ``MemoryCache`` is used by default.
        """
        self.fetcher = fetcher
        self.store = store if store is not None else MemoryCache()

    async def get(
        self,
        key: str,
        ttl: float | timedelta,
        address: str,
        model: type[T],
        credential: str,
        signal: Optional[CancellationSignal] = None,
    ) -> T:
        """Return the value for ``key``, fetching ``address`` on a miss.

        Args:
            key: Cache key identifying the logical query.
            ttl: Time-to-live in seconds or as a timedelta. ``ttl <= 0``
                 disables caching for this call.
            address: Absolute URL fetched on a miss.
            model: Class the body is decoded into via ``from_dict``.
            credential: Bearer token forwarded to the fetcher.
            signal: Optional cancellation signal forwarded to the fetcher.

        Returns:
            The cached or freshly decoded value.

        Raises:
            FetchError: Any failure from the fetcher, or ``DecodeError``.
        """
        entry = self.store.get_entry(key)
        if (
            entry is not None
            and entry.is_fresh(self.store.clock())
            and isinstance(entry.value, model)
        ):
            logger.debug("cache", cache_event="hit", model=model.__name__)
            return entry.value

        logger.debug(
            "cache",
            cache_event="miss" if entry is None else "stale",
            model=model.__name__,
        )

        body = await self.fetcher.fetch(address, credential, signal)
        value = self._decode(address, body, model)

        ttl_seconds = _ttl_seconds(ttl)
        if ttl_seconds <= 0:
            logger.debug("cache", cache_event="skip", reason="non_positive_ttl")
            return value

        self.store.set(key, value, ttl_seconds)
        logger.debug("cache", cache_event="store", ttl_seconds=ttl_seconds)
        return value

    @staticmethod
    def _decode(address: str, body: str, model: type[T]) -> T:
        """Decode a JSON body into ``model``."""
        try:
            return model.from_dict(json.loads(body))
        except (ValueError, KeyError, TypeError, OverflowError, RecursionError) as e:
            # json.JSONDecodeError is a ValueError; deep nesting hits RecursionError
            logger.warning("decode_failed", url=address, model=model.__name__)
            raise DecodeError(address, model.__name__, details=str(e)) from e
