"""
Cache module for storing decoded API responses.

Provides a process-local cache with TTL-based expiration.
"""

from pubglookup.cache.memory import CacheClient, CacheEntry, MemoryCache

__all__ = ["CacheClient", "CacheEntry", "MemoryCache"]
