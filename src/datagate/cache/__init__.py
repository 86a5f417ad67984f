"""
Cache module for single-record reads.

Provides an in-process cache with TTL expiry and prefix invalidation.
"""

from datagate.cache.memory import CacheEntry, CacheLayer

__all__ = ["CacheEntry", "CacheLayer"]
