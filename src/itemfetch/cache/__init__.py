"""In-memory response caching for itemfetch.

This package provides :class:`TTLCache`, a keyed store whose entries expire
after a time-to-live, and :func:`make_cache_key`, which derives the
deterministic key for a request path plus query parameters.

The cache is created by the caller and injected into
:class:`~itemfetch.client.AsyncClient`; there is no module-level singleton.
"""

from itemfetch.cache.ttl_cache import CacheEntry, TTLCache, make_cache_key

__all__ = ["CacheEntry", "TTLCache", "make_cache_key"]
