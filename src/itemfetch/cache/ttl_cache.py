"""Keyed in-memory store with lazy time-based expiration.

Entries are visible while the clock reading is at or before their
``expires_at`` and are evicted by the first :meth:`TTLCache.get` that sees
them expired. There is no background sweep and no size bound: memory held
by entries that are never read again is only released by
:meth:`TTLCache.remove` or :meth:`TTLCache.clear`. That is acceptable for
the short-lived, small caches this package is meant for.

Cache keys are SHA-256 hashes of ``path|sorted_params`` so that identical
requests always resolve to the same entry regardless of parameter
ordering.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from itemfetch.exceptions import InvalidArgumentError
from itemfetch.output import get_output


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """In-memory cache with per-entry TTL.

    :meth:`set` validates strictly: an empty key or a TTL that is not a
    positive number raises :class:`~itemfetch.exceptions.InvalidArgumentError`
    instead of storing an entry that can never be read back.

    A single re-entrant lock guards every operation so the
    check-then-evict path in :meth:`get` cannot race a concurrent
    :meth:`set` of the same key.

    Args:
        default_ttl: TTL in seconds used when :meth:`set` is called without
            one.
        clock: Zero-argument callable returning the current time in
            seconds. Defaults to :func:`time.monotonic`; tests pass a fake
            clock to simulate time passing.

    Example::

        cache = TTLCache(default_ttl=3.0)
        cache.set("/items", {"items": []})
        cache.get("/items")   # {"items": []} until 3 s have passed
    """

    def __init__(
        self,
        default_ttl: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        _validate_ttl(default_ttl)
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store *value* under *key* for *ttl* seconds.

        Args:
            key: Non-empty string key.
            value: Arbitrary payload.
            ttl: Lifetime in seconds; defaults to ``default_ttl``.

        Raises:
            InvalidArgumentError: If *key* is empty or not a string, or
                *ttl* is not a positive number.
        """
        if not isinstance(key, str) or not key:
            raise InvalidArgumentError(f"Cache key must be a non-empty string, got {key!r}")
        if ttl is None:
            ttl = self._default_ttl
        _validate_ttl(ttl)

        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def get(self, key: str) -> Optional[Any]:
        """Return the live value for *key*, or ``None``.

        An entry whose ``expires_at`` lies in the past is removed before
        ``None`` is returned.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                get_output().debug(f"Cache expired: {key}")
                return None
            return entry.value

    def remove(self, key: str) -> None:
        """Delete *key* if present. Missing keys are ignored."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``size`` (entries held, expired or not) and ``default_ttl``."""
        with self._lock:
            return {"size": len(self._entries), "default_ttl": self._default_ttl}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Delegate to :meth:`get`; a key holding ``None`` therefore reads as absent."""
        return isinstance(key, str) and self.get(key) is not None


def make_cache_key(path: str, params: Optional[dict[str, Any]] = None) -> str:
    """Generate a cache key from a request path and its query parameters.

    ``None`` and ``{}`` produce the same key, and parameter order does not
    matter.
    """
    parts = [path]
    if params:
        parts.append(json.dumps(params, sort_keys=True, default=str))
    raw = "|".join(parts)
    return hashlib.sha256(raw.encode()).hexdigest()


def _validate_ttl(ttl: Any) -> None:
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
        raise InvalidArgumentError(f"Cache TTL must be a positive number of seconds, got {ttl!r}")
