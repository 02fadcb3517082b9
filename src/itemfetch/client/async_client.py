"""Asynchronous request orchestrator with caching, timeout and bounded retry.

This module provides :class:`AsyncClient`, which resolves a logical request
(path plus query parameters) into response data. It wraps
:class:`httpx.AsyncClient` and layers on:

- **Response caching** -- an injected :class:`~itemfetch.cache.TTLCache`
  is consulted before any network I/O. A hit short-circuits the retry
  loop entirely. Successful results are stored back; a failing cache
  write is reported and ignored. Callers always receive their own copy,
  so mutating a result never touches the cached entry.
- **Per-attempt timeout** -- every attempt runs under
  :func:`asyncio.wait_for`, which cancels the in-flight call when the
  deadline passes. Only the network step is cancelled.
- **Bounded retry** -- up to ``retry_count`` attempts. Timeouts, httpx
  errors, non-2xx statuses and malformed bodies all count as a failed
  attempt. Attempts follow each other immediately; there is no backoff.

When every attempt fails the client raises
:class:`~itemfetch.exceptions.RetriesExhaustedError`. It never returns an
error-shaped value and never returns ``None``.
"""

from __future__ import annotations

import asyncio
import copy
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from itemfetch.cache import TTLCache, make_cache_key
from itemfetch.client.response import check_status, extract_response_data
from itemfetch.exceptions import (
    ItemfetchError,
    MalformedResponseError,
    RetriesExhaustedError,
    TransportFailure,
)
from itemfetch.models import ItemsResponse, RequestConfig
from itemfetch.output import get_output


class AsyncClient:
    """Retrying, caching HTTP client for the items endpoint.

    Must be used as an async context manager so that the underlying
    :class:`httpx.AsyncClient` is opened and closed properly.

    Args:
        config: Immutable request settings (base URL, timeout, retry
            count, cache flag).
        cache: Cache to consult and populate. When ``None`` nothing is
            cached, regardless of ``config.cache_enabled``.
        cache_ttl: TTL in seconds for stored results. Defaults to the
            cache's own default TTL.
        transport: Optional httpx transport; tests and the CLI's mock mode
            pass an :class:`httpx.MockTransport` here.

    Example::

        async with AsyncClient(config, cache=TTLCache()) as client:
            body = await client.get_items(params={"limit": 5})
    """

    def __init__(
        self,
        config: RequestConfig,
        cache: Optional[TTLCache] = None,
        cache_ttl: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.attempts = 0

    @property
    def config(self) -> RequestConfig:
        return self._config

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        response_model: Optional[type[BaseModel]] = None,
    ) -> dict[str, Any]:
        """Resolve *path* and *params* into response data.

        Args:
            path: URL path appended to the configured ``base_url``.
            params: Query parameters. Also part of the cache key.
            response_model: Pydantic model the body must satisfy for an
                attempt to count as successful.

        Returns:
            The response body with a ``fetched_at`` UTC timestamp added,
            either fresh or from the cache.

        Raises:
            RetriesExhaustedError: When all ``retry_count`` attempts failed.
        """
        output = get_output()
        self.attempts = 0
        key = make_cache_key(path, params)

        # 1. Cache lookup
        cached = self._cache_get(key)
        if cached is not None:
            output.debug(f"Cache hit: {self.build_url(path, params)}")
            return copy.deepcopy(cached)

        # 2. Execute with retry
        result = await self._execute_with_retry(path, params, response_model)

        # 3. Cache store
        self._cache_set(key, result)
        return result

    async def get_items(
        self,
        path: str = "/items",
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Fetch an items list, validating it against :class:`~itemfetch.models.ItemsResponse`."""
        return await self.request(path, params=params, response_model=ItemsResponse)

    def build_url(self, path: str, params: Optional[dict[str, Any]] = None) -> str:
        """Return the absolute URL a request for *path* and *params* targets."""
        url = httpx.URL(f"{self._config.base_url.rstrip('/')}{path}")
        if params:
            url = url.copy_merge_params(params)
        return str(url)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _execute_with_retry(
        self,
        path: str,
        params: Optional[dict[str, Any]],
        response_model: Optional[type[BaseModel]],
    ) -> dict[str, Any]:
        """Run up to ``retry_count`` attempts, returning the first success."""
        assert self._client is not None, "Client not initialised -- use as async context manager"

        retry_count = self._config.retry_count
        output = get_output()
        last_error: Optional[ItemfetchError] = None

        for attempt in range(1, retry_count + 1):
            self.attempts = attempt
            try:
                body = await self._attempt(path, params, response_model)
            except (TransportFailure, MalformedResponseError) as exc:
                last_error = exc
                output.warning(f"Retry {attempt}/{retry_count}: {exc}")
                continue

            return {**body, "fetched_at": datetime.now(timezone.utc).isoformat()}

        raise RetriesExhaustedError(path, retry_count, last_error)

    async def _attempt(
        self,
        path: str,
        params: Optional[dict[str, Any]],
        response_model: Optional[type[BaseModel]],
    ) -> dict[str, Any]:
        """Perform a single timed attempt.

        Raises:
            TransportFailure: On timeout, any httpx error (transport,
                decoding, redirects) or non-2xx status.
            MalformedResponseError: On a body of the wrong shape.
        """
        assert self._client is not None
        timeout = self._config.timeout
        try:
            response = await asyncio.wait_for(
                self._client.get(path, params=params or None),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise TransportFailure(f"Timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{type(exc).__name__}: {exc}") from exc

        check_status(response)
        return extract_response_data(response, response_model)

    def _cache_get(self, key: str) -> Optional[dict[str, Any]]:
        if self._cache is None or not self._config.cache_enabled:
            return None
        return self._cache.get(key)

    def _cache_set(self, key: str, result: dict[str, Any]) -> None:
        """Store *result*; a failing write never fails the request."""
        if self._cache is None or not self._config.cache_enabled:
            return
        try:
            self._cache.set(key, copy.deepcopy(result), self._cache_ttl)
        except ItemfetchError as exc:
            get_output().warning(f"Could not cache response: {exc}")
