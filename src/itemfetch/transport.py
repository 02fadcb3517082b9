"""Simulated items endpoint served through :class:`httpx.MockTransport`.

The CLI talks to this endpoint unless ``--live`` is given, so the whole
fetch/cache/retry pipeline can be exercised without a real server.
"""

from __future__ import annotations

import asyncio
import random
import secrets
from typing import Any, Optional

import httpx

DEFAULT_ITEMS: list[dict[str, Any]] = [
    {"id": 1, "name": "Alpha", "active": True, "score": 10},
    {"id": 2, "name": "Beta", "active": True, "score": 5},
    {"id": 3, "name": "Gamma", "active": False, "score": 1},
]


class MockItemsEndpoint:
    """An in-process stand-in for the items API.

    Args:
        items: Items to serve. Defaults to :data:`DEFAULT_ITEMS`.
        latency: ``(min, max)`` seconds of random delay per call.
        failures: Number of initial calls answered with HTTP 503.
        status_code: Status used for the remaining calls.

    Example::

        endpoint = MockItemsEndpoint(failures=1)
        async with AsyncClient(config, transport=endpoint.transport()) as client:
            await client.get_items()
        endpoint.calls  # 2
    """

    def __init__(
        self,
        items: Optional[list[dict[str, Any]]] = None,
        latency: tuple[float, float] = (0.0, 0.4),
        failures: int = 0,
        status_code: int = 200,
    ) -> None:
        self.items = list(DEFAULT_ITEMS if items is None else items)
        self.latency = latency
        self.failures = failures
        self.status_code = status_code
        self.calls = 0

    def transport(self) -> httpx.MockTransport:
        """Return an :class:`httpx.MockTransport` routed to :meth:`handle`."""
        return httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        low, high = self.latency
        if high > 0:
            await asyncio.sleep(random.uniform(low, high))

        if self.calls <= self.failures:
            return httpx.Response(503, json={"message": "Service unavailable"})

        return httpx.Response(
            self.status_code,
            json={
                "url": str(request.url),
                "meta": {"request_id": secrets.token_hex(5)},
                "items": self.items,
            },
        )
