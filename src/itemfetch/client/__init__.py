"""HTTP client module for itemfetch.

Provides :class:`AsyncClient`, the retrying request orchestrator. It wraps
:class:`httpx.AsyncClient` and layers on an injected
:class:`~itemfetch.cache.TTLCache`, a per-attempt timeout enforced by
cancellation, and a bounded number of immediate retries.

Example::

    from itemfetch.cache import TTLCache
    from itemfetch.client import AsyncClient
    from itemfetch.models import RequestConfig

    async with AsyncClient(RequestConfig(), cache=TTLCache()) as client:
        body = await client.request("/items", params={"limit": 5})
"""

from itemfetch.client.async_client import AsyncClient

__all__ = ["AsyncClient"]
