"""Tests for ItemLoader and RuntimeState transitions."""

from __future__ import annotations

import httpx
import pytest

from itemfetch.cache import TTLCache
from itemfetch.client import AsyncClient
from itemfetch.exceptions import RetriesExhaustedError
from itemfetch.loader import ItemLoader
from itemfetch.models import RequestConfig, RuntimeState
from itemfetch.transport import MockItemsEndpoint


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


def _endpoint(**kwargs) -> MockItemsEndpoint:
    return MockItemsEndpoint(latency=(0.0, 0.0), **kwargs)


class TestLoadItems:
    @pytest.mark.asyncio
    async def test_successful_load_populates_state(self, request_config) -> None:
        endpoint = _endpoint()
        async with AsyncClient(request_config, transport=endpoint.transport()) as client:
            state = await ItemLoader(client).load_items()

        assert state.loading is False
        assert state.error is None
        assert state.data == ["alpha-10", "beta-5"]
        assert state.summary is not None
        assert state.summary.total == 3
        assert state.summary.active_count == 2
        assert state.summary.max_score == 10
        assert state.last_updated is not None

    @pytest.mark.asyncio
    async def test_default_params_sent(self, request_config) -> None:
        seen: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, json={"items": []})

        async with AsyncClient(request_config, transport=httpx.MockTransport(handler)) as client:
            await ItemLoader(client).load_items()

        assert seen[0].params["limit"] == "5"
        assert seen[0].params["sort"] == "score"

    @pytest.mark.asyncio
    async def test_threshold_disabled(self, request_config) -> None:
        async with AsyncClient(request_config, transport=_endpoint().transport()) as client:
            state = await ItemLoader(client, min_score=None).load_items()
        assert state.data == ["alpha-10", "beta-5"]

    @pytest.mark.asyncio
    async def test_higher_threshold(self, request_config) -> None:
        async with AsyncClient(request_config, transport=_endpoint().transport()) as client:
            state = await ItemLoader(client, min_score=5).load_items()
        assert state.data == ["alpha-10"]

    @pytest.mark.asyncio
    async def test_failure_records_error_and_clears_loading(self) -> None:
        config = RequestConfig(retry_count=2)
        endpoint = _endpoint(failures=10)
        async with AsyncClient(config, transport=endpoint.transport()) as client:
            loader = ItemLoader(client)
            state = await loader.load_items()

        assert state.loading is False
        assert "failed after 2 attempt(s)" in state.error
        assert isinstance(loader.last_error, RetriesExhaustedError)
        assert endpoint.calls == 2

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_data(self) -> None:
        config = RequestConfig(retry_count=1, cache_enabled=False)
        endpoint = _endpoint()
        state = RuntimeState()
        async with AsyncClient(config, transport=endpoint.transport()) as client:
            loader = ItemLoader(client, state=state)
            await loader.load_items()
            endpoint.status_code = 500
            await loader.load_items()

        assert state.error is not None
        assert state.data == ["alpha-10", "beta-5"]

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self) -> None:
        config = RequestConfig(retry_count=1)
        endpoint = _endpoint(failures=1)
        async with AsyncClient(config, transport=endpoint.transport()) as client:
            loader = ItemLoader(client)
            await loader.load_items()
            assert loader.state.error is not None
            await loader.load_items()

        assert loader.state.error is None
        assert loader.last_error is None

    @pytest.mark.asyncio
    async def test_second_load_served_from_cache(self, request_config) -> None:
        endpoint = _endpoint()
        async with AsyncClient(
            request_config, cache=TTLCache(), transport=endpoint.transport()
        ) as client:
            loader = ItemLoader(client)
            first = (await loader.load_items()).last_updated
            second = (await loader.load_items()).last_updated

        assert endpoint.calls == 1
        assert first == second
