"""Tests for HTTP-based adapters."""

import asyncio

import httpx
import pytest

from nutrition_estimator.adapters.fdc_client import HttpxFdcClient
from nutrition_estimator.adapters.off_client import HttpxOpenFoodFactsClient
from nutrition_estimator.errors import ConfigurationError


def test_fdc_client_search_sends_query_and_data_types() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"foods": []})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=async_client,
    )

    search = asyncio.run(client.search_foods("fried rice", page_size=5))

    assert search == {"foods": []}
    request = seen[0]
    assert request.url.path.endswith("/foods/search")
    assert request.url.params["query"] == "fried rice"
    assert request.url.params["pageSize"] == "5"
    assert request.url.params["api_key"] == "key"
    assert request.url.params["dataType"] == (
        "SR Legacy,Survey (FNDDS),Foundation,Branded"
    )


def test_fdc_client_raises_for_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("rice"))


def test_fdc_client_requires_api_key() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    client = HttpxFdcClient(
        api_key="",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(ConfigurationError):
        asyncio.run(client.search_foods("rice"))


def test_off_client_returns_product() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v0/product/8991234567890.json"
        return httpx.Response(
            200,
            json={"status": 1, "product": {"nutriments": {"fat_100g": 3}}},
        )

    transport = httpx.MockTransport(handler)
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    product = asyncio.run(client.get_product("8991234567890"))

    assert product == {"nutriments": {"fat_100g": 3}}


def test_off_client_returns_none_for_missing_product() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    assert asyncio.run(client.get_product("0000")) is None
