import asyncio
import pytest
from aioresponses import aioresponses

from summary_poller.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from summary_poller.core.exceptions import StatusFetchError

"""
Tests for AioHttpClientAdapter behavior.

Each test checks how the adapter maps summary backend responses and errors
into StatusFetchError:
- Non-JSON bodies are a broken contract and map to upstream_status 502.
- HTTP error codes keep the backend status (404 lets the fetcher report idle).
- Network timeouts map to 504.
"""


@pytest.mark.asyncio
async def test_get_json_response():
    url = "http://backend.test/get-summary/m1"
    with aioresponses() as m:
        m.get(url, payload={"status": "processing"}, status=200)

        async with AioHttpClientAdapter() as client:
            data = await client.get(url)
            assert data == {"status": "processing"}


@pytest.mark.asyncio
async def test_get_non_json_response_raises_fetch_error():
    url = "http://backend.test/get-summary/bad"
    with aioresponses() as m:
        m.get(url, body="<html>error</html>", status=200, headers={"Content-Type": "text/html"})

        async with AioHttpClientAdapter() as client:
            with pytest.raises(StatusFetchError) as excinfo:
                await client.get(url)
            assert excinfo.value.upstream_status == 502


@pytest.mark.asyncio
async def test_get_keeps_http_error_status():
    url = "http://backend.test/get-summary/m1"
    with aioresponses() as m:
        m.get(url, status=500, body="Server Error")

        async with AioHttpClientAdapter() as client:
            with pytest.raises(StatusFetchError) as excinfo:
                await client.get(url)
            assert excinfo.value.upstream_status == 500
            assert "500" in str(excinfo.value)


@pytest.mark.asyncio
async def test_get_not_found_status():
    url = "http://backend.test/get-summary/unknown"
    with aioresponses() as m:
        m.get(url, status=404, payload={"detail": "not found"})

        async with AioHttpClientAdapter() as client:
            with pytest.raises(StatusFetchError) as excinfo:
                await client.get(url)
            assert excinfo.value.upstream_status == 404


@pytest.mark.asyncio
async def test_timeout_maps_to_504():
    url = "http://backend.test/slow"
    with aioresponses() as m:
        m.get(url, exception=asyncio.TimeoutError())

        async with AioHttpClientAdapter() as client:
            with pytest.raises(StatusFetchError) as excinfo:
                await client.get(url, timeout=0.5)
            assert excinfo.value.upstream_status == 504


@pytest.mark.asyncio
async def test_get_requires_context_manager():
    with pytest.raises(RuntimeError):
        await AioHttpClientAdapter().get("http://backend.test/get-summary/m1")
