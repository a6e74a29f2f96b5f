"""Tests for HttpStatusFetcher: URL building, 404 handling and body validation."""

from typing import Any, Dict, List

import pytest

from summary_poller.adapters.http_status_fetcher import HttpStatusFetcher
from summary_poller.core.exceptions import StatusFetchError
from summary_poller.core.interfaces.http_client import HttpClientPort
from summary_poller.core.models.status import StatusKind


class FakeHttpClient(HttpClientPort):
    """Mapping-based fake HTTP client; values may be exceptions to raise."""

    def __init__(self, responses: Dict[str, Any]):
        self._responses = responses
        self.requests: List[tuple] = []

    async def __aenter__(self) -> HttpClientPort:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    async def get(self, url: str, timeout: float | None = None) -> Dict[str, Any]:
        self.requests.append((url, timeout))
        resp = self._responses[url]
        if isinstance(resp, Exception):
            raise resp
        return resp

    async def close(self) -> None:
        return None


BASE = "http://backend.local:5167"


@pytest.mark.asyncio
async def test_fetch_parses_status():
    client = FakeHttpClient({f"{BASE}/get-summary/m1": {"status": "processing", "meeting_id": "m1"}})
    fetcher = HttpStatusFetcher(client, BASE + "/", timeout=3.0)

    record = await fetcher.fetch("m1")

    assert record.status == StatusKind.processing
    assert client.requests == [(f"{BASE}/get-summary/m1", 3.0)]


@pytest.mark.asyncio
async def test_missing_meeting_id_defaults_to_key():
    client = FakeHttpClient({f"{BASE}/get-summary/m1": {"status": "queued"}})

    record = await HttpStatusFetcher(client, BASE).fetch("m1")

    assert record.meeting_id == "m1"


@pytest.mark.asyncio
async def test_key_is_url_quoted():
    client = FakeHttpClient({f"{BASE}/summaries/team%2Fweekly%20sync": {"status": "idle"}})
    fetcher = HttpStatusFetcher(client, BASE, status_path="/summaries/{key}")

    record = await fetcher.fetch("team/weekly sync")

    assert record.status == StatusKind.idle


@pytest.mark.asyncio
async def test_not_found_is_reported_as_idle():
    client = FakeHttpClient(
        {f"{BASE}/get-summary/m1": StatusFetchError("not found", upstream_status=404)}
    )

    record = await HttpStatusFetcher(client, BASE).fetch("m1")

    assert record.status == StatusKind.idle
    assert record.meeting_id == "m1"


@pytest.mark.asyncio
async def test_transport_error_is_raised_with_key():
    client = FakeHttpClient(
        {f"{BASE}/get-summary/m1": StatusFetchError("connection refused", upstream_status=502)}
    )

    with pytest.raises(StatusFetchError) as excinfo:
        await HttpStatusFetcher(client, BASE).fetch("m1")

    assert excinfo.value.key == "m1"
    assert excinfo.value.upstream_status == 502


@pytest.mark.asyncio
async def test_invalid_status_raises_fetch_error():
    client = FakeHttpClient({f"{BASE}/get-summary/m1": {"status": "exploded"}})

    with pytest.raises(StatusFetchError) as excinfo:
        await HttpStatusFetcher(client, BASE).fetch("m1")

    assert excinfo.value.message.startswith("Invalid summary status response")
    assert "status" in excinfo.value.diagnostic


@pytest.mark.asyncio
async def test_pending_status_keeps_job_running():
    client = FakeHttpClient({f"{BASE}/get-summary/m1": {"status": "pending", "meetingId": "m1"}})

    record = await HttpStatusFetcher(client, BASE).fetch("m1")

    assert record.status == StatusKind.queued


@pytest.mark.asyncio
async def test_non_object_body_raises_fetch_error():
    client = FakeHttpClient({f"{BASE}/get-summary/m1": ["not", "an", "object"]})

    with pytest.raises(StatusFetchError):
        await HttpStatusFetcher(client, BASE).fetch("m1")
