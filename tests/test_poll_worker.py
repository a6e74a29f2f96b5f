"""Unit tests for PollWorker tick classification and PollHandle retirement.

Ticks are driven directly, without a running worker task.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from summary_poller.core.config import PollerConfig
from summary_poller.core.exceptions import StatusFetchError
from summary_poller.core.managers.poll_worker import PollHandle, PollWorker, RetireReason
from summary_poller.core.models.status import StatusKind, StatusRecord


# --- Test Fixtures ---

@pytest.fixture
def config():
    return PollerConfig(poll_interval=0.01, max_ticks=5)


@pytest.fixture
def updates():
    return []


@pytest.fixture
def handle(updates):
    return PollHandle(key="meeting-1", job_id="process-1", on_update=updates.append)


@pytest.fixture
def fetcher():
    fetcher = Mock()
    fetcher.fetch = AsyncMock(return_value=StatusRecord(status=StatusKind.processing))
    return fetcher


@pytest.fixture
def on_retire(handle):
    """Retire callback mirroring the registry's: retire the handle with the reason."""
    return Mock(side_effect=lambda h, reason: h.retire(reason))


@pytest.fixture
def worker(handle, fetcher, config, on_retire):
    return PollWorker(handle, fetcher, config, on_retire)


# --- Classification ---

class TestClassify:

    @pytest.mark.parametrize("status", [StatusKind.completed, StatusKind.error, StatusKind.failed])
    def test_terminal_statuses(self, worker, status):
        assert worker.classify(StatusRecord(status=status), 1) == RetireReason.terminal_status

    @pytest.mark.parametrize("status", [StatusKind.queued, StatusKind.processing])
    def test_pending_statuses_keep_polling(self, worker, status):
        assert worker.classify(StatusRecord(status=status), 50) is None

    def test_idle_on_first_tick_is_not_terminal(self, worker):
        assert worker.classify(StatusRecord(status=StatusKind.idle), 1) is None

    def test_idle_on_later_ticks_is_terminal(self, worker):
        assert worker.classify(StatusRecord(status=StatusKind.idle), 2) == RetireReason.idle_after_start
        assert worker.classify(StatusRecord(status=StatusKind.idle), 119) == RetireReason.idle_after_start


# --- Ticks ---

class TestTick:

    @pytest.mark.asyncio
    async def test_non_terminal_tick_delivers_and_continues(self, worker, handle, updates, on_retire):
        reason = await worker.tick()

        assert reason is None
        assert handle.tick_count == 1
        assert [u.status for u in updates] == [StatusKind.processing]
        on_retire.assert_not_called()
        assert handle.active

    @pytest.mark.asyncio
    async def test_terminal_tick_delivers_then_retires(self, worker, handle, updates, fetcher, on_retire):
        fetcher.fetch.return_value = StatusRecord(status=StatusKind.completed, payload={"markdown": "done"})

        reason = await worker.tick()

        assert reason == RetireReason.terminal_status
        assert updates[0].payload == {"markdown": "done"}
        on_retire.assert_called_once_with(handle, RetireReason.terminal_status)
        assert handle.retired == RetireReason.terminal_status

    @pytest.mark.asyncio
    async def test_fetch_error_becomes_error_record(self, worker, handle, updates, fetcher):
        fetcher.fetch.side_effect = StatusFetchError("The request to the summary backend timed out", upstream_status=504)

        reason = await worker.tick()

        assert reason == RetireReason.fetch_failed
        assert updates == [
            StatusRecord(status=StatusKind.error, error="The request to the summary backend timed out")
        ]

    @pytest.mark.asyncio
    async def test_timeout_tick_skips_fetch(self, worker, handle, updates, fetcher, config):
        handle.tick_count = config.max_ticks - 1

        reason = await worker.tick()

        assert reason == RetireReason.timed_out
        fetcher.fetch.assert_not_awaited()
        assert handle.tick_count == config.max_ticks
        assert updates[0].status == StatusKind.error
        assert updates[0].error == config.timeout_message

    @pytest.mark.asyncio
    async def test_tick_count_increments_once_per_tick(self, worker, handle):
        for _ in range(3):
            await worker.tick()

        assert handle.tick_count == 3

    @pytest.mark.asyncio
    async def test_status_arriving_after_retirement_is_dropped(self, worker, handle, updates, fetcher, on_retire):
        async def fetch_then_get_stopped(key):
            handle.retire(RetireReason.stopped)
            return StatusRecord(status=StatusKind.completed)

        fetcher.fetch.side_effect = fetch_then_get_stopped

        reason = await worker.tick()

        assert reason == RetireReason.stopped
        assert updates == []
        on_retire.assert_not_called()


# --- Handle ---

class TestPollHandle:

    def test_retire_only_once(self, handle):
        assert handle.retire(RetireReason.stopped) is True
        assert handle.retire(RetireReason.terminal_status) is False
        assert handle.retired == RetireReason.stopped
        assert handle.active is False

    @pytest.mark.asyncio
    async def test_wait_without_task_returns(self, handle):
        await handle.wait()
