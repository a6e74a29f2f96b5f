"""PollWorker: the tick loop behind one summary poll.

Each tick, in order:
1. Increment the handle's tick count.
2. At `max_ticks`, report a synthesized timeout error and retire (no fetch).
3. Otherwise fetch the status and classify it:
   - completed / error / failed: deliver, retire
   - idle after the grace ticks: deliver, retire (job finished or vanished)
   - idle within the grace ticks, queued, processing: deliver, keep polling
   - fetch raised: deliver an error record, retire (never retried)

The handle owns the asyncio task that runs this loop; the task stands in for
the timer. Retiring a handle cancels the task before the registry forgets it,
and a retired handle never delivers, so no update can reach a subscriber
after its poll was stopped or replaced.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Awaitable, Callable, Optional

from summary_poller.core.config import PollerConfig
from summary_poller.core.interfaces.status_fetcher import StatusFetcherPort
from summary_poller.core.logging_config import correlation_id_var
from summary_poller.core.models.status import StatusKind, StatusRecord
from summary_poller.core.settings import logger

UpdateSink = Callable[[StatusRecord], None]
SleepFn = Callable[[float], Awaitable[None]]


class RetireReason(StrEnum):
    terminal_status = "terminal_status"
    idle_after_start = "idle_after_start"
    fetch_failed = "fetch_failed"
    timed_out = "timed_out"
    stopped = "stopped"
    replaced = "replaced"
    disposed = "disposed"


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


@dataclass(eq=False)
class PollHandle:
    """Live lifecycle record of one poll. Never reused once retired."""

    key: str
    job_id: str
    on_update: UpdateSink = field(repr=False)
    tick_count: int = 0
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    retired: Optional[RetireReason] = None

    @property
    def active(self) -> bool:
        return self.retired is None

    def retire(self, reason: RetireReason) -> bool:
        """Mark the handle retired and cancel its task.

        Returns False if it was already retired. The running task is not
        cancelled from inside itself; its loop sees `active` turn False.
        """
        if self.retired is not None:
            return False
        self.retired = reason
        task = self.task
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
        return True

    async def wait(self) -> None:
        """Wait until the worker task has finished, however it ended."""
        if self.task is not None:
            await asyncio.gather(self.task, return_exceptions=True)


class PollWorker:
    def __init__(
        self,
        handle: PollHandle,
        fetcher: StatusFetcherPort,
        config: PollerConfig,
        on_retire: Callable[[PollHandle, RetireReason], None],
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.handle = handle
        self._fetcher = fetcher
        self._config = config
        self._on_retire = on_retire
        self._sleep = sleep

    async def run(self) -> None:
        # The task runs in its own context copy; tag its log lines with the key
        correlation_id_var.set(self.handle.key)
        logger.debug(
            f"[poll:worker] started key={self.handle.key} job_id={self.handle.job_id} "
            f"interval={self._config.poll_interval}s max_ticks={self._config.max_ticks}"
        )
        while self.handle.active:
            await self._sleep(self._config.poll_interval)
            if not self.handle.active:
                break
            if await self.tick() is not None:
                break
        logger.debug(
            f"[poll:worker] finished key={self.handle.key} ticks={self.handle.tick_count} "
            f"reason={self.handle.retired}"
        )

    async def tick(self) -> Optional[RetireReason]:
        """Run one fetch-and-classify cycle.

        Returns the retire reason if the poll ended during this tick, else None.
        """
        handle = self.handle
        handle.tick_count += 1

        if handle.tick_count >= self._config.max_ticks:
            logger.warning(
                f"[poll:timeout] key={handle.key} job_id={handle.job_id} "
                f"gave up after {handle.tick_count} ticks"
            )
            timeout_record = StatusRecord(
                status=StatusKind.error, error=self._config.timeout_message
            )
            return self._finish(timeout_record, RetireReason.timed_out)

        try:
            record = await self._fetcher.fetch(handle.key)
        except Exception as exc:
            logger.error(
                f"[poll:fetch:error] key={handle.key} tick={handle.tick_count} error={exc}"
            )
            error_record = StatusRecord(
                status=StatusKind.error, error=str(exc) or "Unknown error"
            )
            return self._finish(error_record, RetireReason.fetch_failed)

        if not handle.active:
            logger.debug(
                f"[poll:tick] dropping status for retired handle key={handle.key} status={record.status}"
            )
            return handle.retired

        logger.debug(
            f"[poll:tick] key={handle.key} tick={handle.tick_count} status={record.status}"
        )
        reason = self.classify(record, handle.tick_count)
        if reason is None:
            self._deliver(record)
            return None
        return self._finish(record, reason)

    def classify(self, record: StatusRecord, tick_count: int) -> Optional[RetireReason]:
        """Return the retire reason for a fetched status, or None to keep polling."""
        if record.is_terminal():
            return RetireReason.terminal_status
        if record.status == StatusKind.idle and tick_count > self._config.idle_grace_ticks:
            return RetireReason.idle_after_start
        return None

    def _finish(self, record: StatusRecord, reason: RetireReason) -> RetireReason:
        self._deliver(record)
        # on_update may already have stopped or replaced this handle
        self._on_retire(self.handle, reason)
        return self.handle.retired or reason

    def _deliver(self, record: StatusRecord) -> bool:
        handle = self.handle
        if not handle.active:
            return False
        try:
            handle.on_update(record)
        except Exception as exc:
            logger.error(
                f"[poll:sink:error] on_update failed key={handle.key} "
                f"status={record.status} error={exc}"
            )
        return True
