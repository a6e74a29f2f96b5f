"""PollRegistry: keyed owner of every running summary poll.

Responsibilities:
1. Keep at most one live PollHandle per key; a new `start` replaces the old one.
2. Start a PollWorker task per handle.
3. Retire handles through a single path (cancel task, then drop entry).
4. Tear everything down on `dispose`.

`start` and `stop` never raise for job-level problems; those reach the
subscriber as status records.
"""

from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional

from summary_poller.core.config import PollerConfig
from summary_poller.core.exceptions import InvalidKeyError, validate_key
from summary_poller.core.interfaces.observers import PollObserver
from summary_poller.core.interfaces.status_fetcher import StatusFetcherPort
from summary_poller.core.managers.poll_worker import (
    PollHandle,
    PollWorker,
    RetireReason,
    SleepFn,
    UpdateSink,
)
from summary_poller.core.settings import logger


class PollRegistry:
    """Starts, replaces and stops per-key summary polls.

    Must be used from the event loop thread; `start` without a running loop is ignored.

    Attributes:
        config: Immutable poll timings (interval, max ticks, idle grace)
    """

    def __init__(
        self,
        fetcher: StatusFetcherPort,
        config: Optional[PollerConfig] = None,
        observers: Optional[Iterable[PollObserver]] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._fetcher = fetcher
        self.config = config or PollerConfig()
        self._observers: List[PollObserver] = list(observers or [])
        self._sleep = sleep
        self._handles: Dict[str, PollHandle] = {}
        self._disposed = False

    def _notify_started(self, handle: PollHandle) -> None:
        for observer in self._observers:
            try:
                observer.on_poll_started(handle)
            except Exception as exc:
                logger.error(
                    f"[observer:error] on_poll_started failed observer={type(observer).__name__} "
                    f"key={handle.key} error={exc}"
                )

    def _notify_retired(self, handle: PollHandle, reason: RetireReason) -> None:
        for observer in self._observers:
            try:
                observer.on_poll_retired(handle, reason)
            except Exception as exc:
                logger.error(
                    f"[observer:error] on_poll_retired failed observer={type(observer).__name__} "
                    f"key={handle.key} error={exc}"
                )

    # ---------------- Public API -----------------
    def start(self, key: str, job_id: str, on_update: UpdateSink) -> None:
        """Begin polling `key`; the first tick runs one interval from now."""
        if self._disposed:
            logger.warning(f"[poll:start] registry disposed; ignoring key={key!r}")
            return
        try:
            validate_key(key)
        except InvalidKeyError as exc:
            logger.warning(f"[poll:start] rejected: {exc}")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"[poll:start] no running event loop; ignoring key={key}")
            return

        previous = self._handles.get(key)
        if previous is not None:
            logger.info(
                f"[poll:start] replacing active poll key={key} "
                f"old_job_id={previous.job_id} new_job_id={job_id}"
            )
            self._retire(previous, RetireReason.replaced)

        handle = PollHandle(key=key, job_id=job_id, on_update=on_update)
        worker = PollWorker(handle, self._fetcher, self.config, self._retire, self._sleep)
        handle.task = loop.create_task(worker.run(), name=f"summary-poll:{key}")
        self._handles[key] = handle
        logger.info(
            f"[poll:start] polling key={key} job_id={job_id} every {self.config.poll_interval}s"
        )
        self._notify_started(handle)

    def stop(self, key: str) -> None:
        """Cancel the poll for `key`. Unknown keys are ignored."""
        handle = self._handles.get(key) if isinstance(key, str) else None
        if handle is None:
            logger.debug(f"[poll:stop] no active poll key={key!r}")
            return
        self._retire(handle, RetireReason.stopped)

    def has(self, key: str) -> bool:
        return key in self._handles

    def get(self, key: str) -> Optional[PollHandle]:
        return self._handles.get(key)

    def active_keys(self) -> List[str]:
        return list(self._handles)

    def handles(self) -> List[PollHandle]:
        return list(self._handles.values())

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, key: object) -> bool:
        return key in self._handles

    def cancel_all(self) -> None:
        """Cancel every active poll without waiting for the tasks to unwind."""
        if self._handles:
            logger.info(f"[poll:dispose] cancelling {len(self._handles)} active poll(s)")
        for handle in list(self._handles.values()):
            self._retire(handle, RetireReason.disposed)

    async def dispose(self) -> None:
        """Cancel every active poll and wait for the tasks to finish.

        Further `start` calls are ignored.
        """
        self._disposed = True
        handles = list(self._handles.values())
        self.cancel_all()
        current = asyncio.current_task()
        tasks = [h.task for h in handles if h.task is not None and h.task is not current]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ---------------- Retirement -----------------
    def _retire(self, handle: PollHandle, reason: RetireReason) -> None:
        """Single teardown path: cancel the task first, then drop the entry."""
        if not handle.retire(reason):
            return
        # A replacement may already occupy the key; only remove this handle
        if self._handles.get(handle.key) is handle:
            del self._handles[handle.key]
        logger.info(
            f"[poll:retire] key={handle.key} job_id={handle.job_id} "
            f"reason={reason} ticks={handle.tick_count}"
        )
        self._notify_retired(handle, reason)
