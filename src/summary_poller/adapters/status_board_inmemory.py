"""In-memory implementation of StatusBoardPort.

Everything runs on the event loop thread, so no locking. State is lost on
restart; poll state is not meant to survive the process. At most `key_limit`
keys are remembered; once over the limit the longest-retired keys are
forgotten. Keys with a running poll are never evicted.
"""
from __future__ import annotations

import logging
from collections import OrderedDict, deque
from typing import Deque, List, Optional

from summary_poller.core.interfaces.status_board import StatusBoardPort
from summary_poller.core.managers.poll_worker import PollHandle, RetireReason, UpdateSink
from summary_poller.core.models.status import StatusRecord

logger = logging.getLogger(__name__)


class InMemoryStatusBoard(StatusBoardPort):
    def __init__(self, history_limit: int = 50, key_limit: int = 1000) -> None:
        self._history_limit = history_limit
        self._key_limit = key_limit
        self._history: OrderedDict[str, Deque[StatusRecord]] = OrderedDict()
        # None marks a key whose poll is still running
        self._retired: OrderedDict[str, Optional[RetireReason]] = OrderedDict()

    def sink_for(self, key: str) -> UpdateSink:
        def record(status: StatusRecord) -> None:
            self._history.setdefault(key, deque(maxlen=self._history_limit)).append(status)
            logger.debug(f"[board] recorded key={key} status={status.status}")

        return record

    def latest(self, key: str) -> Optional[StatusRecord]:
        entries = self._history.get(key)
        return entries[-1] if entries else None

    def history(self, key: str) -> List[StatusRecord]:
        return list(self._history.get(key, ()))

    def retire_reason(self, key: str) -> Optional[RetireReason]:
        return self._retired.get(key)

    def knows(self, key: str) -> bool:
        return key in self._retired or key in self._history

    def __len__(self) -> int:
        return len(self._retired.keys() | self._history.keys())

    def on_poll_started(self, handle: PollHandle) -> None:
        """A fresh poll starts with a clean history."""
        self._history[handle.key] = deque(maxlen=self._history_limit)
        self._history.move_to_end(handle.key)
        self._retired[handle.key] = None
        self._retired.move_to_end(handle.key)

    def on_poll_retired(self, handle: PollHandle, reason: RetireReason) -> None:
        # A replaced handle's key is already owned by its successor
        if reason == RetireReason.replaced:
            return
        self._retired[handle.key] = reason
        self._retired.move_to_end(handle.key)
        if reason == RetireReason.idle_after_start:
            logger.info(
                f"[board] key={handle.key} went idle after {handle.tick_count} ticks; "
                "summary finished or was never registered"
            )
        self._evict()

    def _evict(self) -> None:
        excess = len(self._retired) - self._key_limit
        if excess <= 0:
            return
        stale = [key for key, reason in self._retired.items() if reason is not None][:excess]
        for key in stale:
            del self._retired[key]
            self._history.pop(key, None)
        logger.debug(f"[board] evicted {len(stale)} retired key(s)")
