"""StatusBoardPort: where observed statuses are kept for readers.

The board is both an update sink factory (per key) and a PollObserver, so
readers can see the latest status and why a poll ended.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

from summary_poller.core.models.status import StatusRecord

if TYPE_CHECKING:
	from summary_poller.core.managers.poll_worker import PollHandle, RetireReason, UpdateSink


class StatusBoardPort(ABC):
	"""Port abstraction for the latest status and history per poll key."""

	@abstractmethod
	def sink_for(self, key: str) -> "UpdateSink":
		"""Return an update sink that records every status delivered for `key`."""
		raise NotImplementedError

	@abstractmethod
	def latest(self, key: str) -> Optional[StatusRecord]:
		"""Return the most recent status recorded for `key`, or None."""
		raise NotImplementedError

	@abstractmethod
	def history(self, key: str) -> List[StatusRecord]:
		"""Return recorded statuses for `key`, oldest first."""
		raise NotImplementedError

	@abstractmethod
	def retire_reason(self, key: str) -> Optional["RetireReason"]:
		"""Return why the last poll for `key` ended, None while it is running."""
		raise NotImplementedError

	@abstractmethod
	def knows(self, key: str) -> bool:
		"""True once a poll has been started for `key`."""
		raise NotImplementedError

	@abstractmethod
	def on_poll_started(self, handle: "PollHandle") -> None:
		raise NotImplementedError

	@abstractmethod
	def on_poll_retired(self, handle: "PollHandle", reason: "RetireReason") -> None:
		raise NotImplementedError
