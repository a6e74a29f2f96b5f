"""Observer protocol for poll lifecycle transitions.

Observers let side effects (recording why a poll ended, metrics, UI state)
hang off the registry without the registry knowing about them. The per-tick
status itself goes to the handle's update sink, not to observers.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from summary_poller.core.managers.poll_worker import PollHandle, RetireReason


class PollObserver(Protocol):
    """Observer protocol for poll handle lifecycle events.

    - on_poll_started: after a new handle is installed in the registry
    - on_poll_retired: after a handle left the registry, with the reason

    Both are called synchronously on the event loop; they must not block.
    """

    def on_poll_started(self, handle: "PollHandle") -> None:
        ...

    def on_poll_retired(self, handle: "PollHandle", reason: "RetireReason") -> None:
        """Called once per handle.

        `reason` distinguishes a real terminal status from an `idle` seen
        after the grace ticks (`RetireReason.idle_after_start`), which may
        also mean the backend had not registered the job yet.
        """
        ...
