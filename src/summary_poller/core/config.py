"""Configuration models for core domain components.

This module provides the Pydantic-based configuration consumed by the poll
registry and its workers, so the composition root and tests can inject
their own timings.
"""

from pydantic import BaseModel, Field, computed_field


class PollerConfig(BaseModel):
    """Configuration for PollRegistry / PollWorker behavior.

    Attributes:
        poll_interval: Seconds between ticks (float for test flexibility)
        max_ticks: Tick count at which a poll gives up and reports a timeout
        idle_grace_ticks: Number of leading ticks on which `idle` is not terminal
        fetch_timeout: Total seconds allowed for one status request
    """

    poll_interval: float = Field(
        default=5.0,
        gt=0,
        description="Interval in seconds between summary status requests"
    )

    max_ticks: int = Field(
        default=120,  # 10 minutes at 5-second intervals
        ge=1,
        description="Tick count at which polling stops with a timeout error"
    )

    idle_grace_ticks: int = Field(
        default=1,
        ge=0,
        description="An 'idle' status on one of the first N ticks keeps polling; later it ends the poll"
    )

    fetch_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Total timeout in seconds for a single status request"
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @computed_field
    @property
    def timeout_message(self) -> str:
        """Error text reported to the subscriber when `max_ticks` is reached."""
        total = self.poll_interval * self.max_ticks
        if total >= 60 and total % 60 == 0:
            minutes = int(total // 60)
            duration = f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
        else:
            duration = f"{total:g} seconds"
        return (
            f"Summary generation timed out after {duration}. "
            "Please try again or check your model configuration."
        )

    @classmethod
    def from_app_settings(cls, settings) -> "PollerConfig":
        """Factory method to construct config from a PollerSettings instance."""
        return cls(
            poll_interval=settings.SUMMARY_POLLER_INTERVAL,
            max_ticks=settings.SUMMARY_POLLER_MAX_TICKS,
            idle_grace_ticks=settings.SUMMARY_POLLER_IDLE_GRACE_TICKS,
            fetch_timeout=settings.SUMMARY_POLLER_FETCH_TIMEOUT,
        )
