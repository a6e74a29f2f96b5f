from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class StatusKind(StrEnum):
    queued = "queued"
    processing = "processing"
    completed = "completed"
    error = "error"
    failed = "failed"
    idle = "idle"  # no summary process known for the key


TERMINAL_STATUSES = frozenset({StatusKind.completed, StatusKind.error, StatusKind.failed})

# Older backends report a job that has not been picked up yet as "pending"
LEGACY_STATUS_ALIASES = {"pending": StatusKind.queued.value}


class StatusRecord(BaseModel):
    """One observed status of a summary job, as returned by the backend.

    Notes:
    - `payload` carries the generated summary once `status` is `completed`;
      the backend calls this field `data`, both spellings are accepted.
    - `idle` means the backend knows no summary process for the meeting.
      It is a valid answer, not a failure.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: StatusKind
    payload: Optional[Any] = Field(
        default=None,
        validation_alias=AliasChoices("payload", "data"),
    )
    error: Optional[str] = None
    meeting_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("meeting_id", "meetingId"),
    )
    meeting_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("meeting_name", "meetingName"),
    )
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> Any:
        """Backend status strings are matched case-insensitively."""
        if isinstance(value, str):
            value = value.strip().lower()
            return LEGACY_STATUS_ALIASES.get(value, value)
        return value

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
