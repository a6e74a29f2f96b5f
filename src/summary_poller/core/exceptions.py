from typing import Optional


class PollerError(Exception):
    """Base exception for summary polling failures."""


class InvalidKeyError(PollerError):
    """Raised when a poll key is empty or not a string.

    `PollRegistry.start` never lets this escape; it logs and ignores the call.
    The HTTP surface maps it to a 422 problem response.
    """

    def __init__(self, key: object):
        self.key = key
        super().__init__(f"Poll key must be a non-empty string, got {key!r}")


class StatusFetchError(PollerError):
    """Raised when the status endpoint cannot be read or its body cannot be parsed.

    A fetch error ends the poll for that key; it is reported to the subscriber
    as an `error` status and never retried.

    Attributes:
        message: Human-readable error description (delivered to the subscriber)
        key: Poll key the fetch was made for, if known
        upstream_status: HTTP status code from the backend (if applicable)
        diagnostic: Technical diagnostic information for debugging
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        upstream_status: Optional[int] = None,
        diagnostic: Optional[str] = None,
    ):
        self.message = message
        self.key = key
        self.upstream_status = upstream_status
        self.diagnostic = diagnostic
        super().__init__(message)


def validate_key(key: object) -> str:
    """Return `key` unchanged if it is usable as a poll key, else raise InvalidKeyError."""
    if not isinstance(key, str) or not key.strip():
        raise InvalidKeyError(key)
    return key
