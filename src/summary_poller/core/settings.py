# Logging adapter for application-wide logging
from summary_poller.adapters.logging_adapter import LoggingAdapter

from pydantic import field_validator
from pydantic_settings import BaseSettings
from rich import print

from summary_poller.core.interfaces.logging import LoggingPort

# using pydantic_settings to manage environment variables
# and do automatic type casting in a central place
class PollerSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore"
    }
    SUMMARY_POLLER_LOG_LEVEL: str = "INFO"
    # Summary backend serving the per-meeting status endpoint
    SUMMARY_POLLER_BACKEND_URL: str = "http://localhost:5167"
    SUMMARY_POLLER_STATUS_PATH: str = "/get-summary/{key}"
    SUMMARY_POLLER_INTERVAL: float = 5.0  # seconds
    SUMMARY_POLLER_MAX_TICKS: int = 120
    SUMMARY_POLLER_IDLE_GRACE_TICKS: int = 1
    SUMMARY_POLLER_FETCH_TIMEOUT: float = 10.0  # seconds
    SUMMARY_POLLER_HOST: str = "0.0.0.0"
    SUMMARY_POLLER_PORT: int = 8000

    def print_settings(self, logger: LoggingPort):
        """Prints the settings for debugging purposes"""
        logger.info("Summary poller settings:")
        print(self)

    @field_validator("SUMMARY_POLLER_BACKEND_URL", mode="before")
    def strip_trailing_slash(cls, value: str) -> str:
        """Status paths are joined with a leading slash."""
        return value.rstrip("/")

    @field_validator("SUMMARY_POLLER_STATUS_PATH")
    def require_key_placeholder(cls, value: str) -> str:
        if "{key}" not in value:
            raise ValueError("SUMMARY_POLLER_STATUS_PATH must contain a '{key}' placeholder")
        if not value.startswith("/"):
            value = "/" + value
        return value


app_settings = PollerSettings()

logger = LoggingAdapter("summary_poller", app_settings.SUMMARY_POLLER_LOG_LEVEL)
