import logging

from summary_poller.core.interfaces.logging import LoggingPort
from summary_poller.core.logging_config import coerce_level


class LoggingAdapter(LoggingPort):
    """Concrete logging adapter.

    Delegates to Python's logging without installing handlers of its own, so
    `configure_logging` in the composition root controls the sinks. The poll
    key / request id is injected by the root handlers' filter.
    """

    def __init__(self, name: str = "summary_poller", log_level: int | str = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(coerce_level(log_level))
        # Bubble up to the stdout/stderr sinks on the root logger
        self.logger.propagate = True
        self.logger.debug("Initialized logger name=%s level=%s", name, self.logger.level)

    def info(self, msg: str, *args):
        self.logger.info(msg, *args)

    def warning(self, msg: str, *args):
        self.logger.warning(msg, *args)

    def error(self, msg: str, *args):
        self.logger.error(msg, *args)

    def debug(self, msg: str, *args):
        self.logger.debug(msg, *args)
