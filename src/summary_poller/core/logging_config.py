"""Central logging configuration utilities.

The composition root calls `configure_logging` once; it wires separate
stdout/stderr sinks and stamps every record with a correlation id. Core code
never touches handlers, it only emits through `LoggingPort` or module loggers.

The correlation id is the poll key inside a poll worker task (each task runs
in its own context copy) and the request id inside an HTTP request. Records
emitted outside both carry "-".
"""

from __future__ import annotations

import logging
import sys
from typing import Optional
import contextvars

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default="-"
)

DEFAULT_FORMAT = (
    "[%(asctime)s] %(levelname)s %(name)s %(correlation_id)s: %(message)s"
)


def coerce_level(level: int | str | None) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    key = str(level).upper().strip()
    return logging.getLevelNamesMapping().get(key, logging.INFO)


class _CorrelationIdFilter(logging.Filter):
    """Inject correlation id from contextvar into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple
        record.correlation_id = correlation_id_var.get()
        return True


class _LevelRangeFilter(logging.Filter):
    def __init__(self, min_level: int = logging.NOTSET, max_level: int = logging.CRITICAL):
        super().__init__()
        self.min_level = min_level
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        return self.min_level <= record.levelno <= self.max_level


def configure_logging(
    level: int | str | None = None,
    fmt: Optional[str] = None,
    disable_uvicorn_access: bool = False,
) -> None:
    """Configure root logger with separate stdout/stderr sinks & correlation id.

    Notes
    -----
    * Uvicorn inherits this configuration when `log_config=None` is used.
    * Access log suppression achieved by raising level on `uvicorn.access`.
    """
    numeric_level = coerce_level(level)
    formatter = logging.Formatter(fmt or DEFAULT_FORMAT)
    cid_filter = _CorrelationIdFilter()

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Clear existing handlers to avoid duplication on reload
    for h in list(root.handlers):
        root.removeHandler(h)

    sinks = (
        (sys.stdout, _LevelRangeFilter(max_level=logging.INFO)),
        (sys.stderr, _LevelRangeFilter(min_level=logging.WARNING)),
    )
    for stream, level_filter in sinks:
        handler = logging.StreamHandler(stream=stream)
        handler.addFilter(level_filter)
        handler.addFilter(cid_filter)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if disable_uvicorn_access:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger("summary_poller").debug(
        "Logging configured level=%s disable_uvicorn_access=%s", numeric_level, disable_uvicorn_access
    )
