"""Logging set-up for scripts and notebooks using the package.

The library itself only logs at DEBUG and ships a ``NullHandler``; nothing
is printed unless :func:`configure_logging` is called.  Result objects carry
their diagnostics in a ``warnings`` list, which :func:`log_warnings` turns
into log records.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import IO, Any, Mapping

__all__ = ["JSONFormatter", "configure_logging", "log_warnings"]

PACKAGE_LOGGER = "fractalrisk"

_RESERVED = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Serialise a ``LogRecord`` as one JSON object per line."""

    def __init__(self, *, default_context: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._default_context = dict(default_context or {})

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        payload.update(self._default_context)
        for key, value in record.__dict__.items():
            if key in _RESERVED:
                continue
            payload.setdefault(key, value)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(
    level: int | str = logging.INFO,
    structured: bool = False,
    stream: IO[str] | None = None,
    *,
    context: Mapping[str, Any] | None = None,
) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Parameters
    ----------
    level:
        Threshold for the package logger and its handler.
    structured:
        Emit JSON lines through :class:`JSONFormatter` instead of plain text.
    stream:
        Target of the ``StreamHandler``; ``sys.stderr`` by default.
    context:
        Extra fields added to every JSON record (e.g. ``{"run": "eurusd"}``).

    Calling the function again replaces the handler installed previously.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_fractalrisk_handler", False):
            logger.removeHandler(handler)

    formatter: logging.Formatter
    if structured:
        formatter = JSONFormatter(default_context=context)
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler._fractalrisk_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def log_warnings(
    result: Any,
    logger: logging.Logger | None = None,
    level: int = logging.WARNING,
) -> int:
    """Log every entry of ``result.warnings``; return how many were logged."""

    logger = logger or logging.getLogger(PACKAGE_LOGGER)
    messages = list(getattr(result, "warnings", None) or [])
    for msg in messages:
        logger.log(level, "%s: %s", type(result).__name__, msg)
    return len(messages)
