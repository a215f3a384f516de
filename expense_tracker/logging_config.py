"""
Logging configuration.

Two output styles are available: structured JSON lines for deployments
that ship logs to an aggregator, and a human-readable format for local
development.  Only the ``expense_tracker`` package logger is configured;
records still propagate to the root logger.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

PACKAGE_LOGGER = "expense_tracker"

# LogRecord attributes copied into structured output when present.
_CONTEXT_FIELDS = ("status", "duration_ms")


class StructuredFormatter(logging.Formatter):
    """Formatter that emits one JSON object per record."""

    def __init__(self, service_name: str = "expense-tracker"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Console formatter for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        context = [
            f"{name}={getattr(record, name)}"
            for name in _CONTEXT_FIELDS
            if hasattr(record, name)
        ]
        if context:
            formatted += f" [{', '.join(context)}]"
        return formatted


def setup_logging(
    level: str = "INFO",
    fmt: str = "text",
    stream: Optional[object] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR).
        fmt: ``"json"`` for structured output, anything else for text.
        stream: Output stream; defaults to stdout.

    Returns:
        The configured package logger.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level {level!r}.")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)

    # Repeated app factory calls must not stack handlers.
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter() if fmt == "json" else HumanReadableFormatter())
    handler.setLevel(numeric_level)
    logger.addHandler(handler)

    return logger
