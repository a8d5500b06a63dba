"""Logging configuration for the IEP extraction backend.

Log records are rendered as single-line JSON so that the structured context
passed around by the retry engine (``extra=`` fields) survives into log
aggregation.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from ..config import get_settings

ROOT_LOGGER_NAME = "iep_backend"

RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter that keeps ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str | None = None) -> logging.Logger:
    """Install the package handler once and return the package logger."""

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    settings = get_settings()
    logger.setLevel((level or settings.log_level).upper())
    if getattr(logger, "_iep_configured", False):
        return logger

    handler = logging.StreamHandler(sys.stderr)
    if settings.log_json:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    logger.addHandler(handler)
    logger._iep_configured = True  # type: ignore[attr-defined]
    return logger


__all__ = ["RESERVED_ATTRS", "ROOT_LOGGER_NAME", "StructuredFormatter", "configure_logging"]
