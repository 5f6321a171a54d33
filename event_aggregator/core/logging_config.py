"""JSON logging for the aggregator service.

Installs exactly one JSON StreamHandler on the root logger. Each line carries
the standard envelope (timestamp, level, logger, message, service metadata)
plus whatever was passed through ``extra=``; keys matching the configured
redaction patterns are masked (case-insensitive, recursive).
"""

from __future__ import annotations

import json
import logging
import os
import socket
import traceback
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from .config import settings

REDACTED = "[REDACTED]"

# Attributes every LogRecord has; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def redact(data: Mapping[str, Any], patterns: tuple[str, ...]) -> dict[str, Any]:
    """Copy ``data`` with values masked wherever a key contains a pattern.

    ``patterns`` must already be lower-cased.
    """
    masked: dict[str, Any] = {}
    for key, value in data.items():
        lowered = key.lower()
        if any(p in lowered for p in patterns):
            masked[key] = REDACTED
        elif isinstance(value, Mapping):
            masked[key] = redact(value, patterns)
        else:
            masked[key] = value
    return masked


class JsonLogFormatter(logging.Formatter):
    def __init__(
        self, service: str, environment: str, redaction_patterns: Iterable[str]
    ):
        super().__init__()
        self._static = {
            "service": service,
            "environment": environment,
            "hostname": socket.gethostname(),
            "pid": os.getpid(),
        }
        self._patterns = tuple(p.lower() for p in redaction_patterns)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self._static,
        }
        extras = {
            k: v
            for k, v in vars(record).items()
            if k not in _RECORD_ATTRS and k not in payload
        }
        payload.update(extras)
        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stack": traceback.format_tb(tb),
            }
        return json.dumps(redact(payload, self._patterns), default=str)


def configure_logging(
    service: str | None = None,
    environment: str | None = None,
    level: str | None = None,
    redaction_patterns: Iterable[str] | None = None,
) -> logging.Logger:
    """Install the JSON handler on the root logger (idempotent)."""
    if redaction_patterns is None:
        redaction_patterns = settings.app_log_redaction_patterns
    formatter = JsonLogFormatter(
        service or settings.otel_service_name,
        environment or settings.app_environment,
        redaction_patterns,
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    levels = logging.getLevelNamesMapping()
    root.setLevel(levels.get((level or settings.app_log_level).upper(), logging.INFO))
    return root


__all__ = ["JsonLogFormatter", "configure_logging", "redact"]
