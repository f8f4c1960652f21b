"""Structured JSON logging configuration.

Every entry carries timestamp, level, logger, message, and the request ID of
the HTTP request being handled (None outside requests). Fetch related fields
are added when a log call passes them through ``extra``: provider, prefix,
host, attempts, duration_ms, error_reason.

Host URLs may embed API keys as query parameters, so ``key=value`` pairs that
look like secrets are redacted from messages.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from icon_resolver.middleware.request_id import request_id_var

_SENSITIVE_PATTERNS = re.compile(
    r"(api.?key|apikey|secret|password|token|authorization)(\s*[=:]\s*)[^\s&]+",
    re.IGNORECASE,
)

_EXTRA_FIELDS = ("provider", "prefix", "host", "attempts", "duration_ms")


class JsonFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._sanitize(record.getMessage()),
            "request_id": getattr(record, "request_id", None) or request_id_var.get(),
        }

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                value = getattr(record, name)
                entry[name] = self._sanitize(value) if name == "host" and value else value

        if hasattr(record, "error_reason"):
            entry["error_reason"] = self._sanitize(str(getattr(record, "error_reason")))

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self._sanitize(self.formatException(record.exc_info))

        return json.dumps(entry, default=str)

    @staticmethod
    def _sanitize(text: str) -> str:
        """Remove secret-looking values from log text."""
        return _SENSITIVE_PATTERNS.sub(r"\1\2[REDACTED]", text)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with JSON formatting.

    Parameters
    ----------
    level:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
