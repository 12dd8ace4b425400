"""Logging configuration.

Installs a single root handler with either a JSON or a plain text
formatter, plus a filter that masks credential values before any
record reaches a handler.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone

from keeper.core.config import Settings

# Keys whose values must never appear in log output
SENSITIVE_KEYS = ("password", "token", "secret", "authorization", "cookie")

_SENSITIVE_PATTERN = re.compile(
    r"(?P<key>\b\w*(?:%s)\w*\b)(?P<sep>['\"]?\s*[:=]\s*['\"]?)(?P<value>[^\s,'\"}]+)"
    % "|".join(SENSITIVE_KEYS),
    re.IGNORECASE,
)

# Attributes present on every LogRecord; anything else came from ``extra=``
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def redact(text: str) -> str:
    """Mask values that follow a sensitive key in free text."""
    return _SENSITIVE_PATTERN.sub(r"\g<key>\g<sep>***", text)


class RedactingFilter(logging.Filter):
    """Mask credential values in the message and in ``extra`` fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(record.getMessage())
        record.args = None
        for key in list(record.__dict__):
            if key in _RESERVED_ATTRS:
                continue
            if any(marker in key.lower() for marker in SENSITIVE_KEYS):
                setattr(record, key, "***")
        return True


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings.

    Safe to call more than once; the previous keeper handler is replaced.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name("keeper")
    if settings.LOG_FORMAT == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler.addFilter(RedactingFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "keeper":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())

    # SQL echo would print bound parameters, including password digests
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
