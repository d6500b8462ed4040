"""Logging setup with secret redaction.

Every record that reaches a configured handler is passed through
``sanitize_text``. The ``httpx`` logger is covered too because it logs full
request URLs, which carry the key for query-parameter providers.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ai_key_validator.utils.redaction import sanitize_text

if TYPE_CHECKING:
    from ai_key_validator.utils.config import LoggingSettings

PACKAGE_LOGGER = "ai_key_validator"
REDACTED_LOGGERS = (PACKAGE_LOGGER, "httpx", "httpcore")


class RedactingFilter(logging.Filter):
    """Rewrite log records so key-shaped values never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Replace the rendered message and cached traceback with redacted text."""
        record.msg = sanitize_text(record.getMessage())
        record.args = None
        if record.exc_text:
            record.exc_text = sanitize_text(record.exc_text)
        return True


class RedactingFormatter(logging.Formatter):
    """Console formatter that also scrubs rendered tracebacks."""

    def formatException(self, ei) -> str:  # noqa: N802
        """Format the traceback, then redact it."""
        return sanitize_text(super().formatException(ei))


class JsonFormatter(logging.Formatter):
    """Format records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        """Render the record, including any redacted traceback, as JSON."""
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(payload)


def configure_logging(settings: LoggingSettings | None = None) -> logging.Handler:
    """Attach a redacting handler to the package and HTTP client loggers.

    Args:
        settings: Logging settings (defaults are used when omitted).

    Returns:
        The installed handler.
    """
    if settings is None:
        from ai_key_validator.utils.config import LoggingSettings

        settings = LoggingSettings()

    handler = logging.StreamHandler()
    if settings.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            RedactingFormatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
    if settings.redact_secrets:
        handler.addFilter(RedactingFilter())
    handler._akv_handler = True  # type: ignore[attr-defined]

    level = logging.getLevelName(settings.level.upper())
    for name in REDACTED_LOGGERS:
        logger = logging.getLogger(name)
        for existing in [h for h in logger.handlers if getattr(h, "_akv_handler", False)]:
            logger.removeHandler(existing)
        logger.addHandler(handler)
        logger.setLevel(level if isinstance(level, int) else logging.WARNING)
        logger.propagate = False

    return handler
