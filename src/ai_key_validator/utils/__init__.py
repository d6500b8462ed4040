"""Utility functions and helpers."""

from ai_key_validator.utils.logging_setup import (
    JsonFormatter,
    RedactingFilter,
    RedactingFormatter,
    configure_logging,
)
from ai_key_validator.utils.redaction import redact_in_text, redact_secret, sanitize_text

__all__ = [
    "JsonFormatter",
    "RedactingFilter",
    "RedactingFormatter",
    "configure_logging",
    "redact_in_text",
    "redact_secret",
    "sanitize_text",
]
