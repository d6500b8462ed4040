"""Secret redaction utilities for safe logging.

This module provides functions for redacting key material before it is
written to logs, placed in error messages, or displayed to users.
"""

import re

MIN_MASKED_LENGTH = 12

# Key-shaped substrings for every built-in provider, plus generic carriers
# (bearer tokens and ``key=`` query parameters).
_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(?i)(bearer\s+)[A-Za-z0-9\-_.=]+"), r"\1[REDACTED]"),
    (re.compile(r"(?i)([?&](?:api_)?key=)[^&\s\"']+"), r"\1[REDACTED]"),
    (re.compile(r"(?i)(x-api-key['\"]?\s*[:=]\s*['\"]?)[^\s'\",}]+"), r"\1[REDACTED]"),
    (re.compile(r"sk-ant-[A-Za-z0-9\-_]{8,}"), "sk-ant-[REDACTED]"),
    (re.compile(r"sk-[A-Za-z0-9\-_]{8,}"), "sk-[REDACTED]"),
    (re.compile(r"AIza[A-Za-z0-9\-_]{8,}"), "AIza[REDACTED]"),
    (re.compile(r"gsk_[A-Za-z0-9]{8,}"), "gsk_[REDACTED]"),
    (re.compile(r"hf_[A-Za-z0-9]{8,}"), "hf_[REDACTED]"),
]


def redact_secret(secret: str, head: int = 8, tail: int = 4) -> str:
    """Mask a key for display, keeping a short head and tail.

    Keys under 12 characters are masked completely, and no more than a third
    of a key is ever shown at either end.

    Args:
        secret: Key material.
        head: Characters kept at the start.
        tail: Characters kept at the end.

    Returns:
        A label like ``"sk-abcDE****...****3456"``.
    """
    if not secret:
        return ""
    if len(secret) < MIN_MASKED_LENGTH:
        return "*" * len(secret)

    third = len(secret) // 3
    head, tail = min(head, third), min(tail, third)
    return f"{secret[:head]}****...****{secret[len(secret) - tail :]}"


def sanitize_text(text: str) -> str:
    """Remove key-shaped substrings from free text.

    Used on exception messages and log records, where the exact secret is
    not known but provider-shaped keys or auth carriers may appear.

    Args:
        text: Text that may contain key material.

    Returns:
        Text with every sensitive match replaced by a placeholder.

    Examples:
        >>> sanitize_text("GET https://x.test/models?key=AIzaSyAbc123def456")
        'GET https://x.test/models?key=[REDACTED]'
    """
    if not text:
        return text

    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def redact_in_text(text: str, secret: str, replacement: str = "[REDACTED]") -> str:
    """Replace every occurrence of a known key in ``text``.

    Complements ``sanitize_text`` for keys that do not look like any
    built-in provider's, such as those of custom providers.
    """
    if not secret or not text:
        return text
    return text.replace(secret, replacement)
