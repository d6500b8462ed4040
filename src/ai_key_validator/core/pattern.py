"""Offline key format validation.

Pattern validation is pure string inspection: no I/O and no state. Checks
run in a fixed priority order (prefix, then length, then character set) so
a key failing on several axes always reports the first failing one.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field

from ai_key_validator.core.models import ErrorKind, PatternResult

# Upper bound on any key the validator will inspect at all.
MAX_KEY_LENGTH = 512


@dataclass(frozen=True)
class KeyFormat:
    """Prefix, length and charset rules for a provider's keys.

    Attributes:
        prefix: Required literal prefix.
        length: Exact total length, or an inclusive (min, max) range.
        charset: Character class (regex syntax, without brackets) allowed
            in the key body after the prefix.
        charset_description: Human-readable form of ``charset``.
        example: Masked example of a well-formed key.
    """

    prefix: str
    length: int | tuple[int, int]
    charset: str
    charset_description: str = ""
    example: str = ""
    _body_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Compile the body pattern once."""
        object.__setattr__(self, "_body_re", re.compile(f"[{self.charset}]*", re.ASCII))

    @property
    def min_length(self) -> int:
        """Smallest accepted total length."""
        return self.length if isinstance(self.length, int) else self.length[0]

    @property
    def max_length(self) -> int:
        """Largest accepted total length."""
        return self.length if isinstance(self.length, int) else self.length[1]

    def describe_length(self) -> str:
        """Return the accepted length as text."""
        if self.min_length == self.max_length:
            return f"exactly {self.min_length} characters"
        return f"between {self.min_length} and {self.max_length} characters"

    def body_matches(self, body: str) -> bool:
        """Check that every body character is in the allowed set."""
        return self._body_re.fullmatch(body) is not None

    @property
    def regex(self) -> re.Pattern[str]:
        """Full-key regular expression equivalent to this format."""
        body_min = self.min_length - len(self.prefix)
        body_max = self.max_length - len(self.prefix)
        return re.compile(
            rf"^{re.escape(self.prefix)}[{self.charset}]{{{body_min},{body_max}}}$",
            re.ASCII,
        )


def validate_key_pattern(
    key: object,
    key_format: KeyFormat,
    provider: str = "",
    display_name: str = "",
) -> PatternResult:
    """Check a key against a provider format.

    Args:
        key: Candidate key. Anything that is not a string fails on prefix.
        key_format: The provider's key format.
        provider: Provider identifier to stamp on the result.
        display_name: Human-readable provider name used in messages.

    Returns:
        PatternResult describing the first failing axis, or success.
    """
    started = time.perf_counter()
    label = display_name or provider or "Provider"

    def result(error_kind: ErrorKind | None, message: str) -> PatternResult:
        return PatternResult(
            valid=error_kind is None,
            error_kind=error_kind,
            message=message,
            provider=provider,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )

    if not isinstance(key, str) or not key.startswith(key_format.prefix):
        return result(
            ErrorKind.INVALID_PREFIX,
            f"{label} API keys must start with '{key_format.prefix}'",
        )

    if not key_format.min_length <= len(key) <= key_format.max_length:
        return result(
            ErrorKind.INVALID_LENGTH,
            f"{label} API keys must be {key_format.describe_length()} long "
            f"(got {len(key)})",
        )

    if not key_format.body_matches(key[len(key_format.prefix) :]):
        allowed = key_format.charset_description or key_format.charset
        return result(
            ErrorKind.INVALID_CHARACTERS,
            f"{label} API keys can only contain {allowed} after the prefix",
        )

    return result(None, f"Valid {label} API key format")


def check_key_input(key: object, provider: str = "") -> PatternResult | None:
    """Reject input that must never reach a provider plugin.

    Args:
        key: Candidate key.
        provider: Provider identifier to stamp on a failure.

    Returns:
        A failing PatternResult, or None when the input may proceed.
    """
    if not isinstance(key, str) or not key:
        return PatternResult(
            valid=False,
            error_kind=ErrorKind.INVALID_PREFIX,
            message="API key must be a non-empty string",
            provider=provider,
        )
    if len(key) > MAX_KEY_LENGTH:
        return PatternResult(
            valid=False,
            error_kind=ErrorKind.INVALID_LENGTH,
            message=f"API key exceeds the maximum length of {MAX_KEY_LENGTH} characters",
            provider=provider,
        )
    return None
