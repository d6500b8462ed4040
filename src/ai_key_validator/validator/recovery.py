"""Error classification and retry policy for live validation.

Transport failures and provider error responses are mapped once onto the
closed ``ErrorKind`` taxonomy. Each classification carries a ``retryable``
flag and ordered human suggestions so callers never need provider-specific
knowledge to react.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar

import httpx

from ai_key_validator.core.models import ErrorKind, ValidationResult
from ai_key_validator.utils.redaction import sanitize_text

RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.SERVER_ERROR, ErrorKind.RATE_LIMITED})


@dataclass(frozen=True)
class ClassifiedError:
    """A failure mapped onto the shared taxonomy.

    Attributes:
        kind: Error classification.
        retryable: Whether recovery may retry the request.
        message: Sanitized human-readable description.
        suggestions: Ordered hints for resolving the failure.
        http_status: Provider status code (0 for transport failures).
        retry_after: Provider reset hint in seconds, if one was given.
        metadata: Non-sensitive facts carried over from the response.
    """

    kind: ErrorKind
    retryable: bool
    message: str
    suggestions: tuple[str, ...] = ()
    http_status: int = 0
    retry_after: float | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def to_result(self, provider: str, attempts: int = 0) -> ValidationResult:
        """Convert into a terminal validation result."""
        return ValidationResult(
            valid=False,
            provider=provider,
            http_status=self.http_status,
            error_kind=self.kind,
            message=self.message,
            suggestions=self.suggestions,
            retryable=self.retryable,
            attempts=attempts,
            metadata=dict(self.metadata),
        )


class ErrorClassifier:
    """Maps raw failures onto ``ErrorKind`` with suggestions."""

    SUGGESTIONS: ClassVar[dict[ErrorKind, tuple[str, ...]]] = {
        ErrorKind.INVALID_PREFIX: (
            "Check that the key belongs to {provider} and was copied in full",
        ),
        ErrorKind.INVALID_LENGTH: (
            "Check that the key was not truncated or padded when copied",
        ),
        ErrorKind.INVALID_CHARACTERS: (
            "Remove surrounding quotes, whitespace or line breaks from the key",
        ),
        ErrorKind.AUTH_INVALID: (
            "Verify the key is active in the {provider} dashboard",
            "Generate a new key if this one was revoked or rotated",
            "Check that the key has permission for the validation endpoint",
        ),
        ErrorKind.RATE_LIMITED: (
            "Wait before retrying; {provider} is throttling requests",
            "Reduce concurrency or the configured requests per minute",
        ),
        ErrorKind.SERVER_ERROR: (
            "{provider} is having problems; retry in a few minutes",
            "Check the {provider} status page",
        ),
        ErrorKind.NETWORK: (
            "Check your internet connection and DNS",
            "Check proxy or firewall settings for access to {provider}",
            "Increase the request timeout if the network is slow",
        ),
        ErrorKind.CONFIGURATION: (
            "Check the configured endpoint and provider settings",
        ),
        ErrorKind.UNKNOWN: (
            "Retry the request; report the problem if it persists",
        ),
    }

    def suggestions_for(self, kind: ErrorKind, provider: str = "the provider") -> tuple[str, ...]:
        """Return the ordered suggestions for a kind."""
        return tuple(s.format(provider=provider) for s in self.SUGGESTIONS.get(kind, ()))

    def classify(
        self,
        kind: ErrorKind,
        message: str,
        provider: str,
        http_status: int = 0,
        retry_after: float | None = None,
        metadata: dict[str, str] | None = None,
    ) -> ClassifiedError:
        """Build a classification with the kind's retry flag and suggestions."""
        return ClassifiedError(
            kind=kind,
            retryable=kind in RETRYABLE_KINDS,
            message=sanitize_text(message),
            suggestions=self.suggestions_for(kind, provider),
            http_status=http_status,
            retry_after=retry_after,
            metadata=metadata or {},
        )

    def classify_exception(self, exc: BaseException, provider: str = "the provider") -> ClassifiedError:
        """Classify a failure raised while dispatching a live request.

        Args:
            exc: The raised exception.
            provider: Display name used in suggestions.

        Returns:
            The classified error.
        """
        match exc:
            case httpx.TimeoutException() | TimeoutError():
                return self.classify(ErrorKind.NETWORK, "Request timed out", provider)
            case httpx.UnsupportedProtocol() | httpx.InvalidURL():
                return self.classify(
                    ErrorKind.CONFIGURATION, f"Invalid validation endpoint: {exc!s}", provider
                )
            case httpx.ConnectError() | ConnectionError():
                return self.classify(ErrorKind.NETWORK, f"Connection failed: {exc!s}", provider)
            case httpx.TransportError() | OSError():
                return self.classify(ErrorKind.NETWORK, f"Request failed: {exc!s}", provider)
            case _:
                return self.classify(
                    ErrorKind.UNKNOWN,
                    f"Unexpected error: {type(exc).__name__}: {exc!s}",
                    provider,
                )

    def classify_result(self, result: ValidationResult, provider: str = "the provider") -> ClassifiedError:
        """Classify a failed provider response.

        Args:
            result: A result with ``valid=False`` from a provider plugin.
            provider: Display name used in suggestions.

        Returns:
            The classified error.
        """
        kind = result.error_kind or ErrorKind.UNKNOWN
        retry_after: float | None = None
        if "retry_after" in result.metadata:
            try:
                retry_after = float(result.metadata["retry_after"])
            except ValueError:
                retry_after = None
        return self.classify(
            kind,
            result.message,
            provider,
            http_status=result.http_status,
            retry_after=retry_after,
            metadata=dict(result.metadata),
        )


@dataclass(frozen=True)
class RecoveryPolicy:
    """Retry policy applied to retryable classifications.

    Attributes:
        max_attempts: Total live requests allowed per validation.
        base_delay: First backoff delay for network/server errors in seconds.
        max_delay: Upper bound on a backoff delay in seconds.
        jitter: Fraction of the delay added at random (0.1 = up to +10%).
        max_rate_limit_wait: Longest provider reset hint honored; longer
            hints end the request with a terminal RATE_LIMITED result.
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0
    jitter: float = 0.1
    max_rate_limit_wait: float = 300.0

    def should_retry(self, error: ClassifiedError, attempt: int) -> bool:
        """Whether to try again after ``attempt`` (1-based) failed."""
        if not error.retryable or attempt >= self.max_attempts:
            return False
        return not (
            error.kind is ErrorKind.RATE_LIMITED
            and error.retry_after is not None
            and error.retry_after > self.max_rate_limit_wait
        )

    def backoff_delay(self, attempt: int, rand: Callable[[], float] = random.random) -> float:
        """Exponential delay with jitter after ``attempt`` (1-based) failed."""
        delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        return delay + delay * self.jitter * rand()
