"""Core data models for AI Key Validator.

This module defines the value objects returned by the validator along with
the request and option types callers pass in.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ai_key_validator.core.secret import ScopedSecret


class ErrorKind(str, Enum):
    """Closed taxonomy of validation failures."""

    INVALID_PREFIX = "invalid_prefix"
    INVALID_LENGTH = "invalid_length"
    INVALID_CHARACTERS = "invalid_characters"
    AUTH_INVALID = "auth_invalid"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"

    @property
    def is_pattern_error(self) -> bool:
        """Whether this kind is produced by the offline pattern stage."""
        return self in PATTERN_ERROR_KINDS


PATTERN_ERROR_KINDS = frozenset(
    {ErrorKind.INVALID_PREFIX, ErrorKind.INVALID_LENGTH, ErrorKind.INVALID_CHARACTERS}
)


class ValidationStrategy(str, Enum):
    """How far a validation request is allowed to go."""

    PATTERN_ONLY = "pattern_only"
    LIVE = "live"
    AUTO = "auto"


class PatternResult(BaseModel):
    """Outcome of an offline key format check."""

    model_config = ConfigDict(frozen=True)

    valid: bool = Field(..., description="Whether the key matches the provider format")
    error_kind: Optional[ErrorKind] = Field(
        default=None,
        description="First failing format axis, if any",
    )
    message: str = Field(default="", description="Human-readable explanation")
    provider: str = Field(default="", description="Provider the key was checked against")
    elapsed_ms: float = Field(default=0.0, ge=0.0, description="Time spent checking")


class ValidationResult(BaseModel):
    """Standardized result of a validation request.

    Produced once per request and never mutated afterwards. Callers can
    react purely on ``error_kind`` and ``retryable`` without any
    provider-specific knowledge.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool = Field(..., description="Whether the key is valid")
    provider: str = Field(default="", description="Provider identifier")
    http_status: int = Field(
        default=0,
        ge=0,
        description="HTTP status of the live check (0 if no network call was made)",
    )
    error_kind: Optional[ErrorKind] = Field(default=None, description="Failure classification")
    message: str = Field(default="", description="Human-readable status message")
    suggestions: tuple[str, ...] = Field(
        default=(),
        description="Ordered hints on how to resolve a failure",
    )
    retryable: bool = Field(default=False, description="Whether retrying later may succeed")
    elapsed_ms: float = Field(default=0.0, ge=0.0, description="Wall time of the request")
    served_from_cache: bool = Field(default=False, description="Whether the result was cached")
    attempts: int = Field(default=0, ge=0, description="Number of live requests dispatched")
    metadata: dict[str, str] = Field(
        default_factory=dict,
        description="Provider-specific, non-sensitive facts",
    )
    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the outcome was produced",
    )

    @classmethod
    def from_pattern(cls, pattern: PatternResult, provider: str) -> ValidationResult:
        """Promote a pattern result into a validation result (no network call)."""
        return cls(
            valid=pattern.valid,
            provider=provider,
            http_status=0,
            error_kind=pattern.error_kind,
            message=pattern.message,
            elapsed_ms=pattern.elapsed_ms,
        )

    @property
    def is_live(self) -> bool:
        """Whether this result came from a live provider request."""
        return self.http_status > 0

    @property
    def is_error(self) -> bool:
        """Whether this result carries an error classification."""
        return self.error_kind is not None


@dataclass(frozen=True)
class ValidationOptions:
    """Per-call validation options.

    Attributes:
        timeout: Per-request timeout in seconds (None uses the configured default).
        bypass_cache: Skip the cache lookup for this call.
        strategy: How far the request may go (pattern only, live, or auto).
    """

    timeout: float | None = None
    bypass_cache: bool = False
    strategy: ValidationStrategy = ValidationStrategy.AUTO


@dataclass
class ValidationRequest:
    """A single key to validate against a provider.

    Attributes:
        provider: Provider identifier or alias.
        key: Raw key string or a caller-owned scoped secret.
        options: Per-call options.
    """

    provider: str
    key: str | ScopedSecret
    options: ValidationOptions = field(default_factory=ValidationOptions)

    def __repr__(self) -> str:
        """Return a representation that never includes the key."""
        return f"ValidationRequest(provider={self.provider!r}, options={self.options!r})"


ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class BatchOptions:
    """Options for batch validation.

    Attributes:
        concurrency: Maximum requests in flight (None uses the configured default).
        stop_on_error: Skip not-yet-started requests after the first failure.
        on_progress: Called with (completed, total) once per finished request.
    """

    concurrency: int | None = None
    stop_on_error: bool = False
    on_progress: ProgressCallback | None = None


@dataclass
class ValidationStats:
    """Aggregate counts over a set of validation results."""

    total: int = 0
    valid: int = 0
    invalid: int = 0
    cached: int = 0
    by_kind: dict[str, int] = field(default_factory=dict)

    def add_result(self, result: ValidationResult) -> None:
        """Update stats based on a validation result."""
        self.total += 1
        if result.valid:
            self.valid += 1
        else:
            self.invalid += 1
        if result.served_from_cache:
            self.cached += 1
        if result.error_kind is not None:
            kind = result.error_kind.value
            self.by_kind[kind] = self.by_kind.get(kind, 0) + 1

    @classmethod
    def from_results(cls, results: Iterable[ValidationResult]) -> ValidationStats:
        """Build stats from an iterable of results."""
        stats = cls()
        for result in results:
            stats.add_result(result)
        return stats
