"""Unit tests for Pydantic models."""

import pydantic
import pytest

from ai_key_validator.core.models import (
    PATTERN_ERROR_KINDS,
    ErrorKind,
    PatternResult,
    ValidationRequest,
    ValidationResult,
    ValidationStats,
)


class TestErrorKind:
    """Tests for ErrorKind enum."""

    def test_pattern_kinds(self) -> None:
        """Exactly the three format axes are pattern errors."""
        assert {k for k in ErrorKind if k.is_pattern_error} == PATTERN_ERROR_KINDS
        assert not ErrorKind.AUTH_INVALID.is_pattern_error

    def test_values(self) -> None:
        """Kinds serialize to stable snake_case strings."""
        assert ErrorKind.RATE_LIMITED.value == "rate_limited"
        assert ErrorKind("server_error") is ErrorKind.SERVER_ERROR


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_minimal_creation(self) -> None:
        """Only validity is required."""
        result = ValidationResult(valid=True)
        assert result.http_status == 0
        assert result.error_kind is None
        assert result.suggestions == ()
        assert not result.is_live
        assert not result.is_error

    def test_frozen(self) -> None:
        """Results cannot be mutated after creation."""
        result = ValidationResult(valid=True)
        with pytest.raises(pydantic.ValidationError):
            result.valid = False  # type: ignore[misc]

    def test_negative_status_rejected(self) -> None:
        """HTTP status must not be negative."""
        with pytest.raises(pydantic.ValidationError):
            ValidationResult(valid=True, http_status=-1)

    def test_from_pattern(self) -> None:
        """Pattern results promote without a network status."""
        pattern = PatternResult(
            valid=False,
            error_kind=ErrorKind.INVALID_LENGTH,
            message="too short",
            elapsed_ms=0.2,
        )
        result = ValidationResult.from_pattern(pattern, "openai")
        assert not result.valid
        assert result.provider == "openai"
        assert result.http_status == 0
        assert result.error_kind is ErrorKind.INVALID_LENGTH
        assert result.message == "too short"

    def test_json_round_trip_keeps_kind(self) -> None:
        """JSON output carries the kind's string value."""
        result = ValidationResult(valid=False, error_kind=ErrorKind.NETWORK)
        assert '"error_kind":"network"' in result.model_dump_json()


class TestValidationRequest:
    """Tests for ValidationRequest."""

    def test_repr_hides_key(self) -> None:
        """The key never appears in the representation."""
        key = "sk-" + "A" * 48
        request = ValidationRequest("openai", key)
        assert key not in repr(request)
        assert "openai" in repr(request)


class TestValidationStats:
    """Tests for ValidationStats."""

    def test_from_results(self) -> None:
        """Counts are aggregated by validity, cache and kind."""
        stats = ValidationStats.from_results(
            [
                ValidationResult(valid=True, http_status=200),
                ValidationResult(valid=True, http_status=200, served_from_cache=True),
                ValidationResult(valid=False, error_kind=ErrorKind.AUTH_INVALID),
                ValidationResult(valid=False, error_kind=ErrorKind.AUTH_INVALID),
                ValidationResult(valid=False, error_kind=ErrorKind.NETWORK),
            ]
        )
        assert stats.total == 5
        assert stats.valid == 2
        assert stats.invalid == 3
        assert stats.cached == 1
        assert stats.by_kind == {"auth_invalid": 2, "network": 1}

    def test_empty(self) -> None:
        """No results means zero counts."""
        assert ValidationStats.from_results([]) == ValidationStats()
