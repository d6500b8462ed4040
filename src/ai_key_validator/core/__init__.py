"""Core module containing data models, key formats and secret handling.

The orchestrator lives in ``ai_key_validator.core.orchestrator`` and is
re-exported from the top-level package.
"""

from ai_key_validator.core.errors import (
    ConfigurationError,
    KeyValidatorError,
    ProviderNotFoundError,
    SecretReleasedError,
)
from ai_key_validator.core.models import (
    BatchOptions,
    ErrorKind,
    PatternResult,
    ValidationOptions,
    ValidationRequest,
    ValidationResult,
    ValidationStats,
    ValidationStrategy,
)
from ai_key_validator.core.pattern import KeyFormat, check_key_input, validate_key_pattern
from ai_key_validator.core.secret import ScopedSecret

__all__ = [
    "BatchOptions",
    "ConfigurationError",
    "ErrorKind",
    "KeyFormat",
    "KeyValidatorError",
    "PatternResult",
    "ProviderNotFoundError",
    "ScopedSecret",
    "SecretReleasedError",
    "ValidationOptions",
    "ValidationRequest",
    "ValidationResult",
    "ValidationStats",
    "ValidationStrategy",
    "check_key_input",
    "validate_key_pattern",
]
