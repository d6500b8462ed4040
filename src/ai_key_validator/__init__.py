"""AI Key Validator - format and live validation of AI provider API keys."""

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
from ai_key_validator.core.orchestrator import (
    KeyValidator,
    ValidationStage,
    ValidatorConfig,
    create_validator,
)
from ai_key_validator.core.secret import ScopedSecret
from ai_key_validator.providers import BaseProvider, ProviderRegistry, create_default_registry

__version__ = "0.1.0"

__all__ = [
    "BaseProvider",
    "BatchOptions",
    "ConfigurationError",
    "ErrorKind",
    "KeyValidator",
    "KeyValidatorError",
    "PatternResult",
    "ProviderNotFoundError",
    "ProviderRegistry",
    "ScopedSecret",
    "SecretReleasedError",
    "ValidationOptions",
    "ValidationRequest",
    "ValidationResult",
    "ValidationStage",
    "ValidationStats",
    "ValidationStrategy",
    "ValidatorConfig",
    "__version__",
    "create_default_registry",
    "create_validator",
]
