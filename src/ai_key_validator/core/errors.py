"""Exception types for AI Key Validator.

Expected validation failures never raise; they are returned as
``ValidationResult`` objects. These exceptions are reserved for programming
and configuration mistakes.
"""


class KeyValidatorError(Exception):
    """Base class for all AI Key Validator errors."""


class ConfigurationError(KeyValidatorError):
    """Raised when the validator is constructed or configured incorrectly."""


class ProviderNotFoundError(ConfigurationError):
    """Raised when a provider id or alias is not registered."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


class SecretReleasedError(KeyValidatorError):
    """Raised when key material is read after its scope has been released."""
