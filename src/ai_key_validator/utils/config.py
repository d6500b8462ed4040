"""Configuration management for AI Key Validator.

This module provides configuration loading and management using
Pydantic Settings with support for environment variables and TOML files.
Settings are read once when a validator is built and treated as read-only
afterwards.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_key_validator.core.errors import ConfigurationError


class ValidatorSettings(BaseSettings):
    """Live validation and retry settings."""

    model_config = SettingsConfigDict(env_prefix="AKV_VALIDATOR_")

    enabled: bool = Field(default=True, description="Enable live validation")
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )
    max_concurrent: int = Field(
        default=5,
        ge=1,
        description="Maximum concurrent validation requests",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Live requests allowed per validation, including retries",
    )
    retry_base_delay: float = Field(
        default=0.5,
        ge=0.0,
        description="First retry delay in seconds for network/server errors",
    )
    retry_max_delay: float = Field(
        default=8.0,
        ge=0.0,
        description="Upper bound on a retry delay in seconds",
    )
    retry_jitter: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Random fraction added to each retry delay",
    )
    max_rate_limit_wait: float = Field(
        default=300.0,
        ge=0.0,
        description="Longest provider reset hint to wait for, in seconds",
    )


class CacheSettings(BaseSettings):
    """Result cache settings."""

    model_config = SettingsConfigDict(env_prefix="AKV_CACHE_")

    enabled: bool = Field(default=True, description="Cache successful live results")
    max_size: int = Field(default=1000, ge=1, description="Maximum cached results")
    ttl_seconds: float = Field(default=300.0, gt=0, description="Cached result lifetime")


class RateLimitOverride(BaseModel):
    """Partial per-provider rate limit override."""

    requests_per_minute: int | None = Field(default=None, ge=1)
    requests_per_hour: int | None = Field(default=None, ge=1)
    burst_size: int | None = Field(default=None, ge=1)


class RateLimitSettings(BaseSettings):
    """Rate limiter settings."""

    model_config = SettingsConfigDict(env_prefix="AKV_RATE_LIMIT_")

    enabled: bool = Field(default=True, description="Apply client-side rate limiting")
    backoff: str = Field(
        default="exponential",
        description="Backoff between admission checks: 'exponential' or 'linear'",
    )
    base_delay: float = Field(default=0.25, ge=0.0, description="First backoff delay")
    max_delay: float = Field(default=10.0, ge=0.0, description="Maximum backoff delay")
    overrides: dict[str, RateLimitOverride] = Field(
        default_factory=dict,
        description="Per-provider limit overrides keyed by provider id",
    )


class ProviderSettings(BaseModel):
    """Per-provider live validation settings."""

    enabled: bool = Field(default=True, description="Allow live checks for this provider")
    endpoint: str | None = Field(default=None, description="Validation endpoint override")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="AKV_LOGGING_")

    level: str = Field(default="WARNING", description="Log level")
    format: Literal["console", "json"] = Field(
        default="console",
        description="Log format: 'json' or 'console'",
    )
    redact_secrets: bool = Field(
        default=True,
        description="Redact key-shaped values in log output",
    )


class Settings(BaseSettings):
    """Main application settings container."""

    model_config = SettingsConfigDict(
        env_prefix="AKV_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    validator: ValidatorSettings = Field(default_factory=ValidatorSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    providers: dict[str, ProviderSettings] = Field(default_factory=dict)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def provider_settings(self, provider: str) -> ProviderSettings:
        """Return settings for a provider, falling back to defaults."""
        return self.providers.get(provider) or ProviderSettings()


def load_config(config_path: Path | None = None) -> Settings:
    """Load configuration from file and environment.

    Values from the config file take precedence over environment
    variables, which take precedence over defaults.

    Args:
        config_path: Optional path to a TOML configuration file.

    Returns:
        Loaded Settings instance.

    Raises:
        ConfigurationError: If the file or environment holds invalid values.
    """
    config_data: dict[str, object] = {}

    if config_path and config_path.exists():
        import tomllib

        try:
            with config_path.open("rb") as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

    try:
        return Settings(**config_data)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
