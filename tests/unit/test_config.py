"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from ai_key_validator.core.errors import ConfigurationError
from ai_key_validator.utils.config import (
    CacheSettings,
    LoggingSettings,
    ProviderSettings,
    RateLimitSettings,
    Settings,
    ValidatorSettings,
    load_config,
)


class TestValidatorSettings:
    """Tests for ValidatorSettings."""

    def test_defaults(self) -> None:
        """Default values are set."""
        settings = ValidatorSettings()
        assert settings.enabled is True
        assert settings.timeout_seconds == 10
        assert settings.max_concurrent == 5
        assert settings.max_attempts == 3
        assert settings.max_rate_limit_wait == 300

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables override defaults."""
        monkeypatch.setenv("AKV_VALIDATOR_TIMEOUT_SECONDS", "2.5")
        assert ValidatorSettings().timeout_seconds == 2.5


class TestOtherSettings:
    """Tests for the smaller settings groups."""

    def test_cache_defaults(self) -> None:
        """Cache is on with a five minute TTL."""
        settings = CacheSettings()
        assert settings.enabled
        assert settings.ttl_seconds == 300
        assert settings.max_size == 1000

    def test_rate_limit_defaults(self) -> None:
        """Rate limiting is on with exponential backoff."""
        settings = RateLimitSettings()
        assert settings.enabled
        assert settings.backoff == "exponential"
        assert settings.overrides == {}

    def test_logging_defaults(self) -> None:
        """Logging is quiet and redacting by default."""
        settings = LoggingSettings()
        assert settings.level == "WARNING"
        assert settings.format == "console"
        assert settings.redact_secrets

    def test_provider_settings_fallback(self) -> None:
        """Unconfigured providers get default settings."""
        settings = Settings(providers={"groq": ProviderSettings(enabled=False)})
        assert not settings.provider_settings("groq").enabled
        assert settings.provider_settings("openai") == ProviderSettings()


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file(self) -> None:
        """Missing files fall back to defaults."""
        settings = load_config(Path("/nonexistent/akv.toml"))
        assert settings.validator.timeout_seconds == 10

    def test_toml_file(self, tmp_path: Path) -> None:
        """Values are read from a TOML file."""
        path = tmp_path / "akv.toml"
        path.write_text(
            "[validator]\n"
            "timeout_seconds = 4.0\n"
            "\n"
            "[cache]\n"
            "enabled = false\n"
            "\n"
            "[providers.openai]\n"
            'endpoint = "https://proxy.test/v1/models"\n'
            "\n"
            "[rate_limit.overrides.groq]\n"
            "requests_per_minute = 5\n"
        )
        settings = load_config(path)
        assert settings.validator.timeout_seconds == 4.0
        assert not settings.cache.enabled
        assert settings.providers["openai"].endpoint == "https://proxy.test/v1/models"
        assert settings.rate_limit.overrides["groq"].requests_per_minute == 5
        assert settings.rate_limit.overrides["groq"].burst_size is None

    def test_env_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Group-prefixed environment variables are honored."""
        monkeypatch.setenv("AKV_CACHE_ENABLED", "false")
        assert not load_config().cache.enabled

    def test_malformed_toml(self, tmp_path: Path) -> None:
        """A broken file is a configuration error."""
        path = tmp_path / "akv.toml"
        path.write_text("[validator\n")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        """Out-of-range values are a configuration error."""
        path = tmp_path / "akv.toml"
        path.write_text("[validator]\ntimeout_seconds = -1\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)
