"""Unit tests for Anthropic provider implementation."""

import json

import httpx
import pytest

from ai_key_validator.core.models import ErrorKind
from ai_key_validator.providers.anthropic import AnthropicProvider

KEY = "sk-ant-api03-" + "Ab1_" * 22 + "x"


@pytest.fixture
def provider() -> AnthropicProvider:
    """Create provider instance."""
    return AnthropicProvider()


class TestAnthropicProviderProperties:
    """Tests for Anthropic provider properties."""

    def test_name_and_alias(self, provider: AnthropicProvider) -> None:
        """Provider id and alias are correct."""
        assert provider.name == "anthropic"
        assert "claude" in provider.aliases

    def test_validation_endpoint(self, provider: AnthropicProvider) -> None:
        """Validation endpoint is the messages API."""
        assert provider.validation_endpoint == "https://api.anthropic.com/v1/messages"


class TestAnthropicProviderPattern:
    """Tests for Anthropic key format."""

    def test_valid_key(self, provider: AnthropicProvider) -> None:
        """102-character sk-ant- key is valid."""
        assert len(KEY) == 102
        assert provider.validate_pattern(KEY).valid

    def test_openai_key_fails_prefix(self, provider: AnthropicProvider) -> None:
        """An OpenAI-shaped key fails on prefix."""
        result = provider.validate_pattern("sk-" + "A" * 99)
        assert result.error_kind is ErrorKind.INVALID_PREFIX


class TestAnthropicProviderRequest:
    """Tests for the liveness request."""

    def test_headers_and_body(self, provider: AnthropicProvider) -> None:
        """Key goes in x-api-key with the version header and a 1-token body."""
        request = provider.build_request(KEY)
        assert request.method == "POST"
        assert request.headers["x-api-key"] == KEY
        assert request.headers["anthropic-version"] == AnthropicProvider.ANTHROPIC_VERSION
        assert "Authorization" not in request.headers
        body = json.loads(request.content)
        assert body["max_tokens"] == 1
        assert body["model"] == AnthropicProvider.VALIDATION_MODEL


class TestAnthropicProviderResponse:
    """Tests for response interpretation."""

    def test_200_valid(self, provider: AnthropicProvider) -> None:
        """200 is valid and keeps the model name."""
        result = provider.parse_response(
            200, {"model": "claude-3-haiku-20240307"}, httpx.Headers()
        )
        assert result.valid
        assert result.metadata["model"] == "claude-3-haiku-20240307"

    def test_400_insufficient_credits(self, provider: AnthropicProvider) -> None:
        """A credit balance error still proves the key authenticates."""
        body = {
            "error": {
                "type": "invalid_request_error",
                "message": "Your credit balance is too low to access the API.",
            }
        }
        result = provider.parse_response(400, body, httpx.Headers())
        assert result.valid
        assert result.metadata["account_status"] == "insufficient_credits"

    def test_400_authentication_error(self, provider: AnthropicProvider) -> None:
        """An authentication_error type means a bad key."""
        body = {"error": {"type": "authentication_error", "message": "invalid x-api-key"}}
        result = provider.parse_response(400, body, httpx.Headers())
        assert not result.valid
        assert result.error_kind is ErrorKind.AUTH_INVALID

    def test_400_other_request_error(self, provider: AnthropicProvider) -> None:
        """Request-shape rejections happen after authentication."""
        body = {"error": {"type": "invalid_request_error", "message": "model not found"}}
        result = provider.parse_response(400, body, httpx.Headers())
        assert result.valid

    def test_401_auth_invalid(self, provider: AnthropicProvider) -> None:
        """401 means the key is invalid."""
        result = provider.parse_response(401, None, httpx.Headers())
        assert result.error_kind is ErrorKind.AUTH_INVALID

    def test_429_retry_after(self, provider: AnthropicProvider) -> None:
        """Retry-After is captured on 429."""
        result = provider.parse_response(429, None, httpx.Headers({"retry-after": "30"}))
        assert result.error_kind is ErrorKind.RATE_LIMITED
        assert result.metadata["retry_after"] == "30"
