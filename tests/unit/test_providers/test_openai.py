"""Unit tests for OpenAI provider implementation."""

import httpx
import pytest

from ai_key_validator.core.models import ErrorKind
from ai_key_validator.providers.openai import OpenAIProvider

KEY = "sk-" + "A" * 48


class TestOpenAIProviderProperties:
    """Tests for OpenAI provider properties."""

    def test_name(self) -> None:
        """Provider name is correct."""
        assert OpenAIProvider().name == "openai"

    def test_display_name(self) -> None:
        """Display name is correct."""
        assert OpenAIProvider().display_name == "OpenAI"

    def test_validation_endpoint(self) -> None:
        """Validation endpoint is correct."""
        assert OpenAIProvider().validation_endpoint == "https://api.openai.com/v1/models"

    def test_rate_limit_defaults(self) -> None:
        """Rate limit defaults are provider specific."""
        limits = OpenAIProvider().rate_limit_defaults()
        assert limits.requests_per_minute == 60
        assert limits.burst_size == 10


class TestOpenAIProviderPattern:
    """Tests for OpenAI key format."""

    @pytest.fixture
    def provider(self) -> OpenAIProvider:
        """Create provider instance."""
        return OpenAIProvider()

    def test_valid_key(self, provider: OpenAIProvider) -> None:
        """51-character sk- key is valid."""
        assert provider.validate_pattern(KEY).valid

    def test_short_key(self, provider: OpenAIProvider) -> None:
        """50-character key fails on length."""
        result = provider.validate_pattern("sk-" + "A" * 47)
        assert result.error_kind is ErrorKind.INVALID_LENGTH

    def test_underscore_rejected(self, provider: OpenAIProvider) -> None:
        """Underscore is outside the OpenAI charset."""
        result = provider.validate_pattern("sk-" + "A" * 47 + "_")
        assert result.error_kind is ErrorKind.INVALID_CHARACTERS


class TestOpenAIProviderRequest:
    """Tests for the liveness request."""

    def test_bearer_auth(self) -> None:
        """Key is sent as a bearer token to the model listing."""
        request = OpenAIProvider().build_request(KEY)
        assert request.method == "GET"
        assert str(request.url) == "https://api.openai.com/v1/models"
        assert request.headers["Authorization"] == f"Bearer {KEY}"
        assert KEY not in str(request.url)

    def test_endpoint_override(self) -> None:
        """Configured endpoint replaces the default."""
        request = OpenAIProvider().build_request(KEY, "http://gateway.test/v1/models")
        assert request.url.host == "gateway.test"


class TestOpenAIProviderResponse:
    """Tests for response interpretation."""

    @pytest.fixture
    def provider(self) -> OpenAIProvider:
        """Create provider instance."""
        return OpenAIProvider()

    def test_200_empty_model_list(self, provider: OpenAIProvider) -> None:
        """200 with an empty model list is valid."""
        result = provider.parse_response(200, {"data": []}, httpx.Headers())
        assert result.valid
        assert result.http_status == 200
        assert result.error_kind is None
        assert result.metadata["model_count"] == "0"

    def test_200_copies_rate_limit_headers(self, provider: OpenAIProvider) -> None:
        """x-ratelimit headers land in metadata."""
        headers = httpx.Headers({"x-ratelimit-remaining-requests": "59"})
        result = provider.parse_response(200, {"data": [{"id": "gpt-4o"}]}, headers)
        assert result.metadata["x_ratelimit_remaining_requests"] == "59"
        assert result.metadata["model_count"] == "1"

    def test_401_auth_invalid(self, provider: OpenAIProvider) -> None:
        """401 means the key is invalid."""
        result = provider.parse_response(401, None, httpx.Headers())
        assert not result.valid
        assert result.error_kind is ErrorKind.AUTH_INVALID

    def test_429_captures_reset_hint(self, provider: OpenAIProvider) -> None:
        """429 keeps the reset hint for the rate limiter."""
        headers = httpx.Headers({"x-ratelimit-reset-requests": "6m0s"})
        result = provider.parse_response(429, None, headers)
        assert result.error_kind is ErrorKind.RATE_LIMITED
        assert result.metadata["retry_after"] == "360"

    def test_503_server_error(self, provider: OpenAIProvider) -> None:
        """5xx is a server error."""
        result = provider.parse_response(503, None, httpx.Headers())
        assert result.error_kind is ErrorKind.SERVER_ERROR

    def test_404_configuration(self, provider: OpenAIProvider) -> None:
        """404 means the endpoint is wrong."""
        result = provider.parse_response(404, None, httpx.Headers())
        assert result.error_kind is ErrorKind.CONFIGURATION
