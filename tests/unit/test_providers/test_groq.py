"""Unit tests for Groq provider implementation."""

import httpx
import pytest

from ai_key_validator.core.models import ErrorKind
from ai_key_validator.providers.groq import GroqProvider


@pytest.fixture
def provider() -> GroqProvider:
    """Create provider instance."""
    return GroqProvider()


class TestGroqProvider:
    """Tests for Groq provider."""

    def test_properties(self, provider: GroqProvider) -> None:
        """Provider id and endpoint are correct."""
        assert provider.name == "groq"
        assert provider.validation_endpoint == "https://api.groq.com/openai/v1/models"

    @pytest.mark.parametrize("body_length", [50, 52, 60])
    def test_length_range(self, provider: GroqProvider, body_length: int) -> None:
        """Any body length from 50 to 60 is accepted."""
        assert provider.validate_pattern("gsk_" + "a" * body_length).valid

    def test_too_long(self, provider: GroqProvider) -> None:
        """Keys beyond the range fail on length."""
        result = provider.validate_pattern("gsk_" + "a" * 61)
        assert result.error_kind is ErrorKind.INVALID_LENGTH

    def test_bearer_auth(self, provider: GroqProvider) -> None:
        """Key is sent as a bearer token."""
        key = "gsk_" + "a" * 52
        request = provider.build_request(key)
        assert request.headers["Authorization"] == f"Bearer {key}"

    def test_200_model_count(self, provider: GroqProvider) -> None:
        """200 is valid and counts models."""
        result = provider.parse_response(200, {"data": [{}, {}]}, httpx.Headers())
        assert result.valid
        assert result.metadata["model_count"] == "2"

    def test_500_server_error(self, provider: GroqProvider) -> None:
        """5xx is a server error."""
        result = provider.parse_response(500, None, httpx.Headers())
        assert result.error_kind is ErrorKind.SERVER_ERROR
