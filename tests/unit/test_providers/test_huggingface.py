"""Unit tests for Hugging Face provider implementation."""

import httpx
import pytest

from ai_key_validator.core.models import ErrorKind
from ai_key_validator.providers.huggingface import HuggingFaceProvider

KEY = "hf_" + "abcdefghij1234567890ABCDEFGHIJklmn"


@pytest.fixture
def provider() -> HuggingFaceProvider:
    """Create provider instance."""
    return HuggingFaceProvider()


class TestHuggingFaceProvider:
    """Tests for Hugging Face provider."""

    def test_properties(self, provider: HuggingFaceProvider) -> None:
        """Provider id, alias and endpoint are correct."""
        assert provider.name == "huggingface"
        assert provider.aliases == ("hf",)
        assert provider.validation_endpoint == "https://huggingface.co/api/whoami-v2"

    def test_valid_key(self, provider: HuggingFaceProvider) -> None:
        """37-character hf_ token is valid."""
        assert provider.validate_pattern(KEY).valid

    def test_bearer_auth(self, provider: HuggingFaceProvider) -> None:
        """Token is sent as a bearer token."""
        assert provider.build_request(KEY).headers["Authorization"] == f"Bearer {KEY}"

    def test_200_user_metadata(self, provider: HuggingFaceProvider) -> None:
        """Username, token name and role are extracted."""
        body = {
            "name": "octocat",
            "auth": {"accessToken": {"displayName": "ci-token", "role": "read"}},
        }
        result = provider.parse_response(200, body, httpx.Headers())
        assert result.valid
        assert result.metadata == {
            "username": "octocat",
            "token_name": "ci-token",
            "role": "read",
        }

    def test_200_without_body(self, provider: HuggingFaceProvider) -> None:
        """A missing body is still valid."""
        result = provider.parse_response(200, None, httpx.Headers())
        assert result.valid
        assert result.metadata == {}

    def test_401_auth_invalid(self, provider: HuggingFaceProvider) -> None:
        """401 means the token is invalid."""
        result = provider.parse_response(401, None, httpx.Headers())
        assert result.error_kind is ErrorKind.AUTH_INVALID
