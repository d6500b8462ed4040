"""OpenAI API key provider implementation.

This module implements format and live validation for OpenAI API keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

import httpx

from ai_key_validator.core.models import ValidationResult
from ai_key_validator.core.pattern import KeyFormat
from ai_key_validator.providers.base import USER_AGENT, BaseProvider
from ai_key_validator.validator.rate_limiter import RateLimitConfig


class OpenAIProvider(BaseProvider):
    """OpenAI API key provider.

    Keys are ``sk-`` followed by 48 alphanumeric characters (51 total).
    Validation lists models with ``GET /v1/models``, which costs nothing
    and fails with 401 for a bad key.
    """

    _key_format: ClassVar[KeyFormat] = KeyFormat(
        prefix="sk-",
        length=51,
        charset="A-Za-z0-9",
        charset_description="alphanumeric characters (A-Z, a-z, 0-9)",
        example="sk-" + "*" * 48,
    )

    @property
    def name(self) -> str:
        """Return provider identifier."""
        return "openai"

    @property
    def display_name(self) -> str:
        """Return human-readable provider name."""
        return "OpenAI"

    @property
    def key_format(self) -> KeyFormat:
        """Return the OpenAI key format."""
        return self._key_format

    @property
    def validation_endpoint(self) -> str:
        """Return API endpoint for validation."""
        return "https://api.openai.com/v1/models"

    def build_request(self, key: str, endpoint: str | None = None) -> httpx.Request:
        """Build a bearer-authenticated model listing request."""
        return httpx.Request(
            "GET",
            endpoint or self.validation_endpoint,
            headers={
                "Authorization": f"Bearer {key}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    def parse_response(
        self,
        status_code: int,
        body: dict[str, object] | None,
        headers: Mapping[str, str],
    ) -> ValidationResult:
        """Interpret HTTP response to determine key validity.

        - 200: Key is valid; model count and rate-limit headers kept
        - 401/403: Key is invalid or revoked
        - 429: Rate limited
        - 5xx: Server error
        """
        if 200 <= status_code < 300:
            metadata = self._rate_limit_headers(headers)
            models = body.get("data") if body else None
            if isinstance(models, list):
                metadata["model_count"] = str(len(models))
            return self._result(status_code, "Key is valid and active", metadata=metadata)

        return self._default_failure(status_code, headers)

    def rate_limit_defaults(self) -> RateLimitConfig:
        """Return OpenAI rate limits for validation traffic."""
        return RateLimitConfig(requests_per_minute=60, requests_per_hour=3000, burst_size=10)
