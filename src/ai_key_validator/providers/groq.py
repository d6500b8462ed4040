"""Groq API key provider implementation.

Groq provides fast inference with an OpenAI-compatible API.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

import httpx

from ai_key_validator.core.models import ValidationResult
from ai_key_validator.core.pattern import KeyFormat
from ai_key_validator.providers.base import USER_AGENT, BaseProvider
from ai_key_validator.validator.rate_limiter import RateLimitConfig


class GroqProvider(BaseProvider):
    """Groq API key provider.

    Keys are ``gsk_`` followed by 50 to 60 alphanumeric characters.
    Validation uses the OpenAI-compatible /openai/v1/models listing.
    """

    _key_format: ClassVar[KeyFormat] = KeyFormat(
        prefix="gsk_",
        length=(54, 64),
        charset="A-Za-z0-9",
        charset_description="alphanumeric characters (A-Z, a-z, 0-9)",
        example="gsk_" + "*" * 52,
    )

    @property
    def name(self) -> str:
        """Return provider identifier."""
        return "groq"

    @property
    def display_name(self) -> str:
        """Return human-readable provider name."""
        return "Groq"

    @property
    def key_format(self) -> KeyFormat:
        """Return the Groq key format."""
        return self._key_format

    @property
    def validation_endpoint(self) -> str:
        """Return API endpoint for validation."""
        return "https://api.groq.com/openai/v1/models"

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
        """Interpret HTTP response to determine key validity."""
        if 200 <= status_code < 300:
            metadata = self._rate_limit_headers(headers)
            models = body.get("data") if body else None
            if isinstance(models, list):
                metadata["model_count"] = str(len(models))
            return self._result(status_code, "Key is valid and active", metadata=metadata)

        return self._default_failure(status_code, headers)

    def rate_limit_defaults(self) -> RateLimitConfig:
        """Return Groq rate limits for validation traffic."""
        return RateLimitConfig(requests_per_minute=30, requests_per_hour=1000, burst_size=5)
