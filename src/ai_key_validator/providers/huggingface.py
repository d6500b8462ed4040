"""Hugging Face access token provider implementation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

import httpx

from ai_key_validator.core.models import ValidationResult
from ai_key_validator.core.pattern import KeyFormat
from ai_key_validator.providers.base import USER_AGENT, BaseProvider
from ai_key_validator.validator.rate_limiter import RateLimitConfig


class HuggingFaceProvider(BaseProvider):
    """Hugging Face access token provider.

    Tokens are ``hf_`` followed by 34 alphanumeric characters (37 total).
    Validation calls the whoami endpoint, which also reports the token's
    display name and role.
    """

    aliases: ClassVar[tuple[str, ...]] = ("hf",)

    _key_format: ClassVar[KeyFormat] = KeyFormat(
        prefix="hf_",
        length=37,
        charset="A-Za-z0-9",
        charset_description="alphanumeric characters (A-Z, a-z, 0-9)",
        example="hf_" + "*" * 34,
    )

    @property
    def name(self) -> str:
        """Return provider identifier."""
        return "huggingface"

    @property
    def display_name(self) -> str:
        """Return human-readable provider name."""
        return "Hugging Face"

    @property
    def key_format(self) -> KeyFormat:
        """Return the Hugging Face token format."""
        return self._key_format

    @property
    def validation_endpoint(self) -> str:
        """Return API endpoint for validation."""
        return "https://huggingface.co/api/whoami-v2"

    def build_request(self, key: str, endpoint: str | None = None) -> httpx.Request:
        """Build a bearer-authenticated whoami request."""
        return httpx.Request(
            "GET",
            endpoint or self.validation_endpoint,
            headers={"Authorization": f"Bearer {key}", "User-Agent": USER_AGENT},
        )

    def parse_response(
        self,
        status_code: int,
        body: dict[str, object] | None,
        headers: Mapping[str, str],
    ) -> ValidationResult:
        """Interpret HTTP response to determine token validity.

        - 200: Token is valid, user metadata extracted
        - 401/403: Token is invalid or revoked
        """
        if 200 <= status_code < 300:
            metadata: dict[str, str] = {}
            if body:
                name = body.get("name")
                if name:
                    metadata["username"] = str(name)

                auth_info = body.get("auth", {})
                if isinstance(auth_info, dict):
                    token_info = auth_info.get("accessToken", {})
                    if isinstance(token_info, dict):
                        display_name = token_info.get("displayName")
                        if display_name:
                            metadata["token_name"] = str(display_name)
                        role = token_info.get("role")
                        if role:
                            metadata["role"] = str(role)

            return self._result(status_code, "Token is valid", metadata=metadata)

        return self._default_failure(status_code, headers)

    def rate_limit_defaults(self) -> RateLimitConfig:
        """Return Hugging Face rate limits for validation traffic."""
        return RateLimitConfig(requests_per_minute=100, requests_per_hour=3000, burst_size=20)
