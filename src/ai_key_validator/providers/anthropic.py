"""Anthropic API key provider implementation.

This module implements format and live validation for Anthropic (Claude)
API keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

import httpx

from ai_key_validator.core.models import ErrorKind, ValidationResult
from ai_key_validator.core.pattern import KeyFormat
from ai_key_validator.providers.base import USER_AGENT, BaseProvider
from ai_key_validator.validator.rate_limiter import RateLimitConfig


class AnthropicProvider(BaseProvider):
    """Anthropic API key provider.

    Keys are ``sk-ant-`` followed by 95 characters of ``A-Za-z0-9-_``.

    Validation uses POST /v1/messages with a one-token request body.
    Requires the anthropic-version header.
    """

    # Anthropic API version for validation requests
    ANTHROPIC_VERSION = "2023-06-01"

    # Minimal model for validation (cheapest option)
    VALIDATION_MODEL = "claude-3-haiku-20240307"

    aliases: ClassVar[tuple[str, ...]] = ("claude",)

    _key_format: ClassVar[KeyFormat] = KeyFormat(
        prefix="sk-ant-",
        length=102,
        charset=r"A-Za-z0-9\-_",
        charset_description="letters, digits, hyphens and underscores",
        example="sk-ant-" + "*" * 95,
    )

    @property
    def name(self) -> str:
        """Return provider identifier."""
        return "anthropic"

    @property
    def display_name(self) -> str:
        """Return human-readable provider name."""
        return "Anthropic"

    @property
    def key_format(self) -> KeyFormat:
        """Return the Anthropic key format."""
        return self._key_format

    @property
    def validation_endpoint(self) -> str:
        """Return API endpoint for validation."""
        return "https://api.anthropic.com/v1/messages"

    def get_validation_body(self) -> dict[str, Any]:
        """Return minimal request body for validation.

        Uses the cheapest model with a single output token.
        """
        return {
            "model": self.VALIDATION_MODEL,
            "max_tokens": 1,
            "messages": [{"role": "user", "content": "Hi"}],
        }

    def build_request(self, key: str, endpoint: str | None = None) -> httpx.Request:
        """Build a one-token messages request authenticated by x-api-key."""
        return httpx.Request(
            "POST",
            endpoint or self.validation_endpoint,
            headers={
                "x-api-key": key,
                "anthropic-version": self.ANTHROPIC_VERSION,
                "User-Agent": USER_AGENT,
            },
            json=self.get_validation_body(),
        )

    def parse_response(
        self,
        status_code: int,
        body: dict[str, object] | None,
        headers: Mapping[str, str],
    ) -> ValidationResult:
        """Interpret HTTP response to determine key validity.

        Response code interpretation:
        - 200: Key is valid and active
        - 400: Auth passed; a credit/balance message means no credit left,
          an authentication_error/permission_error type means a bad key
        - 401/403: Key is invalid or revoked
        - 429: Rate limited
        """
        if 200 <= status_code < 300:
            metadata = self._rate_limit_headers(headers)
            model = body.get("model") if body else None
            if model:
                metadata["model"] = str(model)
            return self._result(status_code, "Key is valid and active", metadata=metadata)

        if status_code == 400:
            error_type, error_msg = "", ""
            error_obj = body.get("error") if body else None
            if isinstance(error_obj, dict):
                error_type = str(error_obj.get("type", ""))
                error_msg = str(error_obj.get("message", "")).lower()

            if error_type in ("authentication_error", "permission_error"):
                return self._result(
                    status_code,
                    "Key is invalid or revoked",
                    ErrorKind.AUTH_INVALID,
                )
            if "credit" in error_msg or "balance" in error_msg:
                return self._result(
                    status_code,
                    "Key is valid but account has insufficient credits",
                    metadata={"account_status": "insufficient_credits"},
                )
            # Request-shape rejections happen after authentication succeeded.
            return self._result(status_code, "Key is valid (bad request parameters)")

        return self._default_failure(status_code, headers)

    def rate_limit_defaults(self) -> RateLimitConfig:
        """Return Anthropic rate limits for validation traffic."""
        return RateLimitConfig(requests_per_minute=50, requests_per_hour=1000, burst_size=5)
