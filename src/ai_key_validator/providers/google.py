"""Google Gemini API key provider implementation.

This module implements format and live validation for Google AI (Gemini)
API keys. Note: the AIza prefix is shared across many Google Cloud services,
so only the live check confirms the key works with Gemini.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

import httpx

from ai_key_validator.core.models import ErrorKind, ValidationResult
from ai_key_validator.core.pattern import KeyFormat
from ai_key_validator.providers.base import USER_AGENT, BaseProvider
from ai_key_validator.validator.rate_limiter import RateLimitConfig


class GoogleGeminiProvider(BaseProvider):
    """Google Gemini API key provider.

    Keys are ``AIza`` followed by 35 characters of ``A-Za-z0-9-_``
    (39 total).

    Unlike other providers, Google uses query parameter authentication
    instead of headers.
    """

    aliases: ClassVar[tuple[str, ...]] = ("google_gemini", "google")

    _key_format: ClassVar[KeyFormat] = KeyFormat(
        prefix="AIza",
        length=39,
        charset=r"A-Za-z0-9\-_",
        charset_description="letters, digits, hyphens and underscores",
        example="AIza" + "*" * 35,
    )

    @property
    def name(self) -> str:
        """Return provider identifier."""
        return "gemini"

    @property
    def display_name(self) -> str:
        """Return human-readable provider name."""
        return "Google Gemini"

    @property
    def key_format(self) -> KeyFormat:
        """Return the Gemini key format."""
        return self._key_format

    @property
    def validation_endpoint(self) -> str:
        """Return API endpoint for validation."""
        return "https://generativelanguage.googleapis.com/v1beta/models"

    def build_request(self, key: str, endpoint: str | None = None) -> httpx.Request:
        """Build a model listing request with the key as a query parameter."""
        return httpx.Request(
            "GET",
            endpoint or self.validation_endpoint,
            params={"key": key, "pageSize": "1"},
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )

    def parse_response(
        self,
        status_code: int,
        body: dict[str, object] | None,
        headers: Mapping[str, str],
    ) -> ValidationResult:
        """Interpret HTTP response to determine key validity.

        Response code interpretation:
        - 200: Key is valid for Gemini API
        - 400: API_KEY_INVALID reason means a bad key
        - 403: Key is invalid or the API is not enabled for it
        - 429: Quota or rate limit reached
        """
        if 200 <= status_code < 300:
            metadata: dict[str, str] = {}
            models = body.get("models") if body else None
            if isinstance(models, list):
                metadata["model_count"] = str(len(models))
            return self._result(status_code, "Key is valid for Gemini API", metadata=metadata)

        if status_code == 400 and self._is_invalid_key_error(body):
            return self._result(
                status_code,
                "Key is invalid or not authorized for Gemini API",
                ErrorKind.AUTH_INVALID,
            )

        return self._default_failure(status_code, headers)

    @staticmethod
    def _is_invalid_key_error(body: dict[str, object] | None) -> bool:
        """Check a Google error payload for the API_KEY_INVALID reason."""
        error_obj = body.get("error") if body else None
        if not isinstance(error_obj, dict):
            return False
        if "api key not valid" in str(error_obj.get("message", "")).lower():
            return True
        details = error_obj.get("details")
        if isinstance(details, list):
            return any(
                isinstance(d, dict) and d.get("reason") == "API_KEY_INVALID" for d in details
            )
        return False

    def rate_limit_defaults(self) -> RateLimitConfig:
        """Return Gemini rate limits for validation traffic."""
        return RateLimitConfig(requests_per_minute=60, requests_per_hour=1500, burst_size=10)
