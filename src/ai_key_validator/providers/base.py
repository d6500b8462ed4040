"""Base provider class for live and offline key validation.

This module defines the abstract base class that all provider plugins
implement. A plugin holds immutable format and endpoint data for one
provider and knows how to build that provider's cheapest liveness request
and map its responses onto the shared error taxonomy.
"""

from __future__ import annotations

import contextlib
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, ClassVar

import httpx

from ai_key_validator.core.models import ErrorKind, PatternResult, ValidationResult
from ai_key_validator.core.pattern import KeyFormat, validate_key_pattern

if TYPE_CHECKING:
    from ai_key_validator.validator.rate_limiter import RateLimitConfig

USER_AGENT = "ai-key-validator/0.1.0"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


def parse_retry_after(headers: Mapping[str, str]) -> float | None:
    """Extract a provider's reset hint in seconds.

    Understands ``Retry-After`` in seconds and the OpenAI-style
    ``x-ratelimit-reset-requests`` durations (``"1s"``, ``"6m0s"``,
    ``"250ms"``).

    Args:
        headers: Response headers (case-insensitive mapping).

    Returns:
        Seconds until the provider expects to accept requests, or None.
    """
    retry_after = headers.get("retry-after")
    if retry_after:
        with contextlib.suppress(ValueError):
            return max(0.0, float(retry_after))

    reset = headers.get("x-ratelimit-reset-requests")
    if reset:
        parts = _DURATION_PART.findall(reset)
        if parts:
            scale = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}
            return sum(float(value) * scale[unit] for value, unit in parts)
    return None


class BaseProvider(ABC):
    """Abstract base class for AI provider plugins.

    Each provider supplies:
    - Its key format (prefix, length, character set)
    - A minimal-cost liveness request
    - Response interpretation onto the shared error taxonomy
    - Default rate limits
    """

    aliases: ClassVar[tuple[str, ...]] = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g., 'openai', 'anthropic')."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable provider name (e.g., 'OpenAI', 'Anthropic')."""
        ...

    @property
    @abstractmethod
    def key_format(self) -> KeyFormat:
        """Key format rules for this provider."""
        ...

    @property
    @abstractmethod
    def validation_endpoint(self) -> str:
        """Default API endpoint URL for live validation."""
        ...

    @abstractmethod
    def build_request(self, key: str, endpoint: str | None = None) -> httpx.Request:
        """Build the minimal liveness request for a key.

        Args:
            key: The API key to validate.
            endpoint: Endpoint override (defaults to ``validation_endpoint``).

        Returns:
            An unsent httpx request carrying the key in the provider's
            auth placement.
        """
        ...

    @abstractmethod
    def parse_response(
        self,
        status_code: int,
        body: dict[str, object] | None,
        headers: Mapping[str, str],
    ) -> ValidationResult:
        """Map a provider response onto a standardized result.

        Args:
            status_code: HTTP status code from the response.
            body: Parsed JSON body if available.
            headers: Response headers.

        Returns:
            ValidationResult with ``error_kind`` set for failures.
        """
        ...

    @abstractmethod
    def rate_limit_defaults(self) -> RateLimitConfig:
        """Return the default rate limits for this provider."""
        ...

    def validate_pattern(self, key: object) -> PatternResult:
        """Check a key against this provider's format without any I/O."""
        return validate_key_pattern(key, self.key_format, self.name, self.display_name)

    async def validate_live(
        self,
        key: str,
        client: httpx.AsyncClient,
        timeout: float,
        endpoint: str | None = None,
    ) -> ValidationResult:
        """Dispatch the liveness request and interpret the response.

        Transport failures (timeouts, refused connections) propagate as
        httpx exceptions so the caller can classify and retry them.

        Args:
            key: The API key to validate.
            client: Shared async HTTP client.
            timeout: Request timeout in seconds.
            endpoint: Endpoint override.

        Returns:
            ValidationResult mapped from the provider response.
        """
        request = self.build_request(key, endpoint)
        request.extensions["timeout"] = httpx.Timeout(timeout).as_dict()

        response = await client.send(request)
        body: dict[str, object] | None = None
        with contextlib.suppress(ValueError):
            parsed = response.json()
            if isinstance(parsed, dict):
                body = parsed

        return self.parse_response(response.status_code, body, response.headers)

    def _result(
        self,
        status_code: int,
        message: str,
        error_kind: ErrorKind | None = None,
        metadata: dict[str, str] | None = None,
    ) -> ValidationResult:
        """Build a result stamped with this provider and status."""
        return ValidationResult(
            valid=error_kind is None,
            provider=self.name,
            http_status=status_code,
            error_kind=error_kind,
            message=message,
            metadata=metadata or {},
        )

    def _default_failure(
        self,
        status_code: int,
        headers: Mapping[str, str],
    ) -> ValidationResult:
        """Map a non-success status using the conventions most providers share.

        - 401/403: key is invalid or revoked
        - 429: rate limited, reset hint captured in metadata
        - 5xx: provider-side failure
        - 404 and other 4xx: the request itself is misconfigured
        """
        if status_code in (401, 403):
            return self._result(
                status_code,
                f"{self.display_name} rejected the key as invalid or revoked",
                ErrorKind.AUTH_INVALID,
            )

        if status_code == 429:
            metadata: dict[str, str] = {}
            retry_after = parse_retry_after(headers)
            if retry_after is not None:
                metadata["retry_after"] = f"{retry_after:g}"
            return self._result(
                status_code,
                f"{self.display_name} rate limited the request",
                ErrorKind.RATE_LIMITED,
                metadata,
            )

        if 500 <= status_code < 600:
            return self._result(
                status_code,
                f"{self.display_name} server error: {status_code}",
                ErrorKind.SERVER_ERROR,
            )

        if 400 <= status_code < 500:
            return self._result(
                status_code,
                f"{self.display_name} rejected the validation request: {status_code}",
                ErrorKind.CONFIGURATION,
            )

        return self._result(
            status_code,
            f"Unexpected response from {self.display_name}: {status_code}",
            ErrorKind.UNKNOWN,
        )

    @staticmethod
    def _rate_limit_headers(headers: Mapping[str, str]) -> dict[str, str]:
        """Copy non-sensitive rate-limit headers into metadata."""
        return {
            name.lower().replace("-", "_"): value
            for name, value in headers.items()
            if name.lower().startswith(("x-ratelimit-", "anthropic-ratelimit-"))
        }

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<{self.__class__.__name__}(name={self.name!r})>"
