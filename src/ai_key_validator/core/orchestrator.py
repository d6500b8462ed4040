"""Validation orchestrator that drives a request through its lifecycle.

This module ties together all components:
- Pattern validation (offline, zero cost)
- ResultCache for successful live outcomes
- RateLimiter for per-provider admission control
- Provider plugins for the live check
- ErrorClassifier and RecoveryPolicy for retries

Each request moves through the stages
RECEIVED -> PATTERN_CHECKED -> CACHE_CHECKED -> RATE_ADMITTED ->
LIVE_DISPATCHED -> RESPONSE_CLASSIFIED -> COMPLETE, short-circuiting to
COMPLETE on a pattern failure, a pattern-only strategy, or a cache hit.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

import httpx

from ai_key_validator.core.errors import ConfigurationError, KeyValidatorError
from ai_key_validator.core.models import (
    BatchOptions,
    ErrorKind,
    PatternResult,
    ValidationOptions,
    ValidationRequest,
    ValidationResult,
    ValidationStrategy,
)
from ai_key_validator.core.pattern import check_key_input
from ai_key_validator.core.secret import ScopedSecret
from ai_key_validator.providers.registry import ProviderRegistry, create_default_registry
from ai_key_validator.utils.redaction import redact_in_text, sanitize_text
from ai_key_validator.validator.cache import ResultCache
from ai_key_validator.validator.rate_limiter import BackoffStrategy, RateLimiter
from ai_key_validator.validator.recovery import ClassifiedError, ErrorClassifier, RecoveryPolicy

if TYPE_CHECKING:
    from ai_key_validator.providers.base import BaseProvider
    from ai_key_validator.utils.config import Settings

logger = logging.getLogger(__name__)


class ValidationStage(str, Enum):
    """Lifecycle stages of a single validation request."""

    RECEIVED = "received"
    PATTERN_CHECKED = "pattern_checked"
    CACHE_CHECKED = "cache_checked"
    RATE_ADMITTED = "rate_admitted"
    LIVE_DISPATCHED = "live_dispatched"
    RESPONSE_CLASSIFIED = "response_classified"
    COMPLETE = "complete"


@dataclass
class RequestTrace:
    """Per-request lifecycle record, safe to log (holds no key material).

    Attributes:
        provider: Canonical provider id.
        request_id: Short random id used to correlate log lines.
        stages: Stages entered so far, in order.
        attempts: Live requests dispatched so far.
    """

    provider: str
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    stages: list[ValidationStage] = field(default_factory=list)
    attempts: int = 0

    @property
    def stage(self) -> ValidationStage | None:
        """The current stage."""
        return self.stages[-1] if self.stages else None

    def advance(self, stage: ValidationStage) -> None:
        """Enter a new stage."""
        logger.debug(
            "[%s] %s: %s -> %s",
            self.request_id,
            self.provider,
            self.stage.value if self.stage else "-",
            stage.value,
        )
        self.stages.append(stage)


@dataclass
class ValidatorConfig:
    """Configuration for the validation orchestrator.

    Attributes:
        timeout: Default per-request timeout in seconds.
        max_concurrent: Maximum live requests in flight across all callers.
        live_enabled: If False, AUTO requests stop after the pattern check.
        disabled_providers: Provider ids with live checks turned off.
        endpoints: Validation endpoint overrides keyed by provider id.
    """

    timeout: float = 10.0
    max_concurrent: int = 5
    live_enabled: bool = True
    disabled_providers: frozenset[str] = frozenset()
    endpoints: dict[str, str] = field(default_factory=dict)


class KeyValidator:
    """Validates API keys offline and against provider endpoints.

    The validator never raises for expected failures such as an invalid key
    or an unreachable provider; it returns a ``ValidationResult`` with
    ``valid=False`` and the error fields populated. Only programming and
    configuration mistakes propagate as exceptions.

    Example:
        ```python
        async with KeyValidator() as validator:
            result = await validator.validate("openai", "sk-...")
            print(result.valid, result.error_kind)
        ```
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        config: ValidatorConfig | None = None,
        cache: ResultCache | None = None,
        rate_limiter: RateLimiter | None = None,
        recovery: RecoveryPolicy | None = None,
        classifier: ErrorClassifier | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the validator.

        Args:
            registry: Provider registry (a fresh default registry if omitted).
            config: Validator configuration.
            cache: Result cache, or None to disable caching.
            rate_limiter: Rate limiter, or None to disable client-side limiting.
            recovery: Retry policy.
            classifier: Error classifier.
            http_client: Shared HTTP client; the validator creates and owns
                one when omitted.
            sleep: Coroutine used for retry backoff.
        """
        self.config = config or ValidatorConfig()
        self._registry = registry if registry is not None else create_default_registry()
        self._cache = cache
        self._rate_limiter = rate_limiter
        self._recovery = recovery or RecoveryPolicy()
        self._classifier = classifier or ErrorClassifier()
        self._client = http_client
        self._owns_client = http_client is None
        self._sleep = sleep
        if self.config.max_concurrent < 1:
            raise ConfigurationError("max_concurrent must be at least 1")
        self._semaphore = asyncio.Semaphore(self.config.max_concurrent)

        unknown = [p for p in self.config.endpoints if p not in self._registry]
        unknown += [p for p in self.config.disabled_providers if p not in self._registry]
        if unknown:
            raise ConfigurationError(f"Settings refer to unknown providers: {sorted(set(unknown))}")

        for provider in self._registry.all():
            self._configure_rate_limit(provider)

    @property
    def registry(self) -> ProviderRegistry:
        """The provider registry this validator dispatches through."""
        return self._registry

    @property
    def cache(self) -> ResultCache | None:
        """The result cache, if caching is enabled."""
        return self._cache

    @property
    def rate_limiter(self) -> RateLimiter | None:
        """The rate limiter, if client-side limiting is enabled."""
        return self._rate_limiter

    @property
    def is_open(self) -> bool:
        """Check if the HTTP client is open and ready for requests."""
        return self._client is not None and not self._client.is_closed

    def _configure_rate_limit(self, provider: BaseProvider) -> None:
        if self._rate_limiter is not None and not self._rate_limiter.has_config(provider.name):
            self._rate_limiter.configure_provider(provider.name, provider.rate_limit_defaults())

    def register_provider(self, provider: BaseProvider) -> None:
        """Register a custom provider plugin.

        Args:
            provider: Provider instance to register.

        Raises:
            ConfigurationError: If the id or an alias is already taken.
        """
        self._registry.register(provider)
        self._configure_rate_limit(provider)

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is created."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this validator created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> KeyValidator:
        """Enter async context manager."""
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager."""
        await self.close()

    def validate_pattern(self, provider: str, key: object) -> PatternResult:
        """Check a key's format without any network access.

        Args:
            provider: Provider id or alias.
            key: Candidate key (a ``ScopedSecret`` is read, not released).

        Returns:
            PatternResult for the first failing axis, or success.
        """
        plugin = self._registry.get(provider)
        if plugin is None:
            return PatternResult(
                valid=False,
                error_kind=ErrorKind.INVALID_PREFIX,
                message=f"Unsupported provider: {provider}",
                provider=str(provider),
            )
        raw = key.reveal() if isinstance(key, ScopedSecret) else key
        return check_key_input(raw, plugin.name) or plugin.validate_pattern(raw)

    async def validate(
        self,
        provider: str,
        key: str | ScopedSecret,
        options: ValidationOptions | None = None,
    ) -> ValidationResult:
        """Validate a key against a provider.

        Raw string keys are held in a ``ScopedSecret`` for the duration of
        the call and released on every exit path. A ``ScopedSecret`` passed
        in stays owned by the caller.

        Args:
            provider: Provider id or alias.
            key: The key to validate.
            options: Per-call options.

        Returns:
            The standardized validation result.
        """
        options = options or ValidationOptions()
        started = time.perf_counter()

        plugin = self._registry.get(provider)
        if plugin is None:
            result = self._unknown_provider(provider)
        elif isinstance(key, ScopedSecret):
            result = await self._run(plugin, key, options)
        elif not isinstance(key, str):
            result = self._pattern_failure(self.validate_pattern(provider, key), plugin)
        else:
            with ScopedSecret(key) as secret:
                result = await self._run(plugin, secret, options)

        elapsed_ms = (time.perf_counter() - started) * 1000
        return result.model_copy(update={"elapsed_ms": elapsed_ms})

    async def validate_batch(
        self,
        requests: Sequence[ValidationRequest],
        options: BatchOptions | None = None,
    ) -> list[ValidationResult]:
        """Validate many keys concurrently.

        One request's failure never aborts the others unless
        ``stop_on_error`` is set, in which case requests that have not yet
        started are skipped.

        Args:
            requests: Keys to validate.
            options: Batch options.

        Returns:
            Results aligned with ``requests``. Progress callbacks fire in
            completion order.
        """
        options = options or BatchOptions()
        total = len(requests)
        if total == 0:
            return []

        concurrency = (
            options.concurrency if options.concurrency is not None else self.config.max_concurrent
        )
        if concurrency < 1:
            raise ConfigurationError("Batch concurrency must be at least 1")

        await self._ensure_client()
        semaphore = asyncio.Semaphore(concurrency)
        stop = asyncio.Event()
        completed = 0

        async def run_one(request: ValidationRequest) -> ValidationResult:
            nonlocal completed
            try:
                async with semaphore:
                    if stop.is_set():
                        return self._skipped(request.provider)
                    result = await self.validate(request.provider, request.key, request.options)
                    if options.stop_on_error and not result.valid:
                        stop.set()
                return result
            finally:
                completed += 1
                if options.on_progress is not None:
                    options.on_progress(completed, total)

        outcomes = await asyncio.gather(*(run_one(r) for r in requests), return_exceptions=True)

        results: list[ValidationResult] = []
        for request, outcome in zip(requests, outcomes, strict=True):
            if isinstance(outcome, KeyValidatorError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.error(
                    "Batch request for %s failed: %s",
                    request.provider,
                    sanitize_text(str(outcome)),
                )
                error = self._classifier.classify_exception(outcome)
                results.append(error.to_result(request.provider))
            else:
                results.append(outcome)
        return results

    async def _run(
        self,
        plugin: BaseProvider,
        secret: ScopedSecret,
        options: ValidationOptions,
    ) -> ValidationResult:
        """Drive one request through its lifecycle."""
        trace = RequestTrace(provider=plugin.name)
        trace.advance(ValidationStage.RECEIVED)
        raw = secret.reveal()

        pattern = check_key_input(raw, plugin.name) or plugin.validate_pattern(raw)
        trace.advance(ValidationStage.PATTERN_CHECKED)
        if not pattern.valid:
            trace.advance(ValidationStage.COMPLETE)
            return self._pattern_failure(pattern, plugin)

        if options.strategy is ValidationStrategy.PATTERN_ONLY:
            trace.advance(ValidationStage.COMPLETE)
            return ValidationResult.from_pattern(pattern, plugin.name)

        if not self._live_allowed(plugin):
            trace.advance(ValidationStage.COMPLETE)
            if options.strategy is ValidationStrategy.LIVE:
                error = self._classifier.classify(
                    ErrorKind.CONFIGURATION,
                    f"Live validation is disabled for {plugin.display_name}",
                    plugin.display_name,
                )
                return error.to_result(plugin.name)
            return ValidationResult.from_pattern(pattern, plugin.name).model_copy(
                update={"metadata": {"live_check": "disabled"}}
            )

        if self._cache is not None and not options.bypass_cache:
            cached = self._cache.get(plugin.name, raw)
            trace.advance(ValidationStage.CACHE_CHECKED)
            if cached is not None:
                trace.advance(ValidationStage.COMPLETE)
                return cached

        timeout = options.timeout or self.config.timeout
        result = await self._dispatch_with_recovery(plugin, raw, timeout, trace)

        if self._cache is not None:
            self._cache.put(plugin.name, raw, result)
        trace.advance(ValidationStage.COMPLETE)
        return result

    async def _dispatch_with_recovery(
        self,
        plugin: BaseProvider,
        raw: str,
        timeout: float,
        trace: RequestTrace,
    ) -> ValidationResult:
        """Send the live check, retrying retryable failures."""
        client = await self._ensure_client()
        endpoint = self.config.endpoints.get(plugin.name)

        while True:
            if self._rate_limiter is not None:
                await self._rate_limiter.acquire(plugin.name)
            trace.advance(ValidationStage.RATE_ADMITTED)

            async with self._semaphore:
                trace.attempts += 1
                trace.advance(ValidationStage.LIVE_DISPATCHED)
                try:
                    async with asyncio.timeout(timeout):
                        result = await plugin.validate_live(raw, client, timeout, endpoint)
                except KeyValidatorError:
                    raise
                except Exception as e:
                    error = self._classifier.classify_exception(e, plugin.display_name)
                    error = replace(error, message=redact_in_text(error.message, raw))
                    if error.kind is ErrorKind.UNKNOWN:
                        logger.error(
                            "[%s] Unexpected error during validation: %s",
                            trace.request_id,
                            error.message,
                        )
                else:
                    if result.valid:
                        trace.advance(ValidationStage.RESPONSE_CLASSIFIED)
                        return result.model_copy(update={"attempts": trace.attempts})
                    error = self._classifier.classify_result(result, plugin.display_name)

            trace.advance(ValidationStage.RESPONSE_CLASSIFIED)
            if not self._recovery.should_retry(error, trace.attempts):
                return self._terminal(error, plugin, trace)

            await self._recover(error, plugin, trace)

    async def _recover(
        self,
        error: ClassifiedError,
        plugin: BaseProvider,
        trace: RequestTrace,
    ) -> None:
        """Wait according to the failure kind before the next attempt."""
        if error.kind is ErrorKind.RATE_LIMITED and self._rate_limiter is not None:
            wait = error.retry_after
            if wait is None:
                wait = self._recovery.backoff_delay(trace.attempts)
            self._rate_limiter.apply_reset_hint(plugin.name, wait)
            logger.debug(
                "[%s] %s rate limited, next attempt after %.2fs",
                trace.request_id,
                plugin.name,
                wait,
            )
            return

        delay = error.retry_after if error.retry_after is not None else (
            self._recovery.backoff_delay(trace.attempts)
        )
        logger.debug(
            "[%s] %s failed with %s, retrying in %.2fs (attempt %d/%d)",
            trace.request_id,
            plugin.name,
            error.kind.value,
            delay,
            trace.attempts,
            self._recovery.max_attempts,
        )
        await self._sleep(delay)

    def _terminal(
        self,
        error: ClassifiedError,
        plugin: BaseProvider,
        trace: RequestTrace,
    ) -> ValidationResult:
        """Build the final result for a failure recovery will not retry."""
        if (
            error.kind is ErrorKind.RATE_LIMITED
            and error.retry_after is not None
            and error.retry_after > self._recovery.max_rate_limit_wait
        ):
            error = replace(
                error,
                message=(
                    f"{error.message}; reset in {error.retry_after:g}s exceeds the "
                    f"{self._recovery.max_rate_limit_wait:g}s wait limit"
                ),
            )
        if error.retryable:
            logger.info(
                "[%s] %s gave up after %d attempt(s): %s",
                trace.request_id,
                plugin.name,
                trace.attempts,
                error.kind.value,
            )
        return error.to_result(plugin.name, trace.attempts)

    def _live_allowed(self, plugin: BaseProvider) -> bool:
        return self.config.live_enabled and plugin.name not in self.config.disabled_providers

    def _pattern_failure(self, pattern: PatternResult, plugin: BaseProvider) -> ValidationResult:
        result = ValidationResult.from_pattern(pattern, plugin.name)
        if pattern.error_kind is None:
            return result
        suggestions = self._classifier.suggestions_for(pattern.error_kind, plugin.display_name)
        example = plugin.key_format.example
        if example:
            suggestions += (f"Expected format: {example}",)
        return result.model_copy(update={"suggestions": suggestions})

    def _unknown_provider(self, provider: object) -> ValidationResult:
        supported = ", ".join(sorted(self._registry.names()))
        return ValidationResult(
            valid=False,
            provider=str(provider),
            error_kind=ErrorKind.CONFIGURATION,
            message=f"Unknown provider: {provider}",
            suggestions=(f"Use one of: {supported}",),
        )

    def _skipped(self, provider: str) -> ValidationResult:
        return ValidationResult(
            valid=False,
            provider=provider,
            error_kind=ErrorKind.UNKNOWN,
            message="Skipped: batch stopped after an earlier failure",
            retryable=True,
        )


def create_validator(
    settings: Settings | None = None,
    registry: ProviderRegistry | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> KeyValidator:
    """Create a validator from settings.

    Args:
        settings: Loaded settings (environment and defaults if omitted).
        registry: Provider registry (a fresh default registry if omitted).
        http_client: Shared HTTP client.

    Returns:
        Configured KeyValidator instance.

    Raises:
        ConfigurationError: If the settings are malformed.
    """
    if settings is None:
        from ai_key_validator.utils.config import load_config

        settings = load_config()

    registry = registry if registry is not None else create_default_registry()

    for name in [*settings.providers, *settings.rate_limit.overrides]:
        if name not in registry:
            raise ConfigurationError(f"Settings refer to unknown provider: {name}")
    overrides = {
        registry.require(name).name: value
        for name, value in settings.rate_limit.overrides.items()
    }

    try:
        backoff = BackoffStrategy(settings.rate_limit.backoff.lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown rate limit backoff: {settings.rate_limit.backoff}"
        ) from None

    rate_limiter: RateLimiter | None = None
    if settings.rate_limit.enabled:
        rate_limiter = RateLimiter()
        for provider in registry.all():
            limits = replace(
                provider.rate_limit_defaults(),
                backoff=backoff,
                base_delay=settings.rate_limit.base_delay,
                max_delay=settings.rate_limit.max_delay,
            )
            override = overrides.get(provider.name)
            if override is not None:
                limits = replace(limits, **override.model_dump(exclude_none=True))
            rate_limiter.configure_provider(provider.name, limits)

    cache: ResultCache | None = None
    if settings.cache.enabled:
        cache = ResultCache(
            max_size=settings.cache.max_size,
            ttl_seconds=settings.cache.ttl_seconds,
        )

    provider_settings = {
        registry.require(name).name: value for name, value in settings.providers.items()
    }
    config = ValidatorConfig(
        timeout=settings.validator.timeout_seconds,
        max_concurrent=settings.validator.max_concurrent,
        live_enabled=settings.validator.enabled,
        disabled_providers=frozenset(n for n, p in provider_settings.items() if not p.enabled),
        endpoints={n: p.endpoint for n, p in provider_settings.items() if p.endpoint},
    )
    recovery = RecoveryPolicy(
        max_attempts=settings.validator.max_attempts,
        base_delay=settings.validator.retry_base_delay,
        max_delay=settings.validator.retry_max_delay,
        jitter=settings.validator.retry_jitter,
        max_rate_limit_wait=settings.validator.max_rate_limit_wait,
    )
    logger.debug("Validator configured for providers: %s", ", ".join(registry.names()))

    return KeyValidator(
        registry=registry,
        config=config,
        cache=cache,
        rate_limiter=rate_limiter,
        recovery=recovery,
        http_client=http_client,
    )
