"""Rate limiting for live validation requests.

This module provides per-provider sliding-window admission control so the
validator never overwhelms a provider API. Waiting for a slot suspends only
the calling task; other validations keep running.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from ai_key_validator.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

MINUTE = 60.0
HOUR = 3600.0
BURST_WINDOW = 1.0


class BackoffStrategy(str, Enum):
    """Shape of the delay between failed admission checks."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for rate limiting a provider.

    Attributes:
        requests_per_minute: Maximum requests admitted in any trailing minute.
        requests_per_hour: Maximum requests admitted in any trailing hour.
        burst_size: Maximum requests admitted in any trailing second.
        backoff: Delay growth between failed admission checks.
        base_delay: First backoff delay in seconds.
        max_delay: Upper bound on a single backoff delay in seconds.
    """

    requests_per_minute: int = 60
    requests_per_hour: int = 1000
    burst_size: int = 5
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    base_delay: float = 0.25
    max_delay: float = 10.0

    def __post_init__(self) -> None:
        """Reject limits that could never admit a request."""
        if self.requests_per_minute < 1 or self.requests_per_hour < 1 or self.burst_size < 1:
            raise ConfigurationError("Rate limits must allow at least one request")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ConfigurationError("Backoff delays must not be negative")

    def backoff_delay(self, attempt: int) -> float:
        """Delay before admission check number ``attempt + 1``.

        Args:
            attempt: Zero-based count of failed admission checks so far.

        Returns:
            Delay in seconds, capped at ``max_delay``.
        """
        if self.backoff is BackoffStrategy.LINEAR:
            delay = self.base_delay * (attempt + 1)
        else:
            delay = self.base_delay * (2**attempt)
        return min(delay, self.max_delay)


@dataclass
class RateLimitWindow:
    """Sliding window of dispatch timestamps for one provider.

    Attributes:
        config: Limits applied to this window.
        timestamps: Monotonic times of recorded dispatches (oldest first).
        blocked_until: Monotonic time before which nothing is admitted,
            set from a provider's reset hint.
    """

    config: RateLimitConfig
    timestamps: deque[float] = field(default_factory=deque)
    blocked_until: float = 0.0

    def prune(self, now: float) -> None:
        """Drop timestamps older than the longest window."""
        while self.timestamps and now - self.timestamps[0] >= HOUR:
            self.timestamps.popleft()

    def count_since(self, since: float) -> int:
        """Count dispatches recorded after ``since``."""
        count = 0
        for stamp in reversed(self.timestamps):
            if stamp <= since:
                break
            count += 1
        return count

    def wait_needed(self, now: float) -> float:
        """Seconds until the window would admit another request."""
        self.prune(now)
        waits = [self.blocked_until - now]
        for span, limit in (
            (BURST_WINDOW, self.config.burst_size),
            (MINUTE, self.config.requests_per_minute),
            (HOUR, self.config.requests_per_hour),
        ):
            in_window = self.count_since(now - span)
            if in_window >= limit:
                # The request that must age out is the limit-th most recent one.
                oldest_blocking = self.timestamps[len(self.timestamps) - limit]
                waits.append(oldest_blocking + span - now)
        return max(0.0, *waits)

    def admitted_counts(self, now: float) -> tuple[int, int]:
        """Return dispatches in the trailing minute and trailing hour."""
        self.prune(now)
        return self.count_since(now - MINUTE), self.count_since(now - HOUR)


class RateLimiter:
    """Per-provider sliding-window rate limiter.

    Example:
        ```python
        limiter = RateLimiter()
        limiter.configure_provider("openai", RateLimitConfig(requests_per_minute=30))

        await limiter.acquire("openai")
        # Make API request
        ```
    """

    def __init__(
        self,
        default_config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            default_config: Config for providers with no explicit config.
            clock: Monotonic clock in seconds.
            sleep: Coroutine used to suspend while waiting for a slot.
        """
        self._default_config = default_config or RateLimitConfig()
        self._clock = clock
        self._sleep = sleep
        self._configs: dict[str, RateLimitConfig] = {}
        self._windows: dict[str, RateLimitWindow] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def configure_provider(self, provider_name: str, config: RateLimitConfig) -> None:
        """Set the limits for a provider, keeping its recorded history.

        Args:
            provider_name: Name of the provider.
            config: Rate limit configuration.
        """
        self._configs[provider_name] = config
        if provider_name in self._windows:
            self._windows[provider_name].config = config

    def has_config(self, provider_name: str) -> bool:
        """Check whether explicit limits were set for a provider."""
        return provider_name in self._configs

    def config_for(self, provider_name: str) -> RateLimitConfig:
        """Return the effective config for a provider."""
        return self._configs.get(provider_name, self._default_config)

    def _get_window(self, provider_name: str) -> RateLimitWindow:
        window = self._windows.get(provider_name)
        if window is None:
            window = RateLimitWindow(config=self.config_for(provider_name))
            self._windows[provider_name] = window
        return window

    def check_admission(self, provider_name: str) -> bool:
        """Check whether a request may be dispatched now.

        Args:
            provider_name: Name of the provider.

        Returns:
            True if the per-second, per-minute and per-hour ceilings all
            have room and no provider reset hint is pending.
        """
        return self._get_window(provider_name).wait_needed(self._clock()) <= 0

    def record_dispatch(self, provider_name: str) -> None:
        """Record that a request was sent to the provider.

        Args:
            provider_name: Name of the provider.
        """
        self._get_window(provider_name).timestamps.append(self._clock())

    def get_wait_time(self, provider_name: str) -> float:
        """Get wait time until the next request would be admitted.

        Args:
            provider_name: Name of the provider.

        Returns:
            Time in seconds to wait (0 if a request can be sent now).
        """
        return self._get_window(provider_name).wait_needed(self._clock())

    def usage(self, provider_name: str) -> tuple[int, int]:
        """Return (trailing-minute, trailing-hour) dispatch counts for a provider."""
        return self._get_window(provider_name).admitted_counts(self._clock())

    def apply_reset_hint(self, provider_name: str, retry_after: float) -> None:
        """Honor a provider's explicit reset time on the next wait.

        Args:
            provider_name: Name of the provider.
            retry_after: Seconds until the provider accepts requests again.
        """
        window = self._get_window(provider_name)
        window.blocked_until = max(window.blocked_until, self._clock() + retry_after)
        logger.debug("Provider %s asked to wait %.2fs", provider_name, retry_after)

    async def await_slot(self, provider_name: str) -> float:
        """Suspend until the provider's window admits a request.

        The delay between checks follows the configured backoff shape and
        never overshoots the moment the window frees up.

        Args:
            provider_name: Name of the provider.

        Returns:
            Total time spent waiting in seconds.
        """
        window = self._get_window(provider_name)
        waited = 0.0
        attempt = 0
        while True:
            needed = window.wait_needed(self._clock())
            if needed <= 0:
                return waited
            delay = min(window.config.backoff_delay(attempt), needed)
            if delay <= 0:
                delay = needed
            logger.debug(
                "Rate limit for %s reached, waiting %.2fs (check %d)",
                provider_name,
                delay,
                attempt + 1,
            )
            await self._sleep(delay)
            waited += delay
            attempt += 1

    async def acquire(self, provider_name: str) -> float:
        """Wait for a slot and record the dispatch atomically.

        Concurrent callers for the same provider are admitted one at a
        time so a freed slot is never handed to two requests.

        Args:
            provider_name: Name of the provider.

        Returns:
            Time spent waiting in seconds.
        """
        lock = self._locks.setdefault(provider_name, asyncio.Lock())
        async with lock:
            waited = await self.await_slot(provider_name)
            self.record_dispatch(provider_name)
            return waited

    def reset(self, provider_name: str | None = None) -> None:
        """Reset rate limiter state.

        Args:
            provider_name: Provider to reset, or None to reset all.
        """
        if provider_name:
            self._windows.pop(provider_name, None)
        else:
            self._windows.clear()


def create_rate_limiter(
    custom_limits: dict[str, RateLimitConfig] | None = None,
    default_config: RateLimitConfig | None = None,
) -> RateLimiter:
    """Create a configured rate limiter.

    Args:
        custom_limits: Rate limits for specific providers.
        default_config: Config for providers with no explicit limits.

    Returns:
        Configured RateLimiter instance.
    """
    limiter = RateLimiter(default_config=default_config)
    if custom_limits:
        for provider_name, config in custom_limits.items():
            limiter.configure_provider(provider_name, config)
    return limiter

