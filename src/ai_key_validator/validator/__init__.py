"""Validator support: rate limiting, result caching and error recovery."""

from ai_key_validator.validator.cache import CacheStats, ResultCache, is_cacheable
from ai_key_validator.validator.rate_limiter import (
    BackoffStrategy,
    RateLimitConfig,
    RateLimiter,
    create_rate_limiter,
)
from ai_key_validator.validator.recovery import (
    ClassifiedError,
    ErrorClassifier,
    RecoveryPolicy,
)

__all__ = [
    "BackoffStrategy",
    "CacheStats",
    "ClassifiedError",
    "ErrorClassifier",
    "RateLimitConfig",
    "RateLimiter",
    "RecoveryPolicy",
    "ResultCache",
    "create_rate_limiter",
    "is_cacheable",
]
