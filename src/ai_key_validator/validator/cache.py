"""Bounded TTL cache for validation outcomes.

Entries are keyed by an HMAC of (provider, key) under a per-process random
salt, so the cache never holds key material in any recoverable form. Only
successful live outcomes are stored; failures are always recomputed so a
caller can retry immediately after fixing something.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from ai_key_validator.core.models import ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached validation outcome.

    Attributes:
        cached_result: The stored result.
        inserted_at: Monotonic time of insertion.
        ttl: Lifetime in seconds.
        hit_count: Number of times the entry was served.
    """

    cached_result: ValidationResult
    inserted_at: float
    ttl: float
    hit_count: int = 0

    def is_expired(self, now: float) -> bool:
        """Whether the entry has outlived its TTL."""
        return now - self.inserted_at >= self.ttl


@dataclass
class CacheStats:
    """Hit/miss counters for a cache."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def total(self) -> int:
        """Number of lookups."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from the cache."""
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, float]:
        """Return the counters and rounded hit rate."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 3),
        }


def is_cacheable(result: ValidationResult) -> bool:
    """Only successful live outcomes are worth caching."""
    return result.valid and result.error_kind is None and result.is_live


class ResultCache:
    """In-memory TTL cache for validation results with a size limit.

    When full, the entry with the lowest hit count is evicted (the oldest
    one among ties). Expired entries are dropped lazily on access.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            max_size: Maximum number of entries.
            ttl_seconds: Default entry lifetime.
            clock: Monotonic clock in seconds.
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl = ttl_seconds
        self.stats = CacheStats()
        self._clock = clock
        self._salt = secrets.token_bytes(32)
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def cache_key(self, provider: str, key: str) -> str:
        """Derive the one-way lookup id for (provider, key)."""
        message = f"{provider}:{key}".encode()
        return hmac.new(self._salt, message, hashlib.sha256).hexdigest()

    def get(self, provider: str, key: str) -> ValidationResult | None:
        """Return the cached result for (provider, key), if present and fresh.

        Args:
            provider: Provider identifier.
            key: Raw key, used only to derive the lookup id.

        Returns:
            A copy of the cached result marked ``served_from_cache``, or None.
        """
        lookup = self.cache_key(provider, key)
        with self._lock:
            entry = self._store.get(lookup)
            if entry is None:
                self.stats.misses += 1
                return None
            if entry.is_expired(self._clock()):
                del self._store[lookup]
                self.stats.misses += 1
                return None
            entry.hit_count += 1
            self.stats.hits += 1
            return entry.cached_result.model_copy(update={"served_from_cache": True})

    def put(self, provider: str, key: str, result: ValidationResult) -> bool:
        """Store a result if it is a successful live outcome.

        Args:
            provider: Provider identifier.
            key: Raw key, used only to derive the lookup id.
            result: The outcome to store.

        Returns:
            True if the result was stored.
        """
        if not is_cacheable(result):
            return False

        lookup = self.cache_key(provider, key)
        with self._lock:
            now = self._clock()
            if lookup not in self._store and len(self._store) >= self.max_size:
                self._evict(now)
            self._store[lookup] = CacheEntry(cached_result=result, inserted_at=now, ttl=self.ttl)
        return True

    def _evict(self, now: float) -> None:
        """Make room for one entry. Caller holds the lock."""
        expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
        if expired:
            for lookup in expired:
                del self._store[lookup]
            self.stats.evictions += len(expired)
            return

        victim = min(
            self._store,
            key=lambda k: (self._store[k].hit_count, self._store[k].inserted_at),
        )
        del self._store[victim]
        self.stats.evictions += 1
        logger.debug("Cache full (%d entries), evicted least used entry", self.max_size)

    def contains(self, provider: str, key: str) -> bool:
        """Check for a fresh entry without counting a hit or miss."""
        lookup = self.cache_key(provider, key)
        with self._lock:
            entry = self._store.get(lookup)
            return entry is not None and not entry.is_expired(self._clock())

    def invalidate(self, provider: str, key: str) -> None:
        """Remove the entry for (provider, key) if present."""
        with self._lock:
            self._store.pop(self.cache_key(provider, key), None)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
