"""Unit tests for the validation result cache."""

from __future__ import annotations

import pickle
from typing import TYPE_CHECKING

import pytest

from ai_key_validator.core.models import ErrorKind, ValidationResult
from ai_key_validator.validator.cache import CacheStats, ResultCache, is_cacheable

if TYPE_CHECKING:
    from tests.conftest import FakeClock

KEY = "sk-" + "abcDEF123456" * 4


def live_ok(provider: str = "openai") -> ValidationResult:
    return ValidationResult(valid=True, provider=provider, http_status=200, message="ok")


class TestIsCacheable:
    """Tests for the cacheability rule."""

    def test_live_success(self) -> None:
        """Successful live results are cacheable."""
        assert is_cacheable(live_ok())

    def test_auth_failure(self) -> None:
        """Invalid-key outcomes are not cached."""
        result = ValidationResult(
            valid=False, http_status=401, error_kind=ErrorKind.AUTH_INVALID
        )
        assert not is_cacheable(result)

    def test_pattern_success(self) -> None:
        """Pattern-only results never reach the cache."""
        assert not is_cacheable(ValidationResult(valid=True, http_status=0))


class TestResultCache:
    """Tests for ResultCache."""

    def test_miss_then_hit(self, fake_clock: FakeClock) -> None:
        """Stored results come back marked as served from cache."""
        cache = ResultCache(clock=fake_clock)
        assert cache.get("openai", KEY) is None
        assert cache.put("openai", KEY, live_ok())

        cached = cache.get("openai", KEY)
        assert cached is not None
        assert cached.served_from_cache
        assert cached.valid
        assert cache.stats.hits == 1
        assert cache.stats.misses == 1

    def test_provider_is_part_of_key(self, fake_clock: FakeClock) -> None:
        """The same key under another provider is a different entry."""
        cache = ResultCache(clock=fake_clock)
        cache.put("openai", KEY, live_ok())
        assert cache.get("groq", KEY) is None

    def test_negative_not_cached(self, fake_clock: FakeClock) -> None:
        """Failures are never stored."""
        cache = ResultCache(clock=fake_clock)
        failed = ValidationResult(
            valid=False, provider="openai", http_status=401, error_kind=ErrorKind.AUTH_INVALID
        )
        assert not cache.put("openai", KEY, failed)
        assert not cache.contains("openai", KEY)
        assert len(cache) == 0

    def test_ttl_expiry(self, fake_clock: FakeClock) -> None:
        """Entries expire lazily after their TTL."""
        cache = ResultCache(ttl_seconds=60, clock=fake_clock)
        cache.put("openai", KEY, live_ok())
        fake_clock.advance(59)
        assert cache.contains("openai", KEY)
        fake_clock.advance(1)
        assert cache.get("openai", KEY) is None
        assert len(cache) == 0

    def test_evicts_lowest_hit_count(self, fake_clock: FakeClock) -> None:
        """At capacity the least used entry goes first."""
        cache = ResultCache(max_size=2, clock=fake_clock)
        cache.put("openai", "key-a", live_ok())
        fake_clock.advance(1)
        cache.put("openai", "key-b", live_ok())
        cache.get("openai", "key-a")

        cache.put("openai", "key-c", live_ok())
        assert cache.contains("openai", "key-a")
        assert not cache.contains("openai", "key-b")
        assert cache.contains("openai", "key-c")
        assert cache.stats.evictions == 1

    def test_evicts_oldest_on_tie(self, fake_clock: FakeClock) -> None:
        """Ties on hit count evict the oldest entry."""
        cache = ResultCache(max_size=2, clock=fake_clock)
        cache.put("openai", "key-a", live_ok())
        fake_clock.advance(1)
        cache.put("openai", "key-b", live_ok())
        fake_clock.advance(1)
        cache.put("openai", "key-c", live_ok())
        assert not cache.contains("openai", "key-a")
        assert cache.contains("openai", "key-b")

    def test_expired_entries_evicted_first(self, fake_clock: FakeClock) -> None:
        """Expired entries make room before live ones are touched."""
        cache = ResultCache(max_size=2, ttl_seconds=10, clock=fake_clock)
        cache.put("openai", "key-a", live_ok())
        fake_clock.advance(5)
        cache.put("openai", "key-b", live_ok())
        fake_clock.advance(6)
        cache.put("openai", "key-c", live_ok())
        assert cache.contains("openai", "key-b")
        assert cache.contains("openai", "key-c")

    def test_never_stores_key_material(self, fake_clock: FakeClock) -> None:
        """Neither the index nor the stored values contain the raw key."""
        cache = ResultCache(clock=fake_clock)
        cache.put("openai", KEY, live_ok())

        dumped = pickle.dumps(cache._store) + repr(cache._store).encode()
        for start in range(0, len(KEY) - 8):
            assert KEY[start : start + 8].encode() not in dumped

    def test_cache_key_is_salted_per_instance(self) -> None:
        """Two caches derive different ids for the same pair."""
        assert ResultCache().cache_key("openai", KEY) != ResultCache().cache_key("openai", KEY)

    def test_invalidate_and_clear(self, fake_clock: FakeClock) -> None:
        """Entries can be dropped individually or all at once."""
        cache = ResultCache(clock=fake_clock)
        cache.put("openai", "key-a", live_ok())
        cache.put("openai", "key-b", live_ok())
        cache.invalidate("openai", "key-a")
        assert not cache.contains("openai", "key-a")
        cache.clear()
        assert len(cache) == 0

    def test_invalid_size(self) -> None:
        """A cache must hold at least one entry."""
        with pytest.raises(ValueError):
            ResultCache(max_size=0)


class TestCacheStats:
    """Tests for CacheStats."""

    def test_hit_rate(self) -> None:
        """Hit rate is hits over lookups."""
        stats = CacheStats(hits=3, misses=1)
        assert stats.hit_rate == 0.75
        assert stats.to_dict()["hit_rate"] == 0.75

    def test_empty_hit_rate(self) -> None:
        """No lookups means a zero hit rate."""
        assert CacheStats().hit_rate == 0.0
