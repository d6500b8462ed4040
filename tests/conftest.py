"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import httpx
import pytest

from ai_key_validator.providers.registry import ProviderRegistry, create_default_registry
from ai_key_validator.utils.logging_setup import REDACTED_LOGGERS

# Well-formed test keys; none of these authenticate anywhere.
OPENAI_KEY = "sk-" + "abcDEF123456" * 4
ANTHROPIC_KEY = "sk-ant-api03-" + "Ab1_" * 22 + "x"
GEMINI_KEY = "AIzaSy" + "Abc123def456ghi789jkl012mno345pqr"
GROQ_KEY = "gsk_" + "abcd1234" * 6 + "wxyz"
HUGGINGFACE_KEY = "hf_" + "abcdefghij1234567890ABCDEFGHIJklmn"

VALID_KEYS = {
    "openai": OPENAI_KEY,
    "anthropic": ANTHROPIC_KEY,
    "gemini": GEMINI_KEY,
    "groq": GROQ_KEY,
    "huggingface": HUGGINGFACE_KEY,
}


@dataclass
class FakeClock:
    """Manually advanced monotonic clock with a matching async sleep."""

    now: float = 1000.0
    sleeps: list[float] = field(default_factory=list)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass
class RecordingTransport:
    """Mock transport that records requests and answers from a handler."""

    handler: Callable[[httpx.Request], httpx.Response]
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def valid_keys() -> dict[str, str]:
    """Well-formed keys for every built-in provider."""
    return dict(VALID_KEYS)


@pytest.fixture
def registry() -> ProviderRegistry:
    """Get a fresh default provider registry for testing."""
    return create_default_registry()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake clock starting at an arbitrary time."""
    return FakeClock()


@pytest.fixture
def ok_transport() -> RecordingTransport:
    """Transport answering every request with 200 and an empty model list."""
    return RecordingTransport(lambda request: httpx.Response(200, json={"data": []}))


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    """Factory for transports with a custom handler."""
    return RecordingTransport


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo handlers installed by configure_logging so caplog keeps working."""
    yield
    for name in REDACTED_LOGGERS:
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if getattr(h, "_akv_handler", False)]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
