"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from typing import Union
from unittest.mock import AsyncMock

import pytest

from acquisition_layer.cache.response_cache import ResponseCache
from acquisition_layer.circuit.registry import CircuitBreakerRegistry
from acquisition_layer.config import Settings
from acquisition_layer.retry.executor import RetryExecutor
from acquisition_layer.retry.policy import RetryPolicy


class FakeClock:
    """Manually advanced time source (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedProvider:
    """Transcript provider that replays a scripted list of outcomes.

    Each fetch() consumes the next outcome: a string is returned, an
    exception instance is raised. The last outcome repeats once the script
    is exhausted.
    """

    def __init__(self, name: str, outcomes: list[Union[str, BaseException]]):
        self.name = name
        self.outcomes = list(outcomes)
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, key: str) -> str:
        self.calls.append(key)
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.FAILURE_THRESHOLD = 1
    """
    return Settings(
        # === Application ===
        APP_NAME="Content Acquisition Layer (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Resilience ===
        FAILURE_THRESHOLD=3,
        RESET_TIMEOUT_SECONDS=300.0,
        REQUEST_TIMEOUT_SECONDS=30.0,
        CACHE_TTL_SECONDS=3600.0,
        RETRY_MAX_ATTEMPTS=3,
        RETRY_INITIAL_DELAY=1.0,

        # === Providers ===
        TRANSCRIPT_PROVIDERS=["youtubetotranscript"],

        # === Ollama ===
        OLLAMA_BASE_URL="http://localhost:11434",
        OLLAMA_MODEL="qwen2.5:7b",
        OLLAMA_TIMEOUT=60,

        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that records delays without waiting."""
    return AsyncMock(return_value=None)


@pytest.fixture
def retry_executor(fake_sleep: AsyncMock) -> RetryExecutor:
    return RetryExecutor(sleep=fake_sleep)


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Three attempts, 1 s base delay (sleeps are faked)."""
    return RetryPolicy(max_attempts=3, initial_delay=1.0)


@pytest.fixture
def registry(fake_clock: FakeClock) -> CircuitBreakerRegistry:
    return CircuitBreakerRegistry(failure_threshold=3, reset_timeout=300.0, clock=fake_clock)


@pytest.fixture
def cache(fake_clock: FakeClock) -> ResponseCache:
    return ResponseCache(ttl=3600.0, clock=fake_clock)


@pytest.fixture
def make_provider():
    """Factory for ScriptedProvider: make_provider("p1", ["text", error, ...])."""
    return ScriptedProvider
