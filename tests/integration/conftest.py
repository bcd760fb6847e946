"""Integration test fixtures (service checks and prerequisites).

Provides fixtures for checking if external services are available.
Live tests are skipped if required services are not running; the
end-to-end chain and generation scenarios run against httpx.MockTransport
and need nothing external.
"""

from collections import Counter
from typing import Callable

import httpx
import pytest


@pytest.fixture(scope="session")
def check_ollama():
    """Check if Ollama is available at localhost:11434.

    Skips tests if Ollama is not reachable.
    """
    try:
        response = httpx.get("http://localhost:11434/api/tags", timeout=5)
        if response.status_code != 200:
            pytest.skip("Ollama not available (non-200 status)")
    except Exception as e:
        pytest.skip(f"Ollama not available: {e}")


@pytest.fixture
def real_ollama_client(check_ollama):
    """Real OllamaClient instance for integration tests.

    Requires Ollama to be running (checked by check_ollama fixture).
    """
    from acquisition_layer.llm.ollama_client import OllamaClient

    return OllamaClient(base_url="http://localhost:11434", timeout=60)


@pytest.fixture
def integration_settings(test_settings):
    """Settings for integration tests with real services.

    Points to localhost services on standard ports.
    """
    test_settings.OLLAMA_BASE_URL = "http://localhost:11434"
    test_settings.OLLAMA_MODEL = "qwen2.5:7b"
    test_settings.PROMETHEUS_ENABLED = False

    return test_settings


class RecordingTransport(httpx.MockTransport):
    """MockTransport that counts requests per host."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: Counter = Counter()

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests[request.url.host] += 1
            return handler(request)

        super().__init__(recording_handler)


@pytest.fixture
def recording_transport():
    """Factory: recording_transport(handler) -> RecordingTransport."""
    return RecordingTransport
