"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

from unittest.mock import AsyncMock

import pytest

from acquisition_layer.llm.prompt_builder import RepairPromptBuilder
from acquisition_layer.models.llm_models import LLMGenerationResponse


def make_llm_response(content: str) -> LLMGenerationResponse:
    """Build an LLMGenerationResponse carrying ``content``."""
    return LLMGenerationResponse(
        content=content,
        model_version="qwen2.5:7b",
        finish_reason="stop",
        prompt_tokens=500,
        completion_tokens=250,
        latency_ms=1500,
        raw_metadata={},
    )


@pytest.fixture
def mock_llm_response():
    """Mock LLMGenerationResponse with a small valid JSON object."""
    return make_llm_response('{"title": "Intro", "sections": []}')


@pytest.fixture
def mock_llm_client(mock_llm_response):
    """Mock OllamaClient for unit tests.

    Set ``mock_llm_client.generate.side_effect`` to script several answers.
    """
    mock = AsyncMock()
    mock.generate = AsyncMock(return_value=mock_llm_response)
    mock.health_check = AsyncMock(return_value=True)
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def prompt_builder() -> RepairPromptBuilder:
    """Prompt builder using the bundled templates."""
    return RepairPromptBuilder(default_model="qwen2.5:7b")
