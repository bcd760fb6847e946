"""
LLM client abstraction and implementations.

Components:
- BaseLLMClient: Abstract base class for LLM clients
- OllamaClient: Implementation for the Ollama chat endpoint
- RepairPromptBuilder: Generation and structured-repair requests (Jinja2)
- exceptions: LLM-specific exceptions
"""

from acquisition_layer.llm.base_client import BaseLLMClient
from acquisition_layer.llm.ollama_client import OllamaClient
from acquisition_layer.llm.prompt_builder import RepairPromptBuilder, truncate_for_prompt
from acquisition_layer.llm.exceptions import (
    LLMAuthenticationError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMRateLimitError,
    LLMTimeoutError,
)

__all__ = [
    "BaseLLMClient",
    "OllamaClient",
    "RepairPromptBuilder",
    "truncate_for_prompt",
    "LLMClientError",
    "LLMConnectionError",
    "LLMTimeoutError",
    "LLMRateLimitError",
    "LLMAuthenticationError",
    "LLMGenerationError",
    "LLMModelNotAvailableError",
]
