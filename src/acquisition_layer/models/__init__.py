"""
Data models for the Content Acquisition Layer.

- enums.py: CircuitPhase, FetchOutcome
- llm_models.py: LLM request/response (internal to the llm layer)
- transcript_models.py: TranscriptResult, ProviderFailure, CircuitStatus
"""

from acquisition_layer.models.enums import CircuitPhase, FetchOutcome
from acquisition_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from acquisition_layer.models.transcript_models import (
    CircuitStatus,
    ProviderFailure,
    TranscriptResult,
)

__all__ = [
    "CircuitPhase",
    "FetchOutcome",
    "LLMGenerationRequest",
    "LLMGenerationResponse",
    "CircuitStatus",
    "ProviderFailure",
    "TranscriptResult",
]
