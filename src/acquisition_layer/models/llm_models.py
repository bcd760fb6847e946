"""
LLM-specific data models for request/response cycle.

These models are internal to the LLM layer and describe the raw
communication with the generation endpoint. Validation of the generated
text happens in the validation layer.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class LLMGenerationRequest(BaseModel):
    """
    Standardized generation request sent to any LLM client implementation.

    The endpoint receives a system instruction and a single user message and
    is expected to return one text blob.
    """
    model_config = ConfigDict(frozen=True)

    system_prompt: str = Field(..., description="System instruction")
    prompt: str = Field(..., min_length=1, description="User message")
    model: str = Field(..., description="Model name/identifier (e.g., 'qwen2.5:7b')")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=4096, ge=1, le=32768, description="Maximum tokens to generate")
    format_schema: Optional[Union[Dict[str, Any], str]] = Field(
        default="json",
        description="JSON Schema constraint, 'json' for plain JSON mode, None for free text"
    )
    seed: Optional[int] = Field(default=None, description="Random seed for reproducibility")


class LLMGenerationResponse(BaseModel):
    """
    Response from LLM generation.

    Contains the raw generated text plus metadata for logging.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Generated text (expected to be JSON)")
    model_version: str = Field(..., description="Actual model version used")
    finish_reason: str = Field(..., description="Why generation stopped: 'stop', 'length', ...")
    prompt_tokens: Optional[int] = Field(default=None, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, description="Tokens in completion")
    latency_ms: int = Field(..., ge=0, description="Generation latency in milliseconds")
    raw_metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific metadata (for debugging)"
    )
