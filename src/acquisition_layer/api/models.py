"""
API-specific request and response models for FastAPI endpoints.

These wrap the core domain models (TranscriptResult, CircuitStatus) and the
generation result with API-specific metadata.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from acquisition_layer.models.transcript_models import CircuitStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerateRequest(BaseModel):
    """Request for structured content generation."""

    system_prompt: str = Field(
        default="",
        description="System instruction for the initial generation call"
    )
    user_message: str = Field(
        ...,
        min_length=1,
        description="User message for the initial generation call"
    )
    json_schema: Optional[dict[str, Any]] = Field(
        default=None,
        description="Draft 7 JSON Schema the output must satisfy"
    )
    schema_name: Optional[str] = Field(
        default=None,
        description="Human-readable name of the expected structure"
    )
    schema_description: str = Field(
        default="Generic JSON structure",
        description="Plain-language description forwarded to the repair model"
    )
    format: str = Field(
        default="generic-json",
        description="Short content-type identifier",
        examples=["quiz", "lesson-outline"]
    )


class AttemptSummary(BaseModel):
    """One validation attempt as reported to API clients."""

    attempt_index: int = Field(..., ge=0)
    is_valid: bool
    error: Optional[str] = None


class GenerateResponse(BaseModel):
    """Validated generation output."""

    content: str = Field(description="Validated JSON text")
    data: dict[str, Any] = Field(description="Parsed JSON object")
    attempts: list[AttemptSummary] = Field(default_factory=list)
    generation_calls: int = Field(ge=1, description="Initial call plus corrective regenerations")


class ProvidersStatusResponse(BaseModel):
    """Circuit status of every configured provider."""

    providers: list[CircuitStatus]
    timestamp: datetime = Field(default_factory=_utcnow)


class CacheClearResponse(BaseModel):
    """Result of clearing the response cache."""

    cleared: int = Field(ge=0, description="Number of entries removed")


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"]
    )
    version: str = Field(
        description="Service version",
        examples=["0.1.0"]
    )
    services: dict[str, str] = Field(
        description="Dependency health status",
        examples=[{"ollama": "ok"}]
    )
    llm_circuit: str = Field(
        default="closed",
        description="Circuit phase of the generation endpoint",
        examples=["closed", "open", "half_open"]
    )
    providers: dict[str, str] = Field(
        description="Circuit phase per transcript provider",
        examples=[{"youtubetotranscript": "closed"}]
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Health check timestamp (UTC)"
    )
