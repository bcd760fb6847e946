"""
Data models for transcript acquisition results and provider diagnostics.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from acquisition_layer.models.enums import CircuitPhase


class TranscriptResult(BaseModel):
    """Transcript returned by the provider chain."""
    model_config = ConfigDict(frozen=True)

    transcript: str = Field(..., min_length=1, description="Plain transcript text")
    provider: str = Field(..., description="Provider that produced the text")
    from_cache: bool = Field(default=False, description="Served from the response cache")


class ProviderFailure(BaseModel):
    """One provider's failure inside an exhausted chain walk."""
    model_config = ConfigDict(frozen=True)

    provider: str
    error: str = Field(..., description="Human-readable error message")
    error_type: str = Field(..., description="Exception class name")
    circuit_open: bool = Field(
        default=False,
        description="True when the provider was skipped without network I/O"
    )


class CircuitStatus(BaseModel):
    """Read-only snapshot of one provider's circuit."""
    model_config = ConfigDict(frozen=True)

    provider: str
    phase: CircuitPhase
    failure_count: int = Field(..., ge=0)
    last_failure_at: Optional[float] = Field(
        default=None,
        description="Epoch seconds of the last recorded failure"
    )

    @computed_field  # type: ignore[misc]
    @property
    def last_failure_iso(self) -> Optional[str]:
        if self.last_failure_at is None:
            return None
        return datetime.fromtimestamp(self.last_failure_at, tz=timezone.utc).isoformat()
