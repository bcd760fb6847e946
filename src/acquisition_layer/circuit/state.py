"""
Mutable per-provider circuit state.

Only CircuitBreakerRegistry touches these objects, always under its lock.
Callers outside the registry see immutable CircuitStatus snapshots.
"""

from dataclasses import dataclass
from typing import Optional

from acquisition_layer.models.enums import CircuitPhase
from acquisition_layer.models.transcript_models import CircuitStatus


@dataclass
class CircuitState:
    """
    Circuit state for one provider.

    Invariants:
        phase == OPEN implies failure_count >= failure_threshold
        trial_in_flight is only ever True while phase == HALF_OPEN
    """

    failure_count: int = 0
    last_failure_at: Optional[float] = None
    phase: CircuitPhase = CircuitPhase.CLOSED
    trial_in_flight: bool = False

    def snapshot(self, provider: str) -> CircuitStatus:
        return CircuitStatus(
            provider=provider,
            phase=self.phase,
            failure_count=self.failure_count,
            last_failure_at=self.last_failure_at,
        )
