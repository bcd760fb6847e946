"""
Per-provider circuit breakers.

Used for transcript providers (by the provider chain) and for the generation
endpoint (by the content generator), each with its own registry.

State machine (one per provider id, created lazily):

    CLOSED --(failure_threshold consecutive failures)--> OPEN
    OPEN --(reset_timeout elapsed, observed by the next check)--> HALF_OPEN
    HALF_OPEN --(trial succeeds)--> CLOSED
    HALF_OPEN --(trial fails)--> OPEN

A success while CLOSED forgives earlier failures (count back to zero).
Transitions are evaluated only by check() right before a call and by the
record_* methods after it; status() never mutates anything.
"""

import threading
import time
from typing import Callable, Iterable, Optional

import structlog

from acquisition_layer.circuit.exceptions import CircuitOpenError
from acquisition_layer.circuit.state import CircuitState
from acquisition_layer.config import Settings
from acquisition_layer.models.enums import CircuitPhase
from acquisition_layer.models.transcript_models import CircuitStatus
from acquisition_layer.monitoring.metrics import circuit_transitions_total

logger = structlog.get_logger(__name__)


class CircuitBreakerRegistry:
    """
    Registry of circuit breakers keyed by provider id.

    All reads and writes of the internal map happen under one lock and never
    span an await, so concurrent tasks (or threads) see atomic transitions.

    Attributes:
        failure_threshold: Consecutive failures that open a circuit
        reset_timeout: Seconds an open circuit waits before a half-open trial
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        reset_timeout: float = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize registry.

        Args:
            failure_threshold: Failures before a circuit opens (>= 1)
            reset_timeout: Cooldown in seconds before a half-open trial (> 0)
            clock: Time source in seconds (injectable for tests)
        """
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if reset_timeout <= 0:
            raise ValueError("reset_timeout must be > 0")

        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._states: dict[str, CircuitState] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "CircuitBreakerRegistry":
        return cls(
            failure_threshold=settings.FAILURE_THRESHOLD,
            reset_timeout=settings.RESET_TIMEOUT_SECONDS,
        )

    def _state_for(self, provider: str) -> CircuitState:
        # Caller holds self._lock
        state = self._states.get(provider)
        if state is None:
            state = CircuitState()
            self._states[provider] = state
        return state

    def _transition(
        self, provider: str, state: CircuitState, to_phase: CircuitPhase, reason: str
    ) -> None:
        from_phase = state.phase
        state.phase = to_phase
        circuit_transitions_total.labels(
            provider=provider, from_phase=from_phase.value, to_phase=to_phase.value
        ).inc()
        log = logger.warning if to_phase is CircuitPhase.OPEN else logger.info
        log(
            "Circuit transition",
            provider=provider,
            from_phase=from_phase.value,
            to_phase=to_phase.value,
            failure_count=state.failure_count,
            reason=reason,
        )

    def check(self, provider: str) -> None:
        """
        Gate a call to the provider.

        Must be called immediately before the call. An open circuit whose
        cooldown has elapsed moves to HALF_OPEN here and the caller gets the
        single trial slot.

        Raises:
            CircuitOpenError: The call must not be attempted
        """
        with self._lock:
            state = self._state_for(provider)

            if state.phase is CircuitPhase.CLOSED:
                return

            if state.phase is CircuitPhase.OPEN:
                elapsed = self._clock() - (state.last_failure_at or 0.0)
                if elapsed >= self.reset_timeout:
                    self._transition(provider, state, CircuitPhase.HALF_OPEN, "reset timeout elapsed")
                    state.trial_in_flight = True
                    return
                raise CircuitOpenError(provider, self.reset_timeout - elapsed)

            # HALF_OPEN: exactly one trial at a time
            if state.trial_in_flight:
                raise CircuitOpenError(provider, 0.0)
            state.trial_in_flight = True

    def record_success(self, provider: str) -> None:
        """Record a successful call. Closes a half-open circuit."""
        with self._lock:
            state = self._state_for(provider)
            state.trial_in_flight = False
            state.failure_count = 0
            if state.phase is not CircuitPhase.CLOSED:
                self._transition(provider, state, CircuitPhase.CLOSED, "call succeeded")

    def record_failure(self, provider: str) -> None:
        """Record a failed call. May open the circuit."""
        with self._lock:
            state = self._state_for(provider)
            state.trial_in_flight = False
            state.failure_count += 1
            state.last_failure_at = self._clock()

            if state.phase is CircuitPhase.HALF_OPEN:
                self._transition(provider, state, CircuitPhase.OPEN, "trial call failed")
            elif (
                state.phase is CircuitPhase.CLOSED
                and state.failure_count >= self.failure_threshold
            ):
                self._transition(
                    provider, state, CircuitPhase.OPEN,
                    f"{state.failure_count} consecutive failures",
                )

    def release_trial(self, provider: str) -> None:
        """
        Give back a claimed half-open trial slot without recording an outcome.

        Used when the calling task is cancelled before the trial finished.
        """
        with self._lock:
            state = self._states.get(provider)
            if state is not None and state.phase is CircuitPhase.HALF_OPEN:
                state.trial_in_flight = False

    def status(self, providers: Optional[Iterable[str]] = None) -> dict[str, CircuitStatus]:
        """
        Snapshot circuit state without evaluating transitions.

        Args:
            providers: Provider ids to report; defaults to every id seen so far.
                Ids never referenced before are reported as CLOSED/zero.

        Returns:
            Mapping of provider id to CircuitStatus
        """
        with self._lock:
            ids = list(providers) if providers is not None else list(self._states)
            return {
                provider: self._states.get(provider, CircuitState()).snapshot(provider)
                for provider in ids
            }

    def reset(self, provider: str) -> None:
        """Force a provider's circuit back to CLOSED with zero failures."""
        with self._lock:
            previous = self._states.get(provider)
            self._states[provider] = CircuitState()

        logger.info(
            "Circuit reset",
            provider=provider,
            previous_phase=previous.phase.value if previous else None,
            previous_failures=previous.failure_count if previous else 0,
        )
