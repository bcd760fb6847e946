"""
Enumerations for Content Acquisition Layer data models.
"""

from enum import Enum


class CircuitPhase(str, Enum):
    """
    Circuit breaker phase for a single provider.

    - CLOSED: calls pass through, failures are counted
    - OPEN: calls are rejected without network I/O until the reset timeout
    - HALF_OPEN: one trial call decides between CLOSED and OPEN
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class FetchOutcome(str, Enum):
    """Outcome of one provider attempt inside the chain (metrics label)."""

    SUCCESS = "success"
    FAILURE = "failure"
    CIRCUIT_OPEN = "circuit_open"
