"""
Circuit breakers for external content providers.

- registry.py: CircuitBreakerRegistry (per-provider CLOSED/OPEN/HALF_OPEN)
- state.py: Mutable per-provider state (registry-internal)
- exceptions.py: CircuitOpenError (fail fast, no network I/O)
"""

from acquisition_layer.circuit.exceptions import CircuitOpenError
from acquisition_layer.circuit.registry import CircuitBreakerRegistry
from acquisition_layer.circuit.state import CircuitState

__all__ = [
    "CircuitBreakerRegistry",
    "CircuitOpenError",
    "CircuitState",
]
