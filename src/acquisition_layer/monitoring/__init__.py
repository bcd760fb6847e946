"""Monitoring and metrics instrumentation for the Content Acquisition Layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from acquisition_layer.monitoring.metrics import (
    circuit_transitions_total,
    llm_latency_seconds,
    llm_tokens_total,
    provider_fetch_total,
    repair_attempts_total,
    retries_total,
    transcript_cache_lookups_total,
    validation_failures_total,
)

__all__ = [
    "provider_fetch_total",
    "circuit_transitions_total",
    "transcript_cache_lookups_total",
    "retries_total",
    "repair_attempts_total",
    "llm_latency_seconds",
    "llm_tokens_total",
    "validation_failures_total",
]
