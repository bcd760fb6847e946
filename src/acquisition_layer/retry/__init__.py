"""
Retry with exponential backoff for calls to external services.

Main Components:
    - RetryPolicy: Attempts, base delay, multiplier, jitter, retryable predicate
    - RetryExecutor: Stateless executor that applies a policy to one call
    - is_retryable: 429/5xx/transport errors retry, everything else is terminal

Usage:
    >>> from acquisition_layer.retry import RetryExecutor, RetryPolicy
    >>> policy = RetryPolicy(max_attempts=3, initial_delay=1.0)
    >>> result = await RetryExecutor().execute(fetch_once, policy)
"""

from acquisition_layer.retry.classification import extract_status_code, is_retryable
from acquisition_layer.retry.executor import RetryExecutor
from acquisition_layer.retry.policy import RetryPolicy, compute_backoff_delay, worst_case_delay

__all__ = [
    "RetryExecutor",
    "RetryPolicy",
    "compute_backoff_delay",
    "worst_case_delay",
    "extract_status_code",
    "is_retryable",
]
