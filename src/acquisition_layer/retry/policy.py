"""
Retry policy configuration.

A RetryPolicy is a plain value handed to the executor on every call; it is
never persisted and carries no state between calls.
"""

import random
from dataclasses import dataclass, field
from typing import Callable

from acquisition_layer.config import Settings
from acquisition_layer.retry.classification import is_retryable


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff with jitter.

    Attributes:
        max_attempts: Total attempts, including the first (>= 1)
        initial_delay: Delay before the second attempt, in seconds
        backoff_multiplier: Growth factor per attempt (2 doubles the delay)
        jitter_fraction: Delay is multiplied by U[1 - j, 1 + j]
        retryable: Predicate deciding whether an error may be retried
    """

    max_attempts: int = 5
    initial_delay: float = 1.0
    backoff_multiplier: float = 2.0
    jitter_fraction: float = 0.25
    retryable: Callable[[BaseException], bool] = field(default=is_retryable, compare=False)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if not 0 <= self.jitter_fraction < 1:
            raise ValueError("jitter_fraction must be in [0, 1)")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            initial_delay=settings.RETRY_INITIAL_DELAY,
            backoff_multiplier=settings.RETRY_BACKOFF_MULTIPLIER,
            jitter_fraction=settings.RETRY_JITTER_FRACTION,
        )


def compute_backoff_delay(
    policy: RetryPolicy,
    attempt_index: int,
    rand: Callable[[float, float], float] = random.uniform,
) -> float:
    """
    Delay to sleep after the failed attempt ``attempt_index`` (0-based).

    delay = initial_delay * multiplier ** attempt_index * U[1 - j, 1 + j]
    """
    base = policy.initial_delay * (policy.backoff_multiplier ** attempt_index)
    factor = rand(1 - policy.jitter_fraction, 1 + policy.jitter_fraction)
    return base * factor


def worst_case_delay(policy: RetryPolicy) -> float:
    """
    Upper bound on cumulative backoff sleep for one executor call.

    Sums the un-jittered schedule for every attempt index and applies the
    upper jitter bound, e.g. roughly 1+2+4+8+16 seconds for 5 attempts at a
    1 s base.
    """
    total = sum(
        policy.initial_delay * (policy.backoff_multiplier ** i)
        for i in range(policy.max_attempts)
    )
    return total * (1 + policy.jitter_fraction)
