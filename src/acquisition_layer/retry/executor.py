"""
Bounded retry with exponential backoff and jitter.

Usage:
    executor = RetryExecutor()
    html = await executor.execute(lambda: client.get(url), policy, operation_name="provider")
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from acquisition_layer.monitoring.metrics import retries_total
from acquisition_layer.retry.policy import RetryPolicy, compute_backoff_delay

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """
    Stateless retry wrapper around any fallible coroutine factory.

    The same instance can be shared by every caller; the policy travels with
    each call. When attempts run out, or the error is terminal, the last
    error is re-raised unchanged so callers can still classify it.
    Cancellation of the calling task is never retried.
    """

    def __init__(self, sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        """
        Args:
            sleep: Coroutine used for backoff waits (asyncio.sleep by default)
        """
        self._sleep = sleep if sleep is not None else asyncio.sleep

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy,
        operation_name: str = "operation",
    ) -> T:
        """
        Run ``operation`` under ``policy``.

        Args:
            operation: Zero-argument callable returning a fresh awaitable
                per attempt
            policy: Retry policy for this call
            operation_name: Label used in logs and metrics

        Returns:
            The operation's result

        Raises:
            Exception: The last error observed, unwrapped
        """
        for attempt_index in range(policy.max_attempts):
            try:
                return await operation()
            except Exception as error:
                attempts_left = policy.max_attempts - attempt_index - 1

                if not policy.retryable(error):
                    logger.info(
                        "Terminal error, not retrying",
                        operation=operation_name,
                        attempt=attempt_index + 1,
                        error_type=type(error).__name__,
                        error=str(error),
                    )
                    raise

                if attempts_left == 0:
                    logger.warning(
                        "Retry attempts exhausted",
                        operation=operation_name,
                        attempts=policy.max_attempts,
                        error_type=type(error).__name__,
                        error=str(error),
                    )
                    raise

                delay = compute_backoff_delay(policy, attempt_index)
                retries_total.labels(
                    operation=operation_name, error_type=type(error).__name__
                ).inc()
                logger.warning(
                    "Retryable error, backing off",
                    operation=operation_name,
                    attempt=attempt_index + 1,
                    max_attempts=policy.max_attempts,
                    delay_seconds=round(delay, 3),
                    error_type=type(error).__name__,
                    error=str(error),
                )
                await self._sleep(delay)

        # max_attempts >= 1 guarantees the loop returned or raised
        raise RuntimeError(f"{operation_name}: retry loop ended without a result")
