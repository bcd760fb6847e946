"""
Ordered transcript provider chain with circuit breakers, retry and caching.

fetch(key):
    1. Cache lookup (unless skip_cache)
    2. For each provider, in fixed priority order:
       - circuit open: record a synthetic failure, no network I/O
       - otherwise: provider.fetch under a per-attempt timeout, wrapped in
         the RetryExecutor
       - success: record success, cache, return
       - failure: record failure, remember why, try the next provider
    3. Every provider failed or was skipped: TranscriptFetchError with the
       full per-provider failure list

The circuit registry and the cache are injected; their lifetime belongs to
whoever builds the chain.
"""

import asyncio
from functools import partial
from typing import Optional, Sequence

import structlog

from acquisition_layer.cache.response_cache import ResponseCache
from acquisition_layer.circuit.exceptions import CircuitOpenError
from acquisition_layer.circuit.registry import CircuitBreakerRegistry
from acquisition_layer.config import Settings
from acquisition_layer.models.enums import FetchOutcome
from acquisition_layer.models.transcript_models import (
    CircuitStatus,
    ProviderFailure,
    TranscriptResult,
)
from acquisition_layer.monitoring.metrics import provider_fetch_total
from acquisition_layer.providers.base import TranscriptProvider
from acquisition_layer.providers.exceptions import (
    ProviderTimeoutError,
    TranscriptFetchError,
    TranscriptParseError,
    UnknownProviderError,
)
from acquisition_layer.retry.executor import RetryExecutor
from acquisition_layer.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)


class ProviderChain:
    """
    Fallback chain over transcript providers.

    Attributes:
        providers: Providers in priority order
        circuit_registry: Per-provider circuit breakers (owned by this chain)
        cache: Response cache (owned by this chain)
        retry_policy: Policy applied to every provider call
        request_timeout: Seconds allowed for one attempt
    """

    def __init__(
        self,
        providers: Sequence[TranscriptProvider],
        circuit_registry: CircuitBreakerRegistry,
        cache: ResponseCache,
        retry_policy: RetryPolicy,
        request_timeout: float = 30.0,
        retry_executor: Optional[RetryExecutor] = None,
    ):
        if not providers:
            raise ValueError("ProviderChain needs at least one provider")
        names = [p.name for p in providers]
        if len(set(names)) != len(names):
            raise ValueError(f"Provider names must be unique, got {names}")
        if request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")

        self.providers = list(providers)
        self.circuit_registry = circuit_registry
        self.cache = cache
        self.retry_policy = retry_policy
        self.request_timeout = request_timeout
        self.retry_executor = retry_executor or RetryExecutor()

        logger.info(
            "ProviderChain initialized",
            providers=names,
            request_timeout=request_timeout,
            max_attempts=retry_policy.max_attempts,
            failure_threshold=circuit_registry.failure_threshold,
            cache_ttl=cache.ttl,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, providers: Sequence[TranscriptProvider]
    ) -> "ProviderChain":
        return cls(
            providers=providers,
            circuit_registry=CircuitBreakerRegistry.from_settings(settings),
            cache=ResponseCache.from_settings(settings),
            retry_policy=RetryPolicy.from_settings(settings),
            request_timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    async def _attempt(self, provider: TranscriptProvider, key: str) -> str:
        # One bounded attempt; wait_for cancels the in-flight call on timeout
        try:
            transcript = await asyncio.wait_for(provider.fetch(key), timeout=self.request_timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(provider.name, self.request_timeout) from e

        if not transcript or not transcript.strip():
            raise TranscriptParseError(provider.name, "Provider returned an empty transcript", length=0)
        return transcript

    async def fetch(self, key: str, skip_cache: bool = False) -> TranscriptResult:
        """
        Fetch a transcript, falling back through providers.

        Args:
            key: Content identifier (e.g., video id)
            skip_cache: Bypass the cache lookup (the result is still cached)

        Returns:
            TranscriptResult tagged with the producing provider

        Raises:
            TranscriptFetchError: Every provider failed or was skipped
        """
        if not skip_cache:
            entry = self.cache.get(key)
            if entry is not None:
                logger.info("Transcript cache hit", key=key, provider=entry.produced_by)
                return TranscriptResult(
                    transcript=entry.value,
                    provider=entry.produced_by,
                    from_cache=True,
                )

        failures: list[ProviderFailure] = []

        for provider in self.providers:
            try:
                self.circuit_registry.check(provider.name)
            except CircuitOpenError as e:
                provider_fetch_total.labels(
                    provider=provider.name, outcome=FetchOutcome.CIRCUIT_OPEN.value
                ).inc()
                logger.info("Skipping provider, circuit open", provider=provider.name, key=key)
                failures.append(
                    ProviderFailure(
                        provider=provider.name,
                        error=str(e),
                        error_type=type(e).__name__,
                        circuit_open=True,
                    )
                )
                continue

            logger.info("Trying provider", provider=provider.name, key=key)
            try:
                transcript = await self.retry_executor.execute(
                    partial(self._attempt, provider, key),
                    self.retry_policy,
                    operation_name=provider.name,
                )
            except asyncio.CancelledError:
                # Caller went away; neither success nor failure
                self.circuit_registry.release_trial(provider.name)
                raise
            except Exception as error:
                self.circuit_registry.record_failure(provider.name)
                provider_fetch_total.labels(
                    provider=provider.name, outcome=FetchOutcome.FAILURE.value
                ).inc()
                logger.warning(
                    "Provider failed",
                    provider=provider.name,
                    key=key,
                    error_type=type(error).__name__,
                    error=str(error),
                )
                failures.append(
                    ProviderFailure(
                        provider=provider.name,
                        error=str(error) or type(error).__name__,
                        error_type=type(error).__name__,
                    )
                )
                continue

            self.circuit_registry.record_success(provider.name)
            self.cache.put(key, transcript, provider.name)
            provider_fetch_total.labels(
                provider=provider.name, outcome=FetchOutcome.SUCCESS.value
            ).inc()
            logger.info(
                "Transcript fetched",
                provider=provider.name,
                key=key,
                length=len(transcript),
            )
            return TranscriptResult(transcript=transcript, provider=provider.name, from_cache=False)

        logger.error(
            "All transcript providers failed",
            key=key,
            providers=[f.provider for f in failures],
            all_circuits_open=all(f.circuit_open for f in failures),
        )
        raise TranscriptFetchError(key, failures)

    def get_provider_status(self) -> dict[str, CircuitStatus]:
        """Circuit state of every configured provider (read-only)."""
        return self.circuit_registry.status(self.provider_names)

    def reset_provider_circuit(self, provider_id: str) -> None:
        """
        Force a provider's circuit back to CLOSED with zero failures.

        Raises:
            UnknownProviderError: provider_id is not part of this chain
        """
        if provider_id not in self.provider_names:
            raise UnknownProviderError(provider_id)
        self.circuit_registry.reset(provider_id)

    def clear_cache(self) -> int:
        """Empty the response cache. Returns the number of entries removed."""
        return self.cache.clear()

    async def close(self) -> None:
        """Close providers that hold network resources."""
        for provider in self.providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
