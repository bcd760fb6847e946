"""
Exceptions raised by transcript providers and the provider chain.

Single-provider errors are absorbed by the chain (recorded against the
provider's circuit and collected). Only TranscriptFetchError, raised once
every provider has failed or been skipped, reaches callers.
"""

from typing import Optional, Sequence

from acquisition_layer.models.transcript_models import ProviderFailure


class ProviderError(Exception):
    """
    Base exception for one provider's failure.

    Attributes:
        provider: Provider name
        message: Human-readable description
        details: Structured context for logging
        transient: Whether the failure is a transport-level blip
    """

    transient = False

    def __init__(self, provider: str, message: str, details: dict | None = None):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ProviderHTTPError(ProviderError):
    """Non-2xx response. Retryable for 429 and 5xx only."""

    def __init__(self, provider: str, status_code: int, reason: str = ""):
        super().__init__(
            provider,
            f"HTTP {status_code}{': ' + reason if reason else ''}",
            details={"status_code": status_code},
        )
        self.status_code = status_code


class ProviderConnectionError(ProviderError):
    """Connection refused/reset, DNS failure. Retryable."""

    transient = True


class ProviderTimeoutError(ProviderConnectionError):
    """A single attempt exceeded the request timeout. Retryable."""

    def __init__(self, provider: str, timeout: float):
        super().__init__(
            provider,
            f"Request timed out after {timeout:g}s",
            details={"timeout_seconds": timeout},
        )
        self.timeout = timeout


class TranscriptParseError(ProviderError):
    """
    The call succeeded but yielded no usable transcript.

    Empty or too-short payloads are failures, not empty results. Terminal.
    """

    def __init__(self, provider: str, message: str, length: Optional[int] = None):
        super().__init__(provider, message, details={"length": length})
        self.length = length


class UnknownProviderError(KeyError):
    """Administrative operation named a provider that is not in the chain."""

    def __init__(self, provider: str):
        super().__init__(provider)
        self.provider = provider

    def __str__(self) -> str:
        return f"Unknown transcript provider: {self.provider}"


class TranscriptFetchError(Exception):
    """
    Raised when every provider in the chain failed or was skipped.

    Attributes:
        key: Content identifier that was requested
        failures: Ordered per-provider failures, one per configured provider
    """

    code = "TRANSCRIPT_FETCH_FAILED"

    def __init__(self, key: str, failures: Sequence[ProviderFailure]):
        self.key = key
        self.failures = list(failures)
        tried = ", ".join(f"{f.provider} ({f.error})" for f in self.failures)
        super().__init__(f"Failed to fetch transcript for {key}. Providers: {tried}")

    @property
    def all_circuits_open(self) -> bool:
        """True when no provider was actually attempted."""
        return bool(self.failures) and all(f.circuit_open for f in self.failures)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "key": self.key,
            "all_circuits_open": self.all_circuits_open,
            "errors": [f.model_dump() for f in self.failures],
        }
