"""
Custom exceptions for the LLM client layer.

The retry executor classifies these to decide between a backoff retry
(transient outage, rate limit) and an immediate failure (bad request,
credentials, missing model). Structural problems with the generated text
are not LLM client errors; they belong to the validation layer.
"""

from typing import Optional


class LLMClientError(Exception):
    """
    Base exception for all LLM client errors.

    Attributes:
        message: Human-readable description
        details: Structured context for logging
        status_code: HTTP status returned by the endpoint, if any
        transient: Whether the failure is a transport-level blip
    """

    transient = False

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code


class LLMConnectionError(LLMClientError):
    """
    Raised when the generation endpoint cannot be reached.

    Network errors, DNS failures, connection resets. Retryable.
    """

    transient = True


class LLMTimeoutError(LLMConnectionError):
    """Raised when a generation request exceeds its timeout. Retryable."""


class LLMRateLimitError(LLMClientError):
    """Raised on HTTP 429 from the generation endpoint. Retryable."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details, status_code=429)


class LLMAuthenticationError(LLMClientError):
    """Raised on HTTP 401/403. Never retried."""


class LLMGenerationError(LLMClientError):
    """
    Raised when the endpoint returns an error or an unusable body.

    Retryable only when status_code is 5xx.
    """


class LLMModelNotAvailableError(LLMGenerationError):
    """Raised when the requested model does not exist on the server."""
