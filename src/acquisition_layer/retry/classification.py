"""
Retryable vs terminal error classification.

Retryable:
    - HTTP 429 and any 5xx (read from a ``status_code`` attribute or from
      ``httpx.HTTPStatusError.response``)
    - Transport failures: timeouts, connection resets, DNS errors
      (httpx transport errors, builtin TimeoutError/ConnectionError, and
      domain errors flagged ``transient = True``)

Terminal:
    - Everything else: other 4xx, authentication/authorization failures,
      parse errors, empty payloads, structural validation failures
"""

from typing import Optional

import httpx

RATE_LIMIT_STATUS = 429

TRANSIENT_ERROR_TYPES: tuple[type[BaseException], ...] = (
    httpx.TimeoutException,
    httpx.TransportError,
    TimeoutError,
    ConnectionError,
)


def extract_status_code(error: BaseException) -> Optional[int]:
    """Return the HTTP status carried by an error, if any."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status_code = getattr(error, "status_code", None)
    return status_code if isinstance(status_code, int) else None


def is_retryable_status(status_code: int) -> bool:
    return status_code == RATE_LIMIT_STATUS or 500 <= status_code <= 599


def is_retryable(error: BaseException) -> bool:
    """
    Decide whether a failed call may be retried.

    Args:
        error: Exception raised by the operation

    Returns:
        True for rate limits, server errors and transport failures
    """
    status_code = extract_status_code(error)
    if status_code is not None:
        return is_retryable_status(status_code)

    if isinstance(error, TRANSIENT_ERROR_TYPES):
        return True

    return bool(getattr(error, "transient", False))
