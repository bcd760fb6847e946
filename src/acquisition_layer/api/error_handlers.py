"""
FastAPI exception handlers for structured error responses.

Maps exhaustion-level domain exceptions to HTTP status codes:
- TranscriptFetchError -> 502 (every provider failed or was skipped)
- StructuredOutputError -> 422 (model never produced valid structure)
- LLMTimeoutError -> 504, other LLMClientError -> 502
- CircuitOpenError -> 503 (generation endpoint circuit open, no call made)
- UnknownProviderError -> 404
- Invalid JSON Schema in a request -> 400
- Anything else -> 500
"""

import math
from datetime import datetime, timezone

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from jsonschema.exceptions import SchemaError

from acquisition_layer.circuit.exceptions import CircuitOpenError
from acquisition_layer.llm.exceptions import LLMClientError, LLMTimeoutError
from acquisition_layer.providers.exceptions import TranscriptFetchError, UnknownProviderError
from acquisition_layer.validation.exceptions import StructuredOutputError

logger = structlog.get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def transcript_fetch_error_handler(request: Request, exc: TranscriptFetchError) -> JSONResponse:
    """
    Handle provider chain exhaustion.

    Maps to 502 Bad Gateway and returns the per-provider failure list.
    """
    logger.error(
        "Transcript fetch failed",
        key=exc.key,
        all_circuits_open=exc.all_circuits_open,
        providers=[f.provider for f in exc.failures],
    )

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "error": "transcript_fetch_failed",
            "message": str(exc),
            "details": exc.to_dict(),
            "timestamp": _timestamp(),
        },
    )


async def structured_output_error_handler(request: Request, exc: StructuredOutputError) -> JSONResponse:
    """
    Handle repair loop exhaustion.

    Maps to 422 Unprocessable Entity (the model answered, never validly).
    """
    logger.warning(
        "Structured output invalid after repair",
        attempts=len(exc.attempts),
        last_error=exc.last_error,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "structured_output_invalid",
            "message": str(exc),
            "details": exc.to_dict(),
            "timestamp": _timestamp(),
        },
    )


async def llm_timeout_error_handler(request: Request, exc: LLMTimeoutError) -> JSONResponse:
    """Maps to 504 Gateway Timeout (upstream service timeout)."""
    logger.error("LLM timeout error", error=str(exc))

    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content={
            "error": "llm_timeout",
            "message": "Generation endpoint request timed out",
            "timestamp": _timestamp(),
        },
    )


async def llm_client_error_handler(request: Request, exc: LLMClientError) -> JSONResponse:
    """Maps to 502 Bad Gateway (upstream service failed)."""
    logger.error(
        "LLM client error",
        error_type=type(exc).__name__,
        error=str(exc),
        status_code=exc.status_code,
    )

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "error": "llm_request_failed",
            "message": str(exc),
            "error_type": type(exc).__name__,
            "timestamp": _timestamp(),
        },
    )


async def circuit_open_error_handler(request: Request, exc: CircuitOpenError) -> JSONResponse:
    """
    Handle a call rejected by an open generation endpoint circuit.

    Maps to 503 Service Unavailable with a Retry-After hint.
    """
    logger.warning(
        "Generation endpoint circuit open",
        circuit=exc.provider,
        retry_in_seconds=exc.retry_in_seconds,
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        headers={"Retry-After": str(math.ceil(exc.retry_in_seconds))},
        content={
            "error": "circuit_open",
            "message": str(exc),
            "details": {
                "circuit": exc.provider,
                "retry_in_seconds": exc.retry_in_seconds,
            },
            "timestamp": _timestamp(),
        },
    )


async def unknown_provider_error_handler(request: Request, exc: UnknownProviderError) -> JSONResponse:
    """Maps to 404 Not Found."""
    logger.warning("Unknown provider", provider=exc.provider)

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "unknown_provider",
            "message": str(exc),
            "timestamp": _timestamp(),
        },
    )


async def schema_error_handler(request: Request, exc: SchemaError) -> JSONResponse:
    """
    Handle an invalid JSON Schema supplied by the client.

    Maps to 400 Bad Request.
    """
    logger.warning("Invalid JSON Schema in request", error=exc.message)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "invalid_schema",
            "message": exc.message,
            "timestamp": _timestamp(),
        },
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Maps to 500 Internal Server Error."""
    logger.exception("Unexpected error", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "timestamp": _timestamp(),
        },
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    TranscriptFetchError: transcript_fetch_error_handler,
    StructuredOutputError: structured_output_error_handler,
    LLMTimeoutError: llm_timeout_error_handler,
    LLMClientError: llm_client_error_handler,
    CircuitOpenError: circuit_open_error_handler,
    UnknownProviderError: unknown_provider_error_handler,
    SchemaError: schema_error_handler,
    Exception: generic_error_handler,
}
