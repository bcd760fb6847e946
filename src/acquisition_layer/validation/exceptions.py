"""
Validation-specific exceptions for the structural validation pipeline.

ValidationError subclasses describe one invalid output and are consumed by
the repair loop, which forwards the message to the repair model.
StructuredOutputError is raised once the repair budget is spent; it is
terminal and never retried.
"""

from typing import Any, Sequence


class ValidationError(Exception):
    """
    Base exception for all validation errors.

    Raised by a single validation stage for a single output.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error description
            details: Structured error data for logging/metrics
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class JSONParseError(ValidationError):
    """
    Stage 1: JSON parsing failed.

    Raised when generated content is empty, not valid JSON, or not a JSON object.
    """

    def __init__(self, message: str, raw_content: str | None = None, parse_error: str | None = None):
        """
        Initialize JSON parse error.

        Args:
            message: Error description
            raw_content: Malformed content (first 500 chars kept)
            parse_error: Original json.JSONDecodeError message
        """
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error

        super().__init__(message, details)


class SchemaValidationError(ValidationError):
    """
    Stage 2: JSON Schema or model validation failed.

    The repair prompt receives every listed issue, so messages carry the
    JSON path of each violation.
    """

    def __init__(
        self,
        message: str,
        validation_errors: list[str] | None = None,
        schema_name: str | None = None,
    ):
        """
        Initialize schema validation error.

        Args:
            message: Error description
            validation_errors: Per-issue messages formatted as "path: message"
            schema_name: Name of the schema that was violated
        """
        details = {}
        if validation_errors:
            details["validation_errors"] = validation_errors
        if schema_name:
            details["schema_name"] = schema_name

        super().__init__(message, details)
        self.validation_errors = validation_errors or []


class StructuredOutputError(Exception):
    """
    Raised when the repair loop exhausts its attempts.

    Distinct from every network/LLM client error: the model answered, but
    never in the required shape.

    Attributes:
        attempts: Full ValidationAttempt history, oldest first
        last_error: Message of the final validation failure
    """

    code = "STRUCTURED_OUTPUT_INVALID"

    def __init__(self, attempts: Sequence[Any], last_error: str):
        self.attempts = list(attempts)
        self.last_error = last_error
        super().__init__(
            f"Failed to produce valid structured output after {len(self.attempts)} "
            f"attempt(s). Details: {last_error}"
        )

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "last_error": self.last_error,
            "attempts": [
                {
                    "attempt_index": a.attempt_index,
                    "is_valid": a.is_valid,
                    "error": a.error,
                }
                for a in self.attempts
            ],
        }
