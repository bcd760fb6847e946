"""
Stage 1: JSON Parse Validation.

Parse raw generated content (string) into a Python dict. Models often wrap
their answer in a single markdown code fence; that wrapper is removed before
parsing. Anything else that is not a JSON object fails.
"""

import json
import re

import structlog

from acquisition_layer.monitoring.metrics import validation_failures_total
from .exceptions import JSONParseError

logger = structlog.get_logger(__name__)

MARKDOWN_FENCE_REGEX = re.compile(r"^```(?:json|JSON)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_markdown_fence(content: str) -> str:
    """
    Remove one markdown code fence wrapping the whole payload.

    Returns:
        Trimmed payload; unchanged (but trimmed) when no fence wraps it
    """
    stripped = content.strip()
    match = MARKDOWN_FENCE_REGEX.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


class Stage1JSONParse:
    """
    Stage 1 validator: Parse JSON string to dict.

    Raises JSONParseError on malformed JSON (hard fail).
    """

    def validate(self, content: str) -> tuple[str, dict]:
        """
        Parse JSON content from a model response.

        Args:
            content: Raw generated text

        Returns:
            Tuple of (payload text without fence, parsed dict)

        Raises:
            JSONParseError: If content is empty, not JSON, or not an object
        """
        if not content or not content.strip():
            validation_failures_total.labels(stage="stage1", error_type="empty_content").inc()
            raise JSONParseError(
                "Generated content is empty or whitespace-only",
                raw_content=content,
                parse_error="Empty content",
            )

        payload = strip_markdown_fence(content)

        try:
            parsed = json.loads(payload)
        except json.JSONDecodeError as e:
            validation_failures_total.labels(stage="stage1", error_type="json_decode_error").inc()
            raise JSONParseError(
                f"Failed to parse generated content as JSON: {e.msg} at line {e.lineno} column {e.colno}",
                raw_content=content,
                parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
            ) from e

        if not isinstance(parsed, dict):
            validation_failures_total.labels(stage="stage1", error_type="not_json_object").inc()
            raise JSONParseError(
                f"Generated content is not a JSON object (got {type(parsed).__name__})",
                raw_content=content,
                parse_error=f"Expected object, got {type(parsed).__name__}",
            )

        logger.debug("Stage 1: parsed JSON object", keys=len(parsed))
        return payload, parsed
