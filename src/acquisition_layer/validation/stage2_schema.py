"""
Stage 2: JSON Schema Validation.

Validate a parsed dict against a Draft 7 JSON Schema supplied by the caller.
Schema violations fail the attempt and are reported back to the repair model.
"""

from typing import Any

import structlog
from jsonschema import Draft7Validator

from acquisition_layer.monitoring.metrics import validation_failures_total
from .exceptions import SchemaValidationError

logger = structlog.get_logger(__name__)

MAX_REPORTED_ERRORS = 10


class Stage2SchemaValidation:
    """
    Stage 2 validator: Validate against JSON Schema.

    Raises SchemaValidationError on schema violations (hard fail).
    """

    def __init__(self, schema: dict[str, Any], schema_name: str | None = None):
        """
        Initialize schema validator.

        Args:
            schema: JSON Schema dict. An Ollama-style wrapper
                ``{"name": ..., "schema": {...}}`` is unwrapped.
            schema_name: Name used in error messages

        Raises:
            jsonschema.SchemaError: If the schema itself is invalid
        """
        if "schema" in schema and isinstance(schema["schema"], dict):
            schema_name = schema_name or schema.get("name")
            schema = schema["schema"]

        Draft7Validator.check_schema(schema)
        self.schema = schema
        self.schema_name = schema_name
        self._validator = Draft7Validator(schema)

    def validate(self, data: dict) -> None:
        """
        Validate data against the JSON Schema.

        Raises:
            SchemaValidationError: If data doesn't conform to schema
        """
        errors = list(self._validator.iter_errors(data))

        if errors:
            error_messages = []
            for error in errors[:MAX_REPORTED_ERRORS]:
                path = ".".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            validation_failures_total.labels(stage="stage2", error_type="schema_violation").inc()
            raise SchemaValidationError(
                f"JSON Schema validation failed with {len(errors)} error(s): "
                + "; ".join(error_messages),
                validation_errors=error_messages,
                schema_name=self.schema_name,
            )

        logger.debug("Stage 2: validated against JSON Schema", schema_name=self.schema_name)
