"""
Structural validation pipeline.

Stages, all hard-fail:
- Stage 1: JSON parse (one markdown fence tolerated, object required)
- Stage 2: JSON Schema (when a schema is configured)
- Model: pydantic model validation (when a model is configured)

The first failing stage raises; the repair loop turns that error into a
corrective regeneration request.
"""

from typing import Any, Optional, Type

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from acquisition_layer.monitoring.metrics import validation_failures_total
from .exceptions import SchemaValidationError
from .stage1_json_parse import Stage1JSONParse
from .stage2_schema import MAX_REPORTED_ERRORS, Stage2SchemaValidation

logger = structlog.get_logger(__name__)


class StructuralValidator:
    """
    Validates generated text against the required structure.

    Attributes:
        schema_name: Human-readable name of the expected structure
        stage2: JSON Schema stage, or None
        model: pydantic model class, or None
    """

    def __init__(
        self,
        json_schema: Optional[dict[str, Any]] = None,
        model: Optional[Type[BaseModel]] = None,
        schema_name: Optional[str] = None,
    ):
        self.stage1 = Stage1JSONParse()
        self.stage2 = Stage2SchemaValidation(json_schema, schema_name) if json_schema else None
        self.model = model
        self.schema_name = schema_name or (model.__name__ if model is not None else None)

    def _validate_model(self, data: dict) -> None:
        try:
            self.model.model_validate(data)
        except PydanticValidationError as e:
            issues = [
                f"{'.'.join(str(p) for p in err['loc']) or 'root'}: {err['msg']}"
                for err in e.errors()
            ][:MAX_REPORTED_ERRORS]
            validation_failures_total.labels(stage="model", error_type="schema_violation").inc()
            raise SchemaValidationError(
                f"{self.model.__name__} validation failed with {e.error_count()} error(s): "
                + "; ".join(issues),
                validation_errors=issues,
                schema_name=self.schema_name,
            ) from e

    def validate(self, text: str) -> tuple[str, dict]:
        """
        Run every configured stage.

        Args:
            text: Raw generated text

        Returns:
            Tuple of (payload text, parsed dict)

        Raises:
            JSONParseError: Stage 1 failed
            SchemaValidationError: Schema or model validation failed
        """
        payload, data = self.stage1.validate(text)

        if self.stage2 is not None:
            self.stage2.validate(data)

        if self.model is not None:
            self._validate_model(data)

        logger.debug("Structural validation passed", schema_name=self.schema_name)
        return payload, data
