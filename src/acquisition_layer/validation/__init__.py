"""
Structural validation and repair of generated output.

- pipeline.py: StructuralValidator running the stages below
- stage1_json_parse.py: JSON parsing, markdown fence tolerated (hard fail)
- stage2_schema.py: JSON Schema validation (hard fail)
- repair_loop.py: Bounded validate -> regenerate -> validate loop
"""

from .exceptions import (
    JSONParseError,
    SchemaValidationError,
    StructuredOutputError,
    ValidationError,
)
from .pipeline import StructuralValidator
from .repair_loop import (
    RepairOutcome,
    RepairRequest,
    ValidationAttempt,
    ValidationRepairLoop,
)

__all__ = [
    # Validation
    "StructuralValidator",
    "ValidationRepairLoop",
    "RepairRequest",
    "RepairOutcome",
    "ValidationAttempt",
    # Exceptions (for API error handling)
    "ValidationError",
    "JSONParseError",
    "SchemaValidationError",
    "StructuredOutputError",
]
