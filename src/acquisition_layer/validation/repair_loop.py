"""
Bounded validation/repair loop for generated structured output.

Flow:
    attempt 0: validate the initial output
    attempt n: regenerate(previous invalid output + error), validate again

At most ``max_attempts`` validations run, so at most ``max_attempts - 1``
corrective regenerations. Errors raised by ``regenerate`` itself (network,
rate limit) propagate unchanged; they were already retried by the caller's
RetryExecutor and are not validation failures.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

import structlog

from acquisition_layer.monitoring.metrics import repair_attempts_total
from .exceptions import StructuredOutputError, ValidationError
from .pipeline import StructuralValidator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RepairRequest:
    """What the repair model is told about the last invalid output."""

    previous_output: str
    error_message: str
    attempt: int


@dataclass(frozen=True)
class ValidationAttempt:
    """One validation of one candidate output."""

    raw_text: str
    attempt_index: int
    is_valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class RepairOutcome:
    """Result of a successful loop run."""

    content: str
    data: dict
    attempts: list[ValidationAttempt] = field(default_factory=list)

    @property
    def repaired(self) -> bool:
        return len(self.attempts) > 1


RegenerateFn = Callable[[RepairRequest], Awaitable[str]]


class ValidationRepairLoop:
    """
    Validate, and on failure ask for a corrected output, a bounded number of times.

    Attributes:
        validator: StructuralValidator applied to every candidate
        regenerate: Async callable producing a corrected candidate
        max_attempts: Total validations allowed (>= 1)
    """

    def __init__(
        self,
        validator: StructuralValidator,
        regenerate: RegenerateFn,
        max_attempts: int = 3,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.validator = validator
        self.regenerate = regenerate
        self.max_attempts = max_attempts

    async def run(self, text: str) -> RepairOutcome:
        """
        Validate ``text``, repairing it if needed.

        Returns:
            RepairOutcome with the first valid candidate

        Raises:
            StructuredOutputError: No candidate validated within max_attempts
        """
        attempts: list[ValidationAttempt] = []
        current = text
        last_error = ""

        for attempt_index in range(self.max_attempts):
            if attempt_index > 0:
                logger.info(
                    "Requesting corrective regeneration",
                    attempt=attempt_index,
                    max_attempts=self.max_attempts,
                    error=last_error,
                )
                current = await self.regenerate(
                    RepairRequest(
                        previous_output=current,
                        error_message=last_error,
                        attempt=attempt_index,
                    )
                )

            try:
                content, data = self.validator.validate(current)
            except ValidationError as e:
                last_error = e.message
                attempts.append(
                    ValidationAttempt(
                        raw_text=current,
                        attempt_index=attempt_index,
                        is_valid=False,
                        error=last_error,
                    )
                )
                repair_attempts_total.labels(outcome="invalid").inc()
                logger.warning(
                    "Structured output failed validation",
                    attempt=attempt_index,
                    error_type=type(e).__name__,
                    error=last_error,
                )
                continue

            attempts.append(
                ValidationAttempt(raw_text=current, attempt_index=attempt_index, is_valid=True)
            )
            outcome = "valid_first_pass" if attempt_index == 0 else "repaired"
            repair_attempts_total.labels(outcome=outcome).inc()
            logger.info("Structured output valid", attempt=attempt_index, outcome=outcome)
            return RepairOutcome(content=content, data=data, attempts=attempts)

        repair_attempts_total.labels(outcome="exhausted").inc()
        logger.error(
            "Structured output repair exhausted",
            attempts=len(attempts),
            last_error=last_error,
        )
        raise StructuredOutputError(attempts, last_error)
