"""
Structured content generation with self-repair.

Flow:
    1. Initial LLM call (RetryExecutor: rate limits / outages are retried)
    2. ValidationRepairLoop over the returned text; each corrective
       regeneration is another LLM call under the same retry policy
    3. GenerationResult with the validated content and attempt history

Every LLM call is gated by the generation endpoint's circuit breaker. An
open circuit fails fast with CircuitOpenError before any I/O.

Usage:
    generator = ContentGenerator(llm_client, prompt_builder, retry_policy)
    result = await generator.generate(system_prompt, user_message, validator)
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from acquisition_layer.circuit.registry import CircuitBreakerRegistry
from acquisition_layer.config import Settings
from acquisition_layer.llm.base_client import BaseLLMClient
from acquisition_layer.llm.prompt_builder import FormatSchema, RepairPromptBuilder
from acquisition_layer.models.llm_models import LLMGenerationRequest
from acquisition_layer.retry.executor import RetryExecutor
from acquisition_layer.retry.policy import RetryPolicy
from acquisition_layer.validation.pipeline import StructuralValidator
from acquisition_layer.validation.repair_loop import (
    RepairRequest,
    ValidationAttempt,
    ValidationRepairLoop,
)

logger = structlog.get_logger(__name__)

# Circuit id of the generation endpoint in the LLM circuit registry
LLM_CIRCUIT_KEY = "ollama"


@dataclass(frozen=True)
class GenerationResult:
    """
    Validated generation output.

    Attributes:
        content: Validated JSON text
        data: Parsed JSON object
        attempts: Validation history, oldest first
        generation_calls: Logical LLM generations (initial + repairs);
            transport retries inside one call are not counted
    """

    content: str
    data: dict[str, Any]
    attempts: list[ValidationAttempt] = field(default_factory=list)
    generation_calls: int = 0


class ContentGenerator:
    """
    Calls the generation endpoint and repairs malformed structured output.

    Attributes:
        llm_client: Generation endpoint client
        prompt_builder: Builds initial and repair requests
        retry_policy: Applied to every LLM call
        max_repair_attempts: Total validations per generate() call
        circuit_registry: Circuit breakers for the generation endpoint
        circuit_key: Circuit id of this endpoint in circuit_registry
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        prompt_builder: RepairPromptBuilder,
        retry_policy: RetryPolicy,
        max_repair_attempts: int = 3,
        retry_executor: Optional[RetryExecutor] = None,
        circuit_registry: Optional[CircuitBreakerRegistry] = None,
        circuit_key: str = LLM_CIRCUIT_KEY,
    ):
        if max_repair_attempts < 1:
            raise ValueError("max_repair_attempts must be >= 1")
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder
        self.retry_policy = retry_policy
        self.max_repair_attempts = max_repair_attempts
        self.retry_executor = retry_executor or RetryExecutor()
        self.circuit_registry = circuit_registry or CircuitBreakerRegistry()
        self.circuit_key = circuit_key

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        llm_client: BaseLLMClient,
        circuit_registry: Optional[CircuitBreakerRegistry] = None,
    ) -> "ContentGenerator":
        return cls(
            llm_client=llm_client,
            prompt_builder=RepairPromptBuilder.from_settings(settings),
            retry_policy=RetryPolicy.from_settings(settings),
            max_repair_attempts=settings.MAX_REPAIR_ATTEMPTS,
            circuit_registry=circuit_registry or CircuitBreakerRegistry.from_settings(settings),
        )

    async def _call_llm(self, request: LLMGenerationRequest, operation_name: str) -> str:
        # Raises CircuitOpenError before any I/O
        self.circuit_registry.check(self.circuit_key)
        try:
            response = await self.retry_executor.execute(
                lambda: self.llm_client.generate(request),
                self.retry_policy,
                operation_name=operation_name,
            )
        except asyncio.CancelledError:
            self.circuit_registry.release_trial(self.circuit_key)
            raise
        except Exception as error:
            self.circuit_registry.record_failure(self.circuit_key)
            logger.warning(
                "Generation endpoint call failed",
                circuit=self.circuit_key,
                operation=operation_name,
                error_type=type(error).__name__,
            )
            raise

        self.circuit_registry.record_success(self.circuit_key)
        return response.content

    async def generate(
        self,
        system_prompt: str,
        user_message: str,
        validator: StructuralValidator,
        format_name: str = "generic-json",
        schema_name: Optional[str] = None,
        schema_description: str = "Generic JSON structure",
        original_input: Optional[str] = None,
        format_schema: FormatSchema = None,
    ) -> GenerationResult:
        """
        Generate structured content and repair it until it validates.

        Args:
            system_prompt: System instruction for the initial call
            user_message: User message for the initial call
            validator: Structure the output must satisfy
            format_name: Short content-type identifier for the repair model
            schema_name: Human-readable structure name (validator's by default)
            schema_description: Plain-language structure description
            original_input: Source input forwarded to the repair model
                (defaults to user_message)
            format_schema: Decoding constraint sent to the endpoint; defaults
                to the validator's JSON Schema, else plain JSON mode

        Returns:
            GenerationResult

        Raises:
            StructuredOutputError: Output never validated
            LLMClientError: Generation endpoint failed after retries
            CircuitOpenError: Generation endpoint circuit is open
        """
        if format_schema is None:
            format_schema = validator.stage2.schema if validator.stage2 is not None else "json"
        schema_name = schema_name or validator.schema_name or "JSON payload"
        original_input = original_input if original_input is not None else user_message

        generation_calls = 0

        logger.info(
            "Starting structured generation",
            format=format_name,
            schema_name=schema_name,
            max_repair_attempts=self.max_repair_attempts,
        )

        initial_request = self.prompt_builder.build_generation_request(
            system_prompt=system_prompt,
            user_message=user_message,
            format_schema=format_schema,
        )
        text = await self._call_llm(initial_request, "llm_generate")
        generation_calls += 1

        async def regenerate(repair: RepairRequest) -> str:
            nonlocal generation_calls
            request = self.prompt_builder.build_repair_request(
                previous_output=repair.previous_output,
                error_message=repair.error_message,
                attempt=repair.attempt,
                format_name=format_name,
                schema_name=schema_name,
                schema_description=schema_description,
                original_input=original_input,
                format_schema=format_schema,
            )
            repaired = await self._call_llm(request, "llm_repair")
            generation_calls += 1
            return repaired

        loop = ValidationRepairLoop(validator, regenerate, max_attempts=self.max_repair_attempts)
        outcome = await loop.run(text)

        logger.info(
            "Structured generation complete",
            schema_name=schema_name,
            generation_calls=generation_calls,
            repaired=outcome.repaired,
        )

        return GenerationResult(
            content=outcome.content,
            data=outcome.data,
            attempts=outcome.attempts,
            generation_calls=generation_calls,
        )
