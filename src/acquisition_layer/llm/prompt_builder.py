"""
Prompt builder for generation and structured-repair requests.

Responsible for:
- Loading and rendering Jinja2 templates (repair system + user prompts)
- Truncating long text fields before they are sent back to the model
- Constructing complete LLMGenerationRequest objects
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from jinja2 import Environment, FileSystemLoader

from acquisition_layer.config import Settings
from acquisition_layer.models.llm_models import LLMGenerationRequest

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "prompts"

FormatSchema = Optional[Union[dict[str, Any], str]]


def truncate_for_prompt(value: Optional[str], limit: int) -> Optional[str]:
    """Cut ``value`` to ``limit`` characters, marking the cut with '...'."""
    if not value or len(value) <= limit:
        return value
    return f"{value[:limit]}..."


class RepairPromptBuilder:
    """
    Build LLM requests for initial generation and for corrective repair.

    The repair request pairs a fixed system prompt with a JSON payload
    describing the failed attempt (format, schema name and description,
    previous output, error message, original input, attempt number).
    """

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        truncation_limit: int = 12000,
        default_model: str = "qwen2.5:7b",
        default_temperature: float = 0.2,
        default_max_tokens: int = 4096,
    ):
        """
        Initialize prompt builder.

        Args:
            templates_dir: Directory containing prompt templates (bundled by default)
            truncation_limit: Max characters kept from previous output / original input
            default_model: Default model name
            default_temperature: Default temperature
            default_max_tokens: Default max tokens
        """
        self.templates_dir = Path(templates_dir) if templates_dir else DEFAULT_TEMPLATES_DIR
        self.truncation_limit = truncation_limit
        self.default_model = default_model
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,  # Prompts, not HTML
        )

        try:
            self.system_template = self.jinja_env.get_template("repair_system_prompt.txt")
            self.user_template = self.jinja_env.get_template("repair_user_prompt.txt")
        except Exception as e:
            logger.error("Failed to load prompt templates", error=str(e), templates_dir=str(self.templates_dir))
            raise

        logger.info(
            "RepairPromptBuilder initialized",
            templates_dir=str(self.templates_dir),
            truncation_limit=truncation_limit,
            model=default_model,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RepairPromptBuilder":
        return cls(
            templates_dir=Path(settings.PROMPT_TEMPLATES_DIR) if settings.PROMPT_TEMPLATES_DIR else None,
            truncation_limit=settings.REPAIR_PROMPT_TRUNCATION_LIMIT,
            default_model=settings.OLLAMA_MODEL,
            default_temperature=settings.LLM_TEMPERATURE,
            default_max_tokens=settings.LLM_MAX_TOKENS,
        )

    def build_system_prompt(self) -> str:
        """Render the static repair system prompt."""
        return self.system_template.render().strip()

    def build_repair_payload(
        self,
        previous_output: str,
        error_message: str,
        attempt: int,
        format_name: str = "generic-json",
        schema_name: str = "JSON payload",
        schema_description: str = "Generic JSON structure",
        original_input: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Describe one failed attempt for the repair model.

        ``attempt`` is 1-based. ``originalInput`` is omitted when not given.
        """
        payload: dict[str, Any] = {
            "format": format_name,
            "schemaName": schema_name,
            "schemaDescription": schema_description,
            "previousOutput": truncate_for_prompt(previous_output, self.truncation_limit),
            "errorMessage": error_message,
            "attempt": attempt,
        }
        if original_input:
            payload["originalInput"] = truncate_for_prompt(original_input, self.truncation_limit)
        return payload

    def build_repair_prompt(self, payload: dict[str, Any]) -> str:
        return self.user_template.render(
            payload_json=json.dumps(payload, indent=2, ensure_ascii=False)
        ).strip()

    def build_generation_request(
        self,
        system_prompt: str,
        user_message: str,
        format_schema: FormatSchema = "json",
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMGenerationRequest:
        """Wrap a caller-supplied prompt pair into an LLMGenerationRequest."""
        return LLMGenerationRequest(
            system_prompt=system_prompt,
            prompt=user_message,
            model=model or self.default_model,
            temperature=self.default_temperature if temperature is None else temperature,
            max_tokens=max_tokens or self.default_max_tokens,
            format_schema=format_schema,
        )

    def build_repair_request(
        self,
        previous_output: str,
        error_message: str,
        attempt: int,
        format_name: str = "generic-json",
        schema_name: str = "JSON payload",
        schema_description: str = "Generic JSON structure",
        original_input: Optional[str] = None,
        format_schema: FormatSchema = "json",
    ) -> LLMGenerationRequest:
        """
        Build the complete corrective regeneration request.

        Returns:
            LLMGenerationRequest with the repair system prompt and the
            rendered JSON payload as user message
        """
        payload = self.build_repair_payload(
            previous_output=previous_output,
            error_message=error_message,
            attempt=attempt,
            format_name=format_name,
            schema_name=schema_name,
            schema_description=schema_description,
            original_input=original_input,
        )

        logger.debug(
            "Built repair prompt",
            attempt=attempt,
            schema_name=schema_name,
            previous_output_length=len(previous_output or ""),
            truncated=len(previous_output or "") > self.truncation_limit,
        )

        return self.build_generation_request(
            system_prompt=self.build_system_prompt(),
            user_message=self.build_repair_prompt(payload),
            format_schema=format_schema,
        )
