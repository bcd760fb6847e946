"""
Unit tests for ContentGenerator.

The LLM client is an AsyncMock; validation and repair run for real.
"""

import asyncio
import json

import pytest

from acquisition_layer.circuit.exceptions import CircuitOpenError
from acquisition_layer.generation.generator import LLM_CIRCUIT_KEY, ContentGenerator
from acquisition_layer.models.enums import CircuitPhase
from acquisition_layer.llm.exceptions import LLMAuthenticationError, LLMGenerationError
from acquisition_layer.models.llm_models import LLMGenerationResponse
from acquisition_layer.validation.exceptions import StructuredOutputError
from acquisition_layer.validation.pipeline import StructuralValidator

SCHEMA = {
    "type": "object",
    "required": ["a"],
    "properties": {"a": {"type": "integer"}},
}


@pytest.fixture
def generator(
    mock_llm_client, prompt_builder, fast_policy, retry_executor, registry
) -> ContentGenerator:
    return ContentGenerator(
        llm_client=mock_llm_client,
        prompt_builder=prompt_builder,
        retry_policy=fast_policy,
        max_repair_attempts=3,
        retry_executor=retry_executor,
        circuit_registry=registry,
    )


def _response(content: str) -> LLMGenerationResponse:
    return LLMGenerationResponse(
        content=content, model_version="qwen2.5:7b", finish_reason="stop", latency_ms=10
    )


def _script(mock_llm_client, *outputs) -> None:
    mock_llm_client.generate.side_effect = [
        _response(o) if isinstance(o, str) else o for o in outputs
    ]


def _requests(mock_llm_client):
    return [call.args[0] for call in mock_llm_client.generate.await_args_list]


class TestContentGenerator:
    """Test suite for generate()."""

    @pytest.mark.asyncio
    async def test_valid_first_answer(self, generator, mock_llm_client):
        _script(mock_llm_client, '{"a": 1}')

        result = await generator.generate("sys", "user", StructuralValidator(json_schema=SCHEMA))

        assert result.data == {"a": 1}
        assert result.generation_calls == 1
        assert len(result.attempts) == 1

    @pytest.mark.asyncio
    async def test_initial_request_uses_schema_as_format(self, generator, mock_llm_client):
        _script(mock_llm_client, '{"a": 1}')

        await generator.generate("sys", "user", StructuralValidator(json_schema=SCHEMA))

        request = _requests(mock_llm_client)[0]
        assert request.system_prompt == "sys"
        assert request.prompt == "user"
        assert request.format_schema == SCHEMA

    @pytest.mark.asyncio
    async def test_plain_json_mode_without_schema(self, generator, mock_llm_client):
        _script(mock_llm_client, '{"anything": 1}')

        await generator.generate("sys", "user", StructuralValidator())

        assert _requests(mock_llm_client)[0].format_schema == "json"

    @pytest.mark.asyncio
    async def test_repairs_malformed_output(self, generator, mock_llm_client, prompt_builder):
        _script(mock_llm_client, "{a:1}", '{"a":1}')

        result = await generator.generate(
            "sys",
            "user",
            StructuralValidator(json_schema=SCHEMA, schema_name="Counter"),
            format_name="counter",
            schema_description="One integer field",
        )

        assert result.content == '{"a":1}'
        assert result.generation_calls == 2
        assert [a.is_valid for a in result.attempts] == [False, True]

        repair_request = _requests(mock_llm_client)[1]
        assert repair_request.system_prompt == prompt_builder.build_system_prompt()
        payload = json.loads(repair_request.prompt)
        assert payload["format"] == "counter"
        assert payload["schemaName"] == "Counter"
        assert payload["schemaDescription"] == "One integer field"
        assert payload["previousOutput"] == "{a:1}"
        assert payload["originalInput"] == "user"
        assert payload["attempt"] == 1
        assert "Failed to parse generated content as JSON" in payload["errorMessage"]

    @pytest.mark.asyncio
    async def test_exhausted_repairs(self, generator, mock_llm_client):
        _script(mock_llm_client, "nope", "still nope", "never")

        with pytest.raises(StructuredOutputError) as exc_info:
            await generator.generate("sys", "user", StructuralValidator(json_schema=SCHEMA))

        assert len(exc_info.value.attempts) == 3
        assert mock_llm_client.generate.await_count == 3

    @pytest.mark.asyncio
    async def test_empty_reply_is_repaired(self, generator, mock_llm_client):
        _script(mock_llm_client, '{"a":1,', "", '{"a":1}')

        result = await generator.generate("sys", "user", StructuralValidator(json_schema=SCHEMA))

        assert result.data == {"a": 1}
        assert result.generation_calls == 3
        assert [a.is_valid for a in result.attempts] == [False, False, True]
        assert "empty" in result.attempts[1].error

        payload = json.loads(_requests(mock_llm_client)[2].prompt)
        assert payload["previousOutput"] == ""
        assert payload["attempt"] == 2

    @pytest.mark.asyncio
    async def test_empty_replies_exhaust_as_structured_output_error(
        self, generator, mock_llm_client, registry
    ):
        _script(mock_llm_client, "", "   ", "")

        with pytest.raises(StructuredOutputError) as exc_info:
            await generator.generate("sys", "user", StructuralValidator())

        assert len(exc_info.value.attempts) == 3
        assert "empty" in exc_info.value.last_error
        assert registry.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY].failure_count == 0

    @pytest.mark.asyncio
    async def test_transient_llm_error_retried_not_counted(
        self, generator, mock_llm_client, fake_sleep
    ):
        _script(
            mock_llm_client,
            LLMGenerationError("Ollama server error: 503", status_code=503),
            '{"a": 1}',
        )

        result = await generator.generate("sys", "user", StructuralValidator(json_schema=SCHEMA))

        assert result.generation_calls == 1
        assert mock_llm_client.generate.await_count == 2
        assert fake_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_terminal_llm_error_propagates(self, generator, mock_llm_client):
        _script(mock_llm_client, LLMAuthenticationError("denied", status_code=401))

        with pytest.raises(LLMAuthenticationError):
            await generator.generate("sys", "user", StructuralValidator())

        assert mock_llm_client.generate.await_count == 1

    @pytest.mark.asyncio
    async def test_explicit_original_input(self, generator, mock_llm_client):
        _script(mock_llm_client, "bad", '{"a": 1}')

        await generator.generate(
            "sys", "user", StructuralValidator(json_schema=SCHEMA), original_input="transcript"
        )

        payload = json.loads(_requests(mock_llm_client)[1].prompt)
        assert payload["originalInput"] == "transcript"

    def test_invalid_budget(self, mock_llm_client, prompt_builder, fast_policy):
        with pytest.raises(ValueError):
            ContentGenerator(mock_llm_client, prompt_builder, fast_policy, max_repair_attempts=0)

    def test_from_settings(self, test_settings, mock_llm_client):
        test_settings.MAX_REPAIR_ATTEMPTS = 2

        generator = ContentGenerator.from_settings(test_settings, mock_llm_client)

        assert generator.max_repair_attempts == 2
        assert generator.retry_policy.max_attempts == 3


class TestGenerationCircuit:
    """The generation endpoint sits behind its own circuit breaker."""

    @pytest.mark.asyncio
    async def test_endpoint_failures_open_circuit(self, generator, mock_llm_client, registry):
        mock_llm_client.generate.side_effect = LLMGenerationError("Ollama server error: 503", status_code=503)

        for _ in range(3):
            with pytest.raises(LLMGenerationError):
                await generator.generate("sys", "user", StructuralValidator())

        status = registry.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY]
        assert status.phase == CircuitPhase.OPEN
        assert status.failure_count == 3
        # Three generate() calls, each spending the full retry budget
        assert mock_llm_client.generate.await_count == 9

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self, generator, mock_llm_client, registry, fake_sleep):
        for _ in range(3):
            registry.record_failure(LLM_CIRCUIT_KEY)

        with pytest.raises(CircuitOpenError) as exc_info:
            await generator.generate("sys", "user", StructuralValidator())

        assert exc_info.value.provider == LLM_CIRCUIT_KEY
        assert exc_info.value.retry_in_seconds == pytest.approx(300.0)
        mock_llm_client.generate.assert_not_awaited()
        fake_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_half_open_trial_success_closes(
        self, generator, mock_llm_client, registry, fake_clock
    ):
        for _ in range(3):
            registry.record_failure(LLM_CIRCUIT_KEY)
        fake_clock.advance(300)
        _script(mock_llm_client, '{"a": 1}')

        result = await generator.generate("sys", "user", StructuralValidator())

        assert result.data == {"a": 1}
        assert registry.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY].phase == CircuitPhase.CLOSED

    @pytest.mark.asyncio
    async def test_failed_repair_call_recorded(self, generator, mock_llm_client, registry):
        """A repair call goes through the circuit like the initial call."""
        outage = LLMGenerationError("Ollama server error: 503", status_code=503)
        _script(mock_llm_client, "not json", outage, outage, outage)

        with pytest.raises(LLMGenerationError):
            await generator.generate("sys", "user", StructuralValidator())

        assert mock_llm_client.generate.await_count == 4
        assert registry.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY].failure_count == 1

    @pytest.mark.asyncio
    async def test_invalid_output_is_not_an_endpoint_failure(
        self, generator, mock_llm_client, registry
    ):
        _script(mock_llm_client, "nope", "nope", "nope")

        with pytest.raises(StructuredOutputError):
            await generator.generate("sys", "user", StructuralValidator())

        status = registry.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY]
        assert status.phase == CircuitPhase.CLOSED
        assert status.failure_count == 0

    @pytest.mark.asyncio
    async def test_cancellation_releases_half_open_trial(
        self, generator, mock_llm_client, registry, fake_clock
    ):
        for _ in range(3):
            registry.record_failure(LLM_CIRCUIT_KEY)
        fake_clock.advance(300)
        started = asyncio.Event()

        async def hang(request):
            started.set()
            await asyncio.Event().wait()

        mock_llm_client.generate.side_effect = hang

        task = asyncio.create_task(generator.generate("sys", "user", StructuralValidator()))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        status = registry.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY]
        assert status.phase == CircuitPhase.HALF_OPEN
        assert status.failure_count == 3
        registry.check(LLM_CIRCUIT_KEY)

    def test_from_settings_builds_registry(self, test_settings, mock_llm_client):
        test_settings.FAILURE_THRESHOLD = 5

        generator = ContentGenerator.from_settings(test_settings, mock_llm_client)

        assert generator.circuit_registry.failure_threshold == 5
        assert generator.circuit_key == LLM_CIRCUIT_KEY
