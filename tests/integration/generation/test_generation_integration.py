"""
End-to-end tests for structured generation with self-repair.

A real OllamaClient talks to a scripted /api/chat endpoint served by
httpx.MockTransport; prompt building, validation and repair run for real.
"""

import json

import httpx
import pytest

from acquisition_layer.circuit.exceptions import CircuitOpenError
from acquisition_layer.generation.generator import LLM_CIRCUIT_KEY, ContentGenerator
from acquisition_layer.llm.exceptions import LLMGenerationError
from acquisition_layer.llm.ollama_client import OllamaClient
from acquisition_layer.models.enums import CircuitPhase
from acquisition_layer.llm.prompt_builder import RepairPromptBuilder
from acquisition_layer.validation.exceptions import StructuredOutputError
from acquisition_layer.validation.pipeline import StructuralValidator


def _scripted_ollama(recording_transport, answers: list[str]):
    """OllamaClient whose successive /api/chat calls return ``answers``."""
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        content = answers[min(len(bodies) - 1, len(answers) - 1)]
        return httpx.Response(
            200,
            json={
                "model": "qwen2.5:7b",
                "message": {"role": "assistant", "content": content},
                "done": True,
                "done_reason": "stop",
            },
        )

    transport = recording_transport(handler)
    http_client = httpx.AsyncClient(base_url="http://ollama.test", transport=transport)
    return OllamaClient(base_url="http://ollama.test", client=http_client), transport, bodies


def _generator(llm_client, fast_policy, retry_executor) -> ContentGenerator:
    return ContentGenerator(
        llm_client=llm_client,
        prompt_builder=RepairPromptBuilder(),
        retry_policy=fast_policy,
        max_repair_attempts=3,
        retry_executor=retry_executor,
    )


@pytest.mark.asyncio
async def test_malformed_output_repaired_in_one_correction(
    recording_transport, fast_policy, retry_executor
):
    """Truncated JSON is resubmitted once and the correction validates."""
    llm_client, transport, bodies = _scripted_ollama(recording_transport, ['{"a":1,', '{"a":1}'])
    generator = _generator(llm_client, fast_policy, retry_executor)

    result = await generator.generate(
        system_prompt="Return JSON.",
        user_message="Give me a.",
        validator=StructuralValidator(),
    )

    assert result.content == '{"a":1}'
    assert result.data == {"a": 1}
    assert result.generation_calls == 2
    assert transport.requests["ollama.test"] == 2

    repair_messages = bodies[1]["messages"]
    assert repair_messages[0]["role"] == "system"
    repair_payload = json.loads(repair_messages[1]["content"])
    assert repair_payload["previousOutput"] == '{"a":1,'
    assert repair_payload["attempt"] == 1
    assert repair_payload["originalInput"] == "Give me a."


@pytest.mark.asyncio
async def test_empty_reply_goes_through_repair(recording_transport, fast_policy, retry_executor):
    """A blank model reply is invalid output, so the next correction still runs."""
    llm_client, transport, bodies = _scripted_ollama(
        recording_transport, ['{"a":1,', "", '{"a":1}']
    )
    generator = _generator(llm_client, fast_policy, retry_executor)

    result = await generator.generate("Return JSON.", "Give me a.", StructuralValidator())

    assert result.data == {"a": 1}
    assert result.generation_calls == 3
    assert transport.requests["ollama.test"] == 3
    assert "empty" in result.attempts[1].error
    assert json.loads(bodies[2]["messages"][1]["content"])["previousOutput"] == ""


@pytest.mark.asyncio
async def test_schema_violation_repaired(recording_transport, fast_policy, retry_executor):
    schema = {
        "type": "object",
        "required": ["title", "questions"],
        "properties": {
            "title": {"type": "string"},
            "questions": {"type": "array", "minItems": 1},
        },
    }
    llm_client, _, bodies = _scripted_ollama(
        recording_transport,
        ['```json\n{"title": "Quiz"}\n```', '{"title": "Quiz", "questions": ["2+2?"]}'],
    )
    generator = _generator(llm_client, fast_policy, retry_executor)

    result = await generator.generate(
        system_prompt="Return JSON.",
        user_message="Make a quiz.",
        validator=StructuralValidator(json_schema=schema, schema_name="Quiz"),
    )

    assert result.data["questions"] == ["2+2?"]
    assert bodies[0]["format"] == schema
    repair_payload = json.loads(bodies[1]["messages"][1]["content"])
    assert "'questions' is a required property" in repair_payload["errorMessage"]
    assert repair_payload["schemaName"] == "Quiz"


@pytest.mark.asyncio
async def test_never_valid_output_exhausts(recording_transport, fast_policy, retry_executor):
    llm_client, transport, _ = _scripted_ollama(recording_transport, ["not json at all"])
    generator = _generator(llm_client, fast_policy, retry_executor)

    with pytest.raises(StructuredOutputError) as exc_info:
        await generator.generate("Return JSON.", "Give me a.", StructuralValidator())

    assert len(exc_info.value.attempts) == 3
    assert transport.requests["ollama.test"] == 3


@pytest.mark.asyncio
async def test_outage_opens_circuit_and_stops_traffic(
    recording_transport, fast_policy, retry_executor, registry, fake_clock
):
    """503s open the endpoint circuit; later calls make no requests until the cooldown."""
    healthy = False

    def handler(request: httpx.Request) -> httpx.Response:
        if not healthy:
            return httpx.Response(503, text="overloaded")
        return httpx.Response(
            200,
            json={"model": "qwen2.5:7b", "message": {"content": '{"a": 1}'}, "done": True},
        )

    transport = recording_transport(handler)
    llm_client = OllamaClient(
        base_url="http://ollama.test",
        client=httpx.AsyncClient(base_url="http://ollama.test", transport=transport),
    )
    generator = ContentGenerator(
        llm_client=llm_client,
        prompt_builder=RepairPromptBuilder(),
        retry_policy=fast_policy,
        retry_executor=retry_executor,
        circuit_registry=registry,
    )

    for _ in range(3):
        with pytest.raises(LLMGenerationError):
            await generator.generate("Return JSON.", "Give me a.", StructuralValidator())
    assert transport.requests["ollama.test"] == 9

    with pytest.raises(CircuitOpenError):
        await generator.generate("Return JSON.", "Give me a.", StructuralValidator())
    assert transport.requests["ollama.test"] == 9

    healthy = True
    fake_clock.advance(300)
    result = await generator.generate("Return JSON.", "Give me a.", StructuralValidator())

    assert result.data == {"a": 1}
    assert transport.requests["ollama.test"] == 10
    assert registry.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY].phase == CircuitPhase.CLOSED
