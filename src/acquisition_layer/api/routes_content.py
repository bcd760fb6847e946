"""
Content routes: transcript acquisition and structured generation.

Single-provider failures and single invalid outputs are handled below the
API; only exhaustion errors surface here and are mapped by error_handlers.
"""

import structlog
from fastapi import APIRouter, Depends, Query, status

from acquisition_layer.api.dependencies import get_content_generator, get_provider_chain
from acquisition_layer.api.models import AttemptSummary, GenerateRequest, GenerateResponse
from acquisition_layer.generation.generator import ContentGenerator
from acquisition_layer.models.transcript_models import TranscriptResult
from acquisition_layer.providers.chain import ProviderChain
from acquisition_layer.validation.pipeline import StructuralValidator

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "/transcripts/{video_id}",
    response_model=TranscriptResult,
    status_code=status.HTTP_200_OK,
    summary="Fetch a video transcript",
    description="""
    Fetch the transcript of a video through the provider chain.

    Served from the response cache when a fresh entry exists. Otherwise
    providers are tried in priority order, skipping those whose circuit is
    open.
    """,
    responses={
        200: {"description": "Transcript fetched"},
        502: {"description": "Every provider failed or was skipped"},
    },
)
async def get_transcript(
    video_id: str,
    skip_cache: bool = Query(default=False, description="Bypass the cache lookup"),
    chain: ProviderChain = Depends(get_provider_chain),
) -> TranscriptResult:
    logger.info("Transcript request received", video_id=video_id, skip_cache=skip_cache)
    return await chain.fetch(video_id, skip_cache=skip_cache)


@router.post(
    "/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate structured content",
    description="""
    Generate JSON content and repair it until it satisfies the given JSON
    Schema (or is at least a JSON object), within a bounded number of
    attempts.
    """,
    responses={
        200: {"description": "Valid structured output produced"},
        400: {"description": "Invalid JSON Schema in the request"},
        422: {"description": "Output never validated within the repair budget"},
        502: {"description": "Generation endpoint failed"},
        503: {"description": "Generation endpoint circuit open"},
        504: {"description": "Generation endpoint timed out"},
    },
)
async def generate_content(
    request: GenerateRequest,
    generator: ContentGenerator = Depends(get_content_generator),
) -> GenerateResponse:
    """
    Generate structured content.

    Args:
        request: Prompts, optional JSON Schema and descriptive metadata
        generator: Content generator (injected)

    Returns:
        GenerateResponse with validated content and attempt history
    """
    validator = StructuralValidator(json_schema=request.json_schema, schema_name=request.schema_name)

    logger.info(
        "Generation request received",
        format=request.format,
        schema_name=validator.schema_name,
        has_schema=request.json_schema is not None,
    )

    result = await generator.generate(
        system_prompt=request.system_prompt,
        user_message=request.user_message,
        validator=validator,
        format_name=request.format,
        schema_name=request.schema_name,
        schema_description=request.schema_description,
    )

    return GenerateResponse(
        content=result.content,
        data=result.data,
        attempts=[
            AttemptSummary(attempt_index=a.attempt_index, is_valid=a.is_valid, error=a.error)
            for a in result.attempts
        ],
        generation_calls=result.generation_calls,
    )
