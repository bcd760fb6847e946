"""
Operational routes: health, provider circuits and the response cache.
"""

import structlog
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from acquisition_layer.api.dependencies import (
    get_llm_circuit_registry,
    get_llm_client,
    get_provider_chain,
    get_settings,
)
from acquisition_layer.api.models import (
    CacheClearResponse,
    HealthResponse,
    ProvidersStatusResponse,
)
from acquisition_layer.circuit.registry import CircuitBreakerRegistry
from acquisition_layer.config import Settings
from acquisition_layer.generation.generator import LLM_CIRCUIT_KEY
from acquisition_layer.llm.base_client import BaseLLMClient
from acquisition_layer.models.enums import CircuitPhase
from acquisition_layer.providers.chain import ProviderChain

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="""
    Check the generation endpoint and report the circuit phase of each
    transcript provider and of the generation endpoint.

    Generation is available when the LLM is reachable and its circuit is
    closed.

    - healthy: generation available and every provider circuit closed
    - degraded: generation unavailable, or at least one provider circuit not closed
    - unhealthy (503): generation unavailable and no provider circuit closed
    """,
    responses={
        200: {"description": "Healthy or degraded"},
        503: {"description": "No way to serve requests"},
    },
)
async def health_check(
    chain: ProviderChain = Depends(get_provider_chain),
    llm_client: BaseLLMClient = Depends(get_llm_client),
    llm_circuits: CircuitBreakerRegistry = Depends(get_llm_circuit_registry),
    app_settings: Settings = Depends(get_settings),
):
    llm_ok = await llm_client.health_check()
    services = {"ollama": "ok" if llm_ok else "unreachable"}
    llm_circuit = llm_circuits.status([LLM_CIRCUIT_KEY])[LLM_CIRCUIT_KEY].phase.value
    generation_ok = llm_ok and llm_circuit == CircuitPhase.CLOSED.value
    providers = {name: s.phase.value for name, s in chain.get_provider_status().items()}
    any_closed = any(phase == CircuitPhase.CLOSED.value for phase in providers.values())
    all_closed = all(phase == CircuitPhase.CLOSED.value for phase in providers.values())

    if generation_ok and all_closed:
        health_status = "healthy"
        status_code = status.HTTP_200_OK
    elif generation_ok or any_closed:
        health_status = "degraded"
        status_code = status.HTTP_200_OK
    else:
        health_status = "unhealthy"
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    logger.info(
        "Health check",
        status=health_status,
        services=services,
        llm_circuit=llm_circuit,
        providers=providers,
    )

    response = HealthResponse(
        status=health_status,
        version=app_settings.APP_VERSION,
        services=services,
        llm_circuit=llm_circuit,
        providers=providers,
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


@router.get(
    "/admin/providers",
    response_model=ProvidersStatusResponse,
    summary="Circuit status per provider",
)
async def list_providers(chain: ProviderChain = Depends(get_provider_chain)) -> ProvidersStatusResponse:
    return ProvidersStatusResponse(providers=list(chain.get_provider_status().values()))


@router.post(
    "/admin/providers/{provider_id}/reset",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset a provider's circuit",
    responses={404: {"description": "Provider not configured"}},
)
async def reset_provider(
    provider_id: str,
    chain: ProviderChain = Depends(get_provider_chain),
) -> Response:
    chain.reset_provider_circuit(provider_id)
    logger.info("Provider circuit reset via API", provider=provider_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/admin/cache",
    response_model=CacheClearResponse,
    summary="Clear the transcript cache",
)
async def clear_cache(chain: ProviderChain = Depends(get_provider_chain)) -> CacheClearResponse:
    cleared = chain.clear_cache()
    logger.info("Transcript cache cleared via API", cleared=cleared)
    return CacheClearResponse(cleared=cleared)
