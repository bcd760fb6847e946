"""
FastAPI dependency injection for the Content Acquisition Layer.

Provides process-wide singletons of stateful resources: the provider chain
(which owns the transcript circuit registry and the response cache), the LLM
client, the LLM circuit registry and the prompt builder. Lightweight orchestrators are built per request.
"""

from functools import lru_cache

from fastapi import Depends

from acquisition_layer.circuit.registry import CircuitBreakerRegistry
from acquisition_layer.config import Settings, settings
from acquisition_layer.generation.generator import ContentGenerator
from acquisition_layer.llm.base_client import BaseLLMClient
from acquisition_layer.llm.ollama_client import OllamaClient
from acquisition_layer.llm.prompt_builder import RepairPromptBuilder
from acquisition_layer.providers.chain import ProviderChain
from acquisition_layer.providers.http_provider import build_default_providers
from acquisition_layer.retry.policy import RetryPolicy


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def get_provider_chain() -> ProviderChain:
    """
    Get singleton provider chain.

    Circuit and cache state live as long as this instance, i.e. for the
    lifetime of the process.

    Returns:
        ProviderChain over the configured providers
    """
    app_settings = get_settings()
    return ProviderChain.from_settings(app_settings, build_default_providers(app_settings))


@lru_cache()
def get_llm_client() -> BaseLLMClient:
    """
    Get singleton LLM client with connection pooling.

    Returns:
        OllamaClient instance
    """
    app_settings = get_settings()
    return OllamaClient(
        base_url=app_settings.OLLAMA_BASE_URL,
        timeout=app_settings.OLLAMA_TIMEOUT,
    )


@lru_cache()
def get_llm_circuit_registry() -> CircuitBreakerRegistry:
    """
    Get singleton circuit registry for the generation endpoint.

    Shared by every per-request ContentGenerator so failures accumulate
    across requests.
    """
    return CircuitBreakerRegistry.from_settings(get_settings())


@lru_cache()
def get_prompt_builder() -> RepairPromptBuilder:
    """
    Get singleton prompt builder.

    Loads Jinja2 templates once and reuses them across requests.
    """
    return RepairPromptBuilder.from_settings(get_settings())


def get_content_generator(
    llm_client: BaseLLMClient = Depends(get_llm_client),
    prompt_builder: RepairPromptBuilder = Depends(get_prompt_builder),
    circuit_registry: CircuitBreakerRegistry = Depends(get_llm_circuit_registry),
    app_settings: Settings = Depends(get_settings),
) -> ContentGenerator:
    """
    Create content generator with injected dependencies.

    Not cached: it holds no state of its own. The client, builder and
    circuit registry are singletons.
    """
    return ContentGenerator(
        llm_client=llm_client,
        prompt_builder=prompt_builder,
        retry_policy=RetryPolicy.from_settings(app_settings),
        max_repair_attempts=app_settings.MAX_REPAIR_ATTEMPTS,
        circuit_registry=circuit_registry,
    )
