"""
Abstract base client for the generation endpoint.

Defines the interface every LLM client implementation must adhere to, so the
ContentGenerator can swap inference backends without changing the repair
loop or the API layer.
"""

from abc import ABC, abstractmethod

import structlog

from acquisition_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse

logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM inference clients.

    Responsibilities:
    - Send one generation request to the inference server
    - Parse the response into LLMGenerationResponse
    - Map transport and HTTP failures onto LLMClientError subclasses

    Does NOT handle:
    - Prompt construction (RepairPromptBuilder)
    - Output validation (StructuralValidator)
    - Retries (RetryExecutor, applied by the caller)
    """

    def __init__(self, base_url: str, timeout: float = 60, **kwargs):
        """
        Initialize base client.

        Args:
            base_url: Base URL of the inference server (e.g., http://ollama:11434)
            timeout: Request timeout in seconds
            **kwargs: Additional provider-specific config
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.extra_config = kwargs

        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    @abstractmethod
    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate one completion.

        Implementations perform exactly one HTTP call.

        Raises:
            LLMTimeoutError: Request exceeded timeout
            LLMConnectionError: Network errors
            LLMRateLimitError: HTTP 429
            LLMAuthenticationError: HTTP 401/403
            LLMModelNotAvailableError: Model not found
            LLMGenerationError: Any other server-side or payload error
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the inference server is reachable.

        Must not raise; returns False on any error.
        """

    async def close(self):
        """Release persistent connections. Default implementation does nothing."""
        logger.debug("Closing LLM client", client_class=self.__class__.__name__)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url}, timeout={self.timeout}s)"
