"""
Ollama client implementation for the generation endpoint.

Communicates with the Ollama chat API using httpx AsyncClient:
- System instruction + single user message, non-streaming
- JSON mode or a JSON Schema constraint via the ``format`` parameter
- Connection pooling through a persistent client
- One HTTP call per generate(); retries belong to the RetryExecutor
"""

import json
import time
from typing import Optional

import httpx
import structlog

from acquisition_layer.llm.base_client import BaseLLMClient
from acquisition_layer.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from acquisition_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from acquisition_layer.monitoring.metrics import llm_latency_seconds, llm_tokens_total

logger = structlog.get_logger(__name__)


class OllamaClient(BaseLLMClient):
    """
    Ollama-specific LLM client.

    API Endpoints:
    - POST /api/chat: Generate a completion
    - GET /api/tags: Health probe
    """

    def __init__(
        self,
        base_url: str = "http://ollama:11434",
        timeout: float = 60,
        connection_limits: Optional[httpx.Limits] = None,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Ollama server URL
            timeout: Request timeout in seconds
            connection_limits: httpx connection pool limits
            client: Pre-built AsyncClient (tests inject a MockTransport here)
            **kwargs: Additional config
        """
        super().__init__(base_url, timeout, **kwargs)

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0,
            )

        self._client = client
        self._connection_limits = connection_limits

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                follow_redirects=True,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    @staticmethod
    def build_payload(request: LLMGenerationRequest) -> dict:
        """
        Build the /api/chat payload.

        {
            "model": "qwen2.5:7b",
            "messages": [{"role": "system", ...}, {"role": "user", ...}],
            "stream": false,
            "format": <JSON Schema or "json">,
            "options": {"temperature": 0.2, "num_predict": 4096, "seed": 42}
        }
        """
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})

        payload = {
            "model": request.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            },
        }
        if request.seed is not None:
            payload["options"]["seed"] = request.seed
        if request.format_schema:
            payload["format"] = request.format_schema
        return payload

    def _error_for_status(self, response: httpx.Response, model: str) -> Exception:
        status_code = response.status_code
        details = {"status": status_code, "error": response.text[:500], "model": model}

        if status_code == 429:
            return LLMRateLimitError("Ollama rate limit exceeded", details=details)
        if status_code in (401, 403):
            return LLMAuthenticationError(
                f"Ollama rejected credentials: {status_code}", details=details, status_code=status_code
            )
        if status_code == 404:
            return LLMModelNotAvailableError(
                f"Model not found: {model}", details=details, status_code=status_code
            )
        if status_code >= 500:
            return LLMGenerationError(
                f"Ollama server error: {status_code}", details=details, status_code=status_code
            )
        return LLMGenerationError(
            f"Ollama client error: {status_code}", details=details, status_code=status_code
        )

    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Generate a completion via POST /api/chat.

        Response:
        {
            "model": "qwen2.5:7b",
            "message": {"role": "assistant", "content": "..."},
            "done": true,
            "done_reason": "stop",
            "prompt_eval_count": 50,
            "eval_count": 150
        }
        """
        start_time = time.time()
        payload = self.build_payload(request)

        logger.info(
            "Sending generation request to Ollama",
            model=request.model,
            prompt_length=len(request.prompt),
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            has_schema=isinstance(request.format_schema, dict),
        )

        try:
            client = await self._get_client()
            response = await client.post("/api/chat", json=payload, timeout=self.timeout)
        except httpx.TimeoutException as e:
            self._observe_failure(request.model, start_time)
            logger.warning("Ollama request timeout", timeout=self.timeout, error=str(e))
            raise LLMTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"timeout": self.timeout},
            ) from e
        except httpx.TransportError as e:
            self._observe_failure(request.model, start_time)
            logger.warning("Ollama network error", error=str(e), error_type=type(e).__name__)
            raise LLMConnectionError(
                f"Network error: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        if not response.is_success:
            self._observe_failure(request.model, start_time)
            error = self._error_for_status(response, request.model)
            logger.error(
                "Ollama HTTP error",
                status_code=response.status_code,
                error_type=type(error).__name__,
            )
            raise error

        try:
            response_data = response.json()
        except json.JSONDecodeError as e:
            self._observe_failure(request.model, start_time)
            raise LLMGenerationError(
                "Invalid JSON response from Ollama",
                details={"parse_error": str(e)},
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)
        content = (response_data.get("message") or {}).get("content") or ""
        if not content.strip():
            # Returned as is; structural validation rejects it
            logger.warning("Ollama returned empty content", done_reason=response_data.get("done_reason"))

        model_version = response_data.get("model", request.model)
        finish_reason = response_data.get("done_reason") or (
            "stop" if response_data.get("done") else "incomplete"
        )
        prompt_tokens = response_data.get("prompt_eval_count")
        completion_tokens = response_data.get("eval_count")

        logger.info(
            "Ollama generation successful",
            model=model_version,
            latency_ms=latency_ms,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            finish_reason=finish_reason,
        )

        llm_latency_seconds.labels(model=model_version, success="true").observe(latency_ms / 1000.0)
        if prompt_tokens:
            llm_tokens_total.labels(model=model_version, token_type="prompt").inc(prompt_tokens)
        if completion_tokens:
            llm_tokens_total.labels(model=model_version, token_type="completion").inc(completion_tokens)

        return LLMGenerationResponse(
            content=content,
            model_version=model_version,
            finish_reason=finish_reason,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=latency_ms,
            raw_metadata={
                "total_duration": response_data.get("total_duration"),
                "load_duration": response_data.get("load_duration"),
                "eval_duration": response_data.get("eval_duration"),
            },
        )

    @staticmethod
    def _observe_failure(model: str, start_time: float) -> None:
        llm_latency_seconds.labels(model=model, success="false").observe(time.time() - start_time)

    async def health_check(self) -> bool:
        """
        Check Ollama server health via GET /api/tags.

        Returns True if server responds, False otherwise.
        """
        try:
            client = await self._get_client()
            response = await client.get("/api/tags", timeout=5.0)
            response.raise_for_status()
            logger.debug("Ollama health check passed")
            return True
        except Exception as e:
            logger.warning("Ollama health check failed", error=str(e))
            return False

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed Ollama client connection")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
