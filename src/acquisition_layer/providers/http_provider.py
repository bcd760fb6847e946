"""
HTTP scraping providers.

Communicates with transcript sites using httpx AsyncClient:
- GET against a URL template parameterised by the content id
- Browser-like headers (sites reject requests without them)
- Provider-specific HTML parser, then transcript normalisation
- Minimum-length check: a 200 with an empty page is a failure
"""

from typing import Callable, Optional
from urllib.parse import quote

import httpx
import structlog

from acquisition_layer.config import Settings
from acquisition_layer.providers.base import TranscriptProvider
from acquisition_layer.providers.exceptions import (
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderTimeoutError,
    TranscriptParseError,
)
from acquisition_layer.providers.parsers import parse_youtubetotranscript_html
from acquisition_layer.providers.text_utils import clean_transcript

logger = structlog.get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class HTMLTranscriptProvider:
    """
    Transcript provider backed by an HTML page.

    One HTTP call per fetch(); retries, timeouts per attempt and circuit
    accounting are applied by the ProviderChain around it.
    """

    def __init__(
        self,
        name: str,
        url_template: str,
        parser: Callable[[str], str],
        timeout: float = 30.0,
        min_length: int = 10,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        """
        Initialize provider.

        Args:
            name: Unique provider name (circuit and metrics key)
            url_template: URL with a ``{key}`` placeholder
            parser: Turns the HTML body into transcript text
            timeout: httpx timeout in seconds
            min_length: Shortest transcript accepted, in characters
            headers: Request headers (defaults to browser-like headers)
            client: Pre-built AsyncClient (tests inject a MockTransport here)
            connection_limits: httpx pool limits for the owned client
        """
        if "{key}" not in url_template:
            raise ValueError("url_template must contain a {key} placeholder")

        self.name = name
        self.url_template = url_template
        self.parser = parser
        self.timeout = timeout
        self.min_length = min_length
        self.headers = dict(headers or DEFAULT_HEADERS)
        self._client = client
        self._owns_client = client is None
        self._connection_limits = connection_limits or httpx.Limits(
            max_keepalive_connections=5,
            max_connections=10,
            keepalive_expiry=30.0,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                headers=self.headers,
                follow_redirects=True,
            )
            self._owns_client = True
            logger.debug("Created new httpx AsyncClient", provider=self.name)
        return self._client

    def build_url(self, key: str) -> str:
        return self.url_template.format(key=quote(key, safe=""))

    async def fetch(self, key: str) -> str:
        """
        Fetch and parse one transcript.

        Raises:
            ProviderTimeoutError: httpx timeout
            ProviderConnectionError: Network failure
            ProviderHTTPError: Non-2xx status
            TranscriptParseError: Page parsed to an empty or too-short text
        """
        url = self.build_url(key)

        try:
            client = await self._get_client()
            response = await client.get(url, headers=self.headers)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(self.name, self.timeout) from e
        except httpx.TransportError as e:
            raise ProviderConnectionError(
                self.name,
                f"Network error: {e}",
                details={"error_type": type(e).__name__},
            ) from e

        if not response.is_success:
            raise ProviderHTTPError(self.name, response.status_code, response.reason_phrase)

        transcript = clean_transcript(self.parser(response.text))

        if len(transcript) < self.min_length:
            raise TranscriptParseError(
                self.name,
                "No transcript content found in response",
                length=len(transcript),
            )

        logger.debug(
            "Provider returned transcript",
            provider=self.name,
            key=key,
            length=len(transcript),
        )
        return transcript

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed provider HTTP client", provider=self.name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, timeout={self.timeout}s)"


class YouTubeToTranscriptProvider(HTMLTranscriptProvider):
    """Scrapes https://youtubetotranscript.com."""

    NAME = "youtubetotranscript"
    URL_TEMPLATE = "https://youtubetotranscript.com/transcript?v={key}"

    def __init__(self, **kwargs):
        super().__init__(
            name=self.NAME,
            url_template=self.URL_TEMPLATE,
            parser=parse_youtubetotranscript_html,
            **kwargs,
        )


PROVIDER_FACTORIES: dict[str, Callable[..., HTMLTranscriptProvider]] = {
    YouTubeToTranscriptProvider.NAME: YouTubeToTranscriptProvider,
}


def build_default_providers(settings: Settings) -> list[TranscriptProvider]:
    """
    Instantiate the providers named in TRANSCRIPT_PROVIDERS, in that order.

    Raises:
        ValueError: A configured name has no known factory
    """
    providers: list[TranscriptProvider] = []
    for name in settings.TRANSCRIPT_PROVIDERS:
        factory = PROVIDER_FACTORIES.get(name)
        if factory is None:
            raise ValueError(
                f"Unknown transcript provider '{name}'. "
                f"Available: {', '.join(sorted(PROVIDER_FACTORIES))}"
            )
        providers.append(
            factory(
                timeout=settings.REQUEST_TIMEOUT_SECONDS,
                min_length=settings.MIN_TRANSCRIPT_LENGTH,
            )
        )
    return providers
