"""
Unit tests for the HTTP scraping providers.

httpx.MockTransport stands in for the remote site.
"""

import httpx
import pytest

from acquisition_layer.providers.exceptions import (
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderTimeoutError,
    TranscriptParseError,
)
from acquisition_layer.providers.http_provider import (
    HTMLTranscriptProvider,
    YouTubeToTranscriptProvider,
    build_default_providers,
)

TRANSCRIPT_PAGE = (
    '<div id="transcript"><p><span>[00:01] Hello and welcome</span>'
    "<span>to the lesson.</span></p></div>"
)


def _provider(handler, **kwargs) -> YouTubeToTranscriptProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return YouTubeToTranscriptProvider(client=client, **kwargs)


@pytest.mark.asyncio
async def test_fetch_parses_and_cleans():
    """Test a 200 page is parsed and normalised."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["user_agent"] = request.headers.get("User-Agent")
        return httpx.Response(200, text=TRANSCRIPT_PAGE)

    provider = _provider(handler)
    transcript = await provider.fetch("dQw4w9WgXcQ")

    assert transcript == "Hello and welcome to the lesson."
    assert seen["url"] == "https://youtubetotranscript.com/transcript?v=dQw4w9WgXcQ"
    assert seen["user_agent"].startswith("Mozilla/5.0")


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [404, 429, 503])
async def test_non_success_status_raises_http_error(status_code):
    """Test non-2xx responses carry their status code."""
    provider = _provider(lambda request: httpx.Response(status_code))

    with pytest.raises(ProviderHTTPError) as exc_info:
        await provider.fetch("abc")

    assert exc_info.value.status_code == status_code
    assert exc_info.value.provider == "youtubetotranscript"


@pytest.mark.asyncio
async def test_short_transcript_is_parse_error():
    """Test a page with too little text is a failure, not an empty result."""
    html = '<div id="transcript"><p><span>Hi</span></p></div>'
    provider = _provider(lambda request: httpx.Response(200, text=html))

    with pytest.raises(TranscriptParseError) as exc_info:
        await provider.fetch("abc")

    assert exc_info.value.length == 2


@pytest.mark.asyncio
async def test_missing_transcript_is_parse_error():
    provider = _provider(lambda request: httpx.Response(200, text="<html>nothing</html>"))

    with pytest.raises(TranscriptParseError):
        await provider.fetch("abc")


@pytest.mark.asyncio
async def test_timeout_maps_to_provider_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    provider = _provider(handler, timeout=5.0)

    with pytest.raises(ProviderTimeoutError) as exc_info:
        await provider.fetch("abc")

    assert exc_info.value.timeout == 5.0


@pytest.mark.asyncio
async def test_connect_error_maps_to_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    provider = _provider(handler)

    with pytest.raises(ProviderConnectionError) as exc_info:
        await provider.fetch("abc")

    assert not isinstance(exc_info.value, ProviderTimeoutError)
    assert exc_info.value.details["error_type"] == "ConnectError"


def test_key_is_url_encoded():
    provider = HTMLTranscriptProvider(
        name="custom",
        url_template="https://example.com/t/{key}",
        parser=lambda html: html,
    )

    assert provider.build_url("a b/c") == "https://example.com/t/a%20b%2Fc"


def test_url_template_requires_placeholder():
    with pytest.raises(ValueError):
        HTMLTranscriptProvider(name="bad", url_template="https://example.com", parser=str)


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    provider = YouTubeToTranscriptProvider(client=client)

    await provider.close()

    assert not client.is_closed
    await client.aclose()


def test_build_default_providers(test_settings):
    test_settings.REQUEST_TIMEOUT_SECONDS = 12.0
    test_settings.MIN_TRANSCRIPT_LENGTH = 50

    providers = build_default_providers(test_settings)

    assert [p.name for p in providers] == ["youtubetotranscript"]
    assert providers[0].timeout == 12.0
    assert providers[0].min_length == 50


def test_build_default_providers_rejects_unknown(test_settings):
    test_settings.TRANSCRIPT_PROVIDERS = ["youtubetotranscript", "nope"]

    with pytest.raises(ValueError, match="nope"):
        build_default_providers(test_settings)
