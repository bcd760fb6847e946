"""
Transcript providers and the fallback chain.

Components:
- TranscriptProvider: Capability protocol (name + async fetch)
- HTMLTranscriptProvider / YouTubeToTranscriptProvider: httpx scraping adapters
- ProviderChain: Cache -> circuit gate -> retry -> fallback
- parsers / text_utils: HTML extraction and transcript normalisation
- exceptions: Provider errors and the aggregate TranscriptFetchError
"""

from acquisition_layer.providers.base import TranscriptProvider
from acquisition_layer.providers.chain import ProviderChain
from acquisition_layer.providers.exceptions import (
    ProviderConnectionError,
    ProviderError,
    ProviderHTTPError,
    ProviderTimeoutError,
    TranscriptFetchError,
    TranscriptParseError,
    UnknownProviderError,
)
from acquisition_layer.providers.http_provider import (
    HTMLTranscriptProvider,
    YouTubeToTranscriptProvider,
    build_default_providers,
)
from acquisition_layer.providers.text_utils import clean_transcript

__all__ = [
    "TranscriptProvider",
    "ProviderChain",
    "HTMLTranscriptProvider",
    "YouTubeToTranscriptProvider",
    "build_default_providers",
    "clean_transcript",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderConnectionError",
    "ProviderTimeoutError",
    "TranscriptParseError",
    "TranscriptFetchError",
    "UnknownProviderError",
]
