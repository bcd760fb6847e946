"""
Transcript provider interface.

A provider is anything with a name and an async fetch(key) that returns
transcript text or raises. The chain treats every provider the same way;
scraping, parsing and payload checks are the adapter's business.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TranscriptProvider(Protocol):
    """
    Capability interface implemented by every transcript source.

    Implementations must raise (never return an empty string) when no usable
    transcript was obtained, so the failure is counted against the
    provider's circuit.
    """

    name: str

    async def fetch(self, key: str) -> str:
        """
        Fetch the transcript for a content identifier.

        Args:
            key: Content identifier (e.g., YouTube video id)

        Returns:
            Non-empty transcript text

        Raises:
            ProviderError: Any failure (HTTP, transport, parse)
        """
        ...
