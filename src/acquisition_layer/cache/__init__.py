"""TTL response cache for transcript fetches."""

from acquisition_layer.cache.response_cache import CacheEntry, ResponseCache

__all__ = ["CacheEntry", "ResponseCache"]
