"""
Time-bounded memoization of successful transcript fetches.

Entries are checked lazily on read: an entry older than the TTL is a miss
even though it stays in memory until the next successful fetch overwrites
it or clear() drops everything. There is no size bound; the key space is
the set of videos one process touches.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from acquisition_layer.config import Settings
from acquisition_layer.monitoring.metrics import transcript_cache_lookups_total

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """
    One cached payload.

    Attributes:
        key: Content identifier (e.g., video id)
        value: Cached transcript text
        produced_by: Provider that produced the value
        stored_at: Clock reading when the value was stored (seconds)
    """

    key: str
    value: str
    produced_by: str
    stored_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.stored_at < ttl


class ResponseCache:
    """
    In-memory TTL cache shared by every caller of one ProviderChain.
    """

    def __init__(self, ttl: float = 3600.0, clock: Callable[[], float] = time.time):
        """
        Initialize cache.

        Args:
            ttl: Seconds an entry stays valid for reads (> 0)
            clock: Time source in seconds (injectable for tests)
        """
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResponseCache":
        return cls(ttl=settings.CACHE_TTL_SECONDS)

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key if present and younger than the TTL."""
        with self._lock:
            entry = self._entries.get(key)

        if entry is None:
            transcript_cache_lookups_total.labels(result="miss").inc()
            return None

        if not entry.is_fresh(self._clock(), self.ttl):
            transcript_cache_lookups_total.labels(result="stale").inc()
            logger.debug("Cache entry stale", key=key, produced_by=entry.produced_by)
            return None

        transcript_cache_lookups_total.labels(result="hit").inc()
        return entry

    def put(self, key: str, value: str, provider_id: str) -> CacheEntry:
        """Store value for key, replacing any previous entry."""
        entry = CacheEntry(
            key=key, value=value, produced_by=provider_id, stored_at=self._clock()
        )
        with self._lock:
            self._entries[key] = entry
        return entry

    def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Transcript cache cleared", entries_removed=count)
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
