"""
Content Acquisition Layer for the e-learning platform.

Resilience facade around externally-owned services:
- Video transcripts from third-party scraping endpoints (ordered provider
  chain, per-provider circuit breakers, retry with backoff, TTL cache)
- Structured content from a generative model, with bounded self-repair of
  malformed output

Architecture: asyncio services + httpx clients + FastAPI admin surface
"""

__version__ = "0.1.0"
