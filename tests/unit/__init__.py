"""
Unit tests for the Content Acquisition Layer.

Test individual components in isolation:
- Retry policy, classification and executor (sleeps faked)
- Circuit breaker registry (clock faked)
- Response cache TTL semantics
- Providers: HTML parsing, transcript cleaning, HTTP adapter, chain
- Validation stages and the repair loop
- LLM client (httpx.MockTransport) and prompt builder
- Content generator and API routes (dependency overrides)
"""
