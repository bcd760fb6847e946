"""
Integration tests for the Content Acquisition Layer.

Test components together or against real external services:
- Provider chain end to end over real HTTP providers (MockTransport)
- Structured generation with self-repair (scripted Ollama endpoint)
- API endpoints (FastAPI TestClient with real wiring)
- Ollama client (real calls, marked with @pytest.mark.integration)
"""
