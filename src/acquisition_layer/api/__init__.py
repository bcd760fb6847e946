"""
FastAPI routes and endpoints.

- routes_content.py: GET /transcripts/{video_id}, POST /generate
- routes_admin.py: GET /health, /admin/providers, provider reset, cache clear
- dependencies.py: Singletons for the provider chain, LLM client, prompt builder
- models.py: API-specific request/response models
- error_handlers.py: Exception handlers for structured error responses
- middleware.py: Request id tracing
"""

from acquisition_layer.api import dependencies, error_handlers, models
from acquisition_layer.api.routes_admin import router as admin_router
from acquisition_layer.api.routes_content import router as content_router

__all__ = [
    "content_router",
    "admin_router",
    "dependencies",
    "error_handlers",
    "models",
]
