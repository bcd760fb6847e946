"""
FastAPI application entry point for the Content Acquisition Layer.
"""

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from acquisition_layer.api.dependencies import get_llm_client, get_provider_chain
from acquisition_layer.api.error_handlers import EXCEPTION_HANDLERS
from acquisition_layer.api.middleware import RequestTracingMiddleware
from acquisition_layer.api.routes_admin import router as admin_router
from acquisition_layer.api.routes_content import router as content_router
from acquisition_layer.config import settings
from acquisition_layer.logging_config import configure_logging

# Configure structured logging before the app starts emitting events
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Resilient transcript acquisition and self-repairing structured generation",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request tracing middleware (request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(content_router, tags=["content"])
app.include_router(admin_router, tags=["admin"])


@app.on_event("startup")
async def startup():
    """Build the provider chain eagerly so misconfiguration fails at boot."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        providers=settings.TRANSCRIPT_PROVIDERS,
        ollama_base_url=settings.OLLAMA_BASE_URL,
        model=settings.OLLAMA_MODEL,
    )

    get_provider_chain()

    if await get_llm_client().health_check():
        logger.info("Ollama connection successful")
    else:
        logger.warning("Ollama unreachable at startup", ollama_base_url=settings.OLLAMA_BASE_URL)

    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown():
    """Close pooled HTTP clients held by the singletons."""
    logger.info("Application shutdown")
    if get_provider_chain.cache_info().currsize:
        await get_provider_chain().close()
    if get_llm_client.cache_info().currsize:
        await get_llm_client().close()
    logger.info("Application shutdown complete")


if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "acquisition_layer.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
