"""
FastAPI application entry point for the LLM Fallback Gateway.

Run locally with:
    uvicorn fallback_gateway.main:app --port 8000
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from fallback_gateway.api.dependencies import get_providers
from fallback_gateway.api.error_handlers import EXCEPTION_HANDLERS
from fallback_gateway.api.middleware import RequestTracingMiddleware
from fallback_gateway.api.routes import router
from fallback_gateway.config import Settings, settings
from fallback_gateway.gateway.exceptions import ConfigurationError
from fallback_gateway.logging_config import configure_logging

configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)


def create_app(config: Settings) -> FastAPI:
    """Assemble the app: middleware, error mapping, routes and metrics."""
    application = FastAPI(
        title=config.APP_NAME,
        description="Chat/translation completions with retry and multi-provider fallback",
        version=config.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Wraps the routes, so their log lines carry request_id
    application.add_middleware(RequestTracingMiddleware)
    # Browser clients call /api/translate directly
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["*"],
    )

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        application.add_exception_handler(exc_class, handler)

    application.include_router(router)

    if config.PROMETHEUS_ENABLED:
        Instrumentator().instrument(application).expose(application)

    @application.get("/")
    async def root():
        """Service info and links."""
        return {
            "service": config.APP_NAME,
            "version": config.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
            "translate": "/api/translate",
            "metrics": "/metrics" if config.PROMETHEUS_ENABLED else None,
        }

    @application.on_event("startup")
    async def report_provider_chain():
        logger.info(
            "Application startup",
            version=config.APP_VERSION,
            environment=config.ENVIRONMENT,
            policy=config.FALLBACK_POLICY.value,
            timeout_ms=config.REQUEST_TIMEOUT_MS,
            max_retries=config.MAX_RETRIES,
        )
        try:
            providers = get_providers()
        except ConfigurationError as e:
            # Requests will surface the same error as a 500
            logger.error("Provider chain misconfigured", error=e.message)
            return

        if not any(p.enabled for p in providers):
            logger.error(
                "No provider has a credential; every completion will fail",
                providers=[p.name for p in providers],
            )

    return application


app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fallback_gateway.main:app", host="0.0.0.0", port=8000)
