"""
FastAPI API routes and endpoints.

- routes.py: POST /api/translate, GET /health
- dependencies.py: Settings, provider descriptors, per-request orchestrator
- models.py: Translate request/response shaping and legacy aliases
- error_handlers.py: Gateway failures -> HTTP status codes
- middleware.py: Request id tracing
"""

from fallback_gateway.api import dependencies, error_handlers, models
from fallback_gateway.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
