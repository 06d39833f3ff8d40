"""
HTTP routes: the translate endpoint and health check.

POST /api/translate is an OpenAI-compatible chat completions proxy with
provider fallback. Only POST is routed, so other methods get 405.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from fallback_gateway.api.dependencies import (
    get_orchestrator,
    get_providers,
    get_settings,
)
from fallback_gateway.api.models import (
    HealthResponse,
    ProviderStatus,
    TranslateRequest,
    build_translate_response,
)
from fallback_gateway.config import Settings
from fallback_gateway.gateway.orchestrator import FallbackOrchestrator
from fallback_gateway.providers.descriptor import ProviderDescriptor

router = APIRouter()


@router.post(
    "/api/translate",
    status_code=status.HTTP_200_OK,
    summary="Chat completion with provider fallback",
    description="""
    Send `prompt` (legacy Sanskrit translation) or `messages` (OpenAI chat format).

    The primary provider is retried on timeouts, 429 and 5xx; when it is
    exhausted the request falls back down the configured provider list.
    The response is the provider payload plus `provider`, `text`,
    `response`, `content` (and `sanskritText` for `prompt` requests).
    """,
    responses={
        200: {"description": "Completion produced by one of the providers"},
        400: {"description": "Invalid body, or stream=true"},
        500: {"description": "Server configuration error (missing credentials)"},
        502: {"description": "Sole provider failed"},
        503: {"description": "Every provider in the fallback chain failed"},
        504: {"description": "Sole provider timed out"},
    },
)
async def translate(
    body: TranslateRequest,
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    request, legacy = body.to_completion_request(
        system_instruction=settings.LEGACY_SYSTEM_INSTRUCTION,
        default_temperature=settings.DEFAULT_TEMPERATURE,
        default_max_tokens=settings.DEFAULT_MAX_TOKENS,
    )
    result = await orchestrator.complete(request)
    return JSONResponse(content=build_translate_response(result, legacy))


@router.get("/health", response_model=HealthResponse)
async def health(
    providers: tuple[ProviderDescriptor, ...] = Depends(get_providers),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Report configured providers without touching the network."""
    statuses = [
        ProviderStatus(name=p.name, model=p.model_id, enabled=p.enabled) for p in providers
    ]
    return HealthResponse(
        status="ok" if any(s.enabled for s in statuses) else "degraded",
        version=settings.APP_VERSION,
        policy=settings.FALLBACK_POLICY.value,
        providers=statuses,
    )
