"""
Builds provider descriptors from application settings.

Called once at process start by the HTTP boundary. Adding a provider means
adding a factory here; the orchestrator does not change.
"""

from typing import Callable

import structlog

from fallback_gateway.config import Settings
from fallback_gateway.gateway.exceptions import ConfigurationError
from fallback_gateway.providers.descriptor import ProviderDescriptor
from fallback_gateway.providers.gemini import (
    extract_candidate_text,
    generate_content_endpoint,
    shape_generate_content,
)
from fallback_gateway.providers.openai_compat import (
    chat_completions_endpoint,
    extract_chat_content,
    shape_chat_completions,
)


logger = structlog.get_logger(__name__)


def _groq(settings: Settings) -> ProviderDescriptor:
    return ProviderDescriptor(
        name="Groq",
        endpoint=chat_completions_endpoint(settings.GROQ_BASE_URL),
        credential=settings.GROQ_API_KEY,
        model_id=settings.GROQ_MODEL,
        request_shaper=shape_chat_completions,
        response_extractor=extract_chat_content,
    )


def _cerebras(settings: Settings) -> ProviderDescriptor:
    return ProviderDescriptor(
        name="Cerebras",
        endpoint=chat_completions_endpoint(settings.CEREBRAS_BASE_URL),
        credential=settings.CEREBRAS_API_KEY,
        model_id=settings.CEREBRAS_MODEL,
        request_shaper=shape_chat_completions,
        response_extractor=extract_chat_content,
    )


def _gemini(settings: Settings) -> ProviderDescriptor:
    return ProviderDescriptor(
        name="Gemini",
        endpoint=generate_content_endpoint(settings.GEMINI_BASE_URL),
        credential=settings.GEMINI_API_KEY,
        model_id=settings.GEMINI_MODEL,
        request_shaper=shape_generate_content,
        response_extractor=extract_candidate_text,
    )


PROVIDER_FACTORIES: dict[str, Callable[[Settings], ProviderDescriptor]] = {
    "groq": _groq,
    "cerebras": _cerebras,
    "gemini": _gemini,
}


def build_providers(settings: Settings) -> tuple[ProviderDescriptor, ...]:
    """
    Build descriptors in PROVIDER_ORDER priority.

    Raises:
        ConfigurationError: Unknown or duplicate provider name, or empty order
    """
    order = [name.strip().lower() for name in settings.PROVIDER_ORDER if name.strip()]
    if not order:
        raise ConfigurationError("PROVIDER_ORDER is empty")

    unknown = [name for name in order if name not in PROVIDER_FACTORIES]
    if unknown:
        raise ConfigurationError(
            f"Unknown provider(s) in PROVIDER_ORDER: {', '.join(unknown)}",
            details={"known": sorted(PROVIDER_FACTORIES)},
        )
    if len(set(order)) != len(order):
        raise ConfigurationError("PROVIDER_ORDER lists a provider more than once")

    providers = tuple(PROVIDER_FACTORIES[name](settings) for name in order)

    logger.info(
        "Provider chain built",
        providers=[p.name for p in providers],
        enabled=[p.name for p in providers if p.enabled],
        policy=settings.FALLBACK_POLICY.value,
    )
    return providers
