"""
FastAPI dependency injection for the gateway.

Settings and provider descriptors are built once per process. The
orchestrator is built per request so no request shares engine state with
another.
"""

from functools import lru_cache

from fastapi import Depends

from fallback_gateway.config import Settings, settings
from fallback_gateway.gateway.executor import AttemptExecutor
from fallback_gateway.gateway.metadata import RetryPolicy
from fallback_gateway.gateway.orchestrator import FallbackOrchestrator
from fallback_gateway.providers.descriptor import ProviderDescriptor
from fallback_gateway.providers.registry import build_providers


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def get_providers() -> tuple[ProviderDescriptor, ...]:
    """
    Get provider descriptors, built once from settings.

    Raises:
        ConfigurationError: PROVIDER_ORDER is empty or names unknown providers
    """
    return build_providers(get_settings())


def get_retry_policy(settings: Settings = Depends(get_settings)) -> RetryPolicy:
    return RetryPolicy(
        max_retries=settings.MAX_RETRIES,
        timeout_ms=settings.REQUEST_TIMEOUT_MS,
        backoff_base_ms=settings.RETRY_BACKOFF_BASE_MS,
        backoff_cap_ms=settings.RETRY_BACKOFF_CAP_MS,
    )


def get_executor() -> AttemptExecutor:
    """Attempt executor using the real network transport."""
    return AttemptExecutor()


def get_orchestrator(
    providers: tuple[ProviderDescriptor, ...] = Depends(get_providers),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
    executor: AttemptExecutor = Depends(get_executor),
    settings: Settings = Depends(get_settings),
) -> FallbackOrchestrator:
    """
    Create a fresh orchestrator for this request.

    Not cached: the orchestrator is lightweight and all heavy or shared
    pieces (settings, descriptors) are singletons.
    """
    return FallbackOrchestrator(
        providers=providers,
        policy=settings.FALLBACK_POLICY,
        retry_policy=retry_policy,
        executor=executor,
    )
