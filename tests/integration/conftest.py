"""Integration test fixtures (FastAPI app wired to scripted upstreams).

The real app, routes, middleware and exception handlers are used; only the
network transport, provider list and backoff schedule are overridden.
"""

import pytest
from fastapi.testclient import TestClient

from fallback_gateway.api.dependencies import (
    get_executor,
    get_providers,
    get_retry_policy,
    get_settings,
)
from fallback_gateway.gateway.metadata import RetryPolicy
from fallback_gateway.main import app
from fallback_gateway.providers.registry import build_providers


@pytest.fixture
def app_settings(test_settings):
    """Settings the app sees; tweak before requesting `client`."""
    return test_settings


@pytest.fixture
def client(app_settings, upstream):
    """TestClient whose providers call the scripted upstream.

    Backoff delays are zero so retry scenarios run instantly.
    """
    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_providers] = lambda: build_providers(app_settings)
    app.dependency_overrides[get_executor] = upstream.executor
    app.dependency_overrides[get_retry_policy] = lambda: RetryPolicy(
        max_retries=app_settings.MAX_RETRIES,
        timeout_ms=app_settings.REQUEST_TIMEOUT_MS,
        backoff_base_ms=0,
        backoff_cap_ms=0,
    )

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
