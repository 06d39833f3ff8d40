"""Shared test fixtures and configuration for all tests.

Upstream providers are simulated with the ScriptedUpstream in
fixtures/upstream.py.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from fallback_gateway.config import Settings
from fallback_gateway.models.completion_models import CompletionRequest
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
from fixtures.upstream import ScriptedUpstream


@pytest.fixture
def upstream() -> ScriptedUpstream:
    """Fresh scripted upstream per test."""
    return ScriptedUpstream()


@pytest.fixture
def make_provider():
    """Factory fixture for OpenAI-compatible descriptors on a fake host.

    Usage:
        def test_something(make_provider):
            primary = make_provider("Primary", host="primary.test")
    """
    def _create(
        name: str = "Primary",
        host: str = "primary.test",
        credential: Optional[str] = "test-key",
        model_id: str = "test-model",
    ) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=name,
            endpoint=chat_completions_endpoint(f"https://{host}/v1"),
            credential=credential,
            model_id=model_id,
            request_shaper=shape_chat_completions,
            response_extractor=extract_chat_content,
        )

    return _create


@pytest.fixture
def gemini_provider() -> ProviderDescriptor:
    """Gemini-family descriptor on a fake host."""
    return ProviderDescriptor(
        name="Gemini",
        endpoint=generate_content_endpoint("https://gemini.test/v1beta"),
        credential="gemini-key",
        model_id="gemini-2.0-flash",
        request_shaper=shape_generate_content,
        response_extractor=extract_candidate_text,
    )


@pytest.fixture
def completion_request() -> CompletionRequest:
    """Canonical two-turn request built from the prompt "hello"."""
    return CompletionRequest.from_prompt("hello", "Translate into Sanskrit.")


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with fake credentials and hosts.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.MAX_RETRIES = 0
    """
    return Settings(
        APP_NAME="LLM Fallback Gateway (Test)",
        ENVIRONMENT="development",
        LOG_LEVEL="DEBUG",
        GROQ_API_KEY="groq-test-key",
        GROQ_BASE_URL="https://groq.test/openai/v1",
        GROQ_MODEL="groq-model",
        CEREBRAS_API_KEY="cerebras-test-key",
        CEREBRAS_BASE_URL="https://cerebras.test/v1",
        CEREBRAS_MODEL="cerebras-model",
        GEMINI_API_KEY=None,
        GEMINI_BASE_URL="https://gemini.test/v1beta",
        PROVIDER_ORDER=["groq", "cerebras"],
        REQUEST_TIMEOUT_MS=1000,
        MAX_RETRIES=2,
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def chat_completion_payload(fixtures_dir: Path) -> Dict[str, Any]:
    """Load the OpenAI-compatible payload fixture."""
    with open(fixtures_dir / "chat_completion.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def generate_content_payload(fixtures_dir: Path) -> Dict[str, Any]:
    """Load the Gemini payload fixture."""
    with open(fixtures_dir / "generate_content.json", encoding="utf-8") as f:
        return json.load(f)
