"""
Provider descriptor: the immutable identity of one upstream.

A descriptor bundles where to send a request, which credential and model to
use, and the two pure functions that make a provider family different from
another: how a generic request becomes a wire payload, and how text is pulled
back out of the provider's answer. The orchestrator never branches on
provider names or model prefixes, only on what the descriptor provides.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from fallback_gateway.models.completion_models import CompletionRequest


@dataclass(frozen=True)
class ShapedRequest:
    """One provider-specific HTTP request, ready to POST."""

    url: str
    json: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict, repr=False)  # may carry a key


RequestShaper = Callable[["ProviderDescriptor", CompletionRequest, str], ShapedRequest]
ResponseExtractor = Callable[[dict[str, Any]], Optional[str]]


@dataclass(frozen=True)
class ProviderDescriptor:
    """
    Configuration of one upstream provider.

    Attributes:
        name: Display name used in logs, metrics and the result envelope
        endpoint: URL template; `{model}` is substituted when present
        credential: Opaque secret. Empty or missing disables the provider
        model_id: Default model for this provider
        request_shaper: (descriptor, request, model) -> ShapedRequest
        response_extractor: provider payload -> text, or None when absent
    """

    name: str
    endpoint: str
    credential: Optional[str] = field(repr=False)
    model_id: str
    request_shaper: RequestShaper = field(repr=False, compare=False)
    response_extractor: ResponseExtractor = field(repr=False, compare=False)

    @property
    def enabled(self) -> bool:
        return bool(self.credential and self.credential.strip())

    def url_for(self, model: str) -> str:
        return self.endpoint.format(model=model)

    def shape(self, request: CompletionRequest, model: Optional[str] = None) -> ShapedRequest:
        """Build this provider's wire request for `model` (defaults to model_id)."""
        return self.request_shaper(self, request, model or self.model_id)

    def extract(self, payload: dict[str, Any]) -> Optional[str]:
        return self.response_extractor(payload)
