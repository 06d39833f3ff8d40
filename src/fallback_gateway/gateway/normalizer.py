"""Response normalization: provider payload -> CompletionResult."""

from typing import Any, Sequence

from fallback_gateway.gateway.exceptions import EmptyResponseError
from fallback_gateway.gateway.metadata import ProviderRun
from fallback_gateway.models.completion_models import CompletionResult
from fallback_gateway.providers.descriptor import ProviderDescriptor


def extract_text(descriptor: ProviderDescriptor, payload: dict[str, Any]) -> str:
    """
    Pull trimmed text out of a provider payload.

    Raises:
        EmptyResponseError: Text is absent or blank after trimming. A 2xx
            without usable text is not a success.
    """
    text = descriptor.extract(payload)
    text = text.strip() if text else ""
    if not text:
        raise EmptyResponseError(
            descriptor.name,
            f"{descriptor.name} returned an empty or malformed response",
        )
    return text


def normalize_response(
    descriptor: ProviderDescriptor,
    payload: dict[str, Any],
    run: ProviderRun,
    providers_tried: Sequence[str] = (),
) -> CompletionResult:
    """Fold the winning payload into the uniform result envelope."""
    return CompletionResult(
        text=extract_text(descriptor, payload),
        provider_name=descriptor.name,
        model=run.model,
        raw_payload=payload,
        latency_ms=run.elapsed_ms,
        attempts=run.attempts,
        providers_tried=list(providers_tried) or [descriptor.name],
    )
