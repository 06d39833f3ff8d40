"""
OpenAI-compatible chat completions family (Groq, Cerebras, OpenAI, ...).

POST <base>/chat/completions with a bearer token:
{
    "model": "...",
    "messages": [{"role": "system", "content": "..."}, ...],
    "temperature": 0.7,
    "max_tokens": 1000,
    "stream": false
}

Response:
{
    "id": "...",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "..."}}],
    "usage": {...}
}
"""

from typing import Any, Optional

from fallback_gateway.models.completion_models import CompletionRequest
from fallback_gateway.providers.descriptor import ProviderDescriptor, ShapedRequest


def chat_completions_endpoint(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/chat/completions"


def shape_chat_completions(
    descriptor: ProviderDescriptor,
    request: CompletionRequest,
    model: str,
) -> ShapedRequest:
    """Shape a request for an OpenAI-compatible endpoint."""
    messages = [message.model_dump(mode="json") for message in request.messages]
    return ShapedRequest(
        url=descriptor.url_for(model),
        json={
            "model": model,
            "messages": messages,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "stream": False,
        },
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {descriptor.credential}",
        },
    )


def extract_chat_content(payload: dict[str, Any]) -> Optional[str]:
    """Return choices[0].message.content, or None when the shape is off."""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None
