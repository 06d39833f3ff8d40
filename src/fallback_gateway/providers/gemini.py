"""
Google Gemini generateContent family.

POST <base>/models/{model}:generateContent?key=<api key>

Authorization travels in the query string, so no Authorization header is
sent. System turns go to `systemInstruction`; assistant turns use the
`model` role.

Response:
{
    "candidates": [{"content": {"parts": [{"text": "..."}], "role": "model"},
                    "finishReason": "STOP"}],
    "usageMetadata": {...}
}
"""

from typing import Any, Optional

from fallback_gateway.models.completion_models import CompletionRequest
from fallback_gateway.models.enums import Role
from fallback_gateway.providers.descriptor import ProviderDescriptor, ShapedRequest


def generate_content_endpoint(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/models/{{model}}:generateContent"


def shape_generate_content(
    descriptor: ProviderDescriptor,
    request: CompletionRequest,
    model: str,
) -> ShapedRequest:
    """Shape a request for the Gemini generateContent endpoint."""
    system_texts: list[str] = []
    contents: list[dict[str, Any]] = []

    for message in request.messages:
        if message.role == Role.SYSTEM:
            system_texts.append(message.text())
            continue
        role = "model" if message.role == Role.ASSISTANT else "user"
        contents.append({"role": role, "parts": [{"text": message.text()}]})

    payload: dict[str, Any] = {
        "contents": contents,
        "generationConfig": {
            "temperature": request.temperature,
            "maxOutputTokens": request.max_tokens,
        },
    }
    if system_texts:
        payload["systemInstruction"] = {"parts": [{"text": "\n\n".join(system_texts)}]}

    return ShapedRequest(
        url=descriptor.url_for(model),
        json=payload,
        headers={"Content-Type": "application/json"},
        params={"key": descriptor.credential or ""},
    )


def extract_candidate_text(payload: dict[str, Any]) -> Optional[str]:
    """Join the text parts of the first candidate."""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        return None
    parts = content.get("parts") or []
    texts = [part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
    return "".join(texts) if texts else None
