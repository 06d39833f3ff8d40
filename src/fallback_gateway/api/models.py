"""
API-specific request and response models for FastAPI endpoints.

The translate endpoint accepts both the legacy `{prompt}` shape and the
OpenAI-style `{messages}` shape, and answers with the provider payload plus
the alias fields older clients read (`text`, `response`, `content`,
`sanskritText`).
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from fallback_gateway.gateway.exceptions import GatewayError
from fallback_gateway.models.completion_models import (
    ChatMessage,
    CompletionRequest,
    CompletionResult,
)


class InvalidRequestError(GatewayError):
    """Body has neither a prompt string nor a messages array."""
    kind = "invalid_request"

    def __init__(self):
        super().__init__(
            "Invalid request format. Provide either 'prompt' (string) or 'messages' (array)."
        )


class TranslateRequest(BaseModel):
    """Inbound body of POST /api/translate."""

    prompt: Optional[str] = Field(default=None, description="Legacy single-prompt input")
    messages: Optional[list[ChatMessage]] = Field(default=None, description="OpenAI-style chat turns")
    model: Optional[str] = Field(default=None, description="Model sent to every provider in place of its default")
    temperature: Optional[float] = Field(default=None, description="Sampling temperature")
    max_tokens: Optional[int] = Field(default=None, description="Maximum tokens to generate")
    stream: Optional[bool] = Field(default=None, description="Must be false or omitted")

    def to_completion_request(
        self,
        system_instruction: str,
        default_temperature: float = 0.7,
        default_max_tokens: int = 1000,
    ) -> tuple[CompletionRequest, bool]:
        """
        Convert to the engine's request model.

        A non-empty `prompt` wins over `messages` and is wrapped with the
        legacy system instruction.

        Returns:
            Tuple of (completion request, whether the legacy prompt path was used)

        Raises:
            InvalidRequestError: Neither prompt nor messages given
            pydantic.ValidationError: Values out of range (e.g. max_tokens <= 0)
        """
        options: dict[str, Any] = {
            "temperature": default_temperature if self.temperature is None else self.temperature,
            "max_tokens": default_max_tokens if self.max_tokens is None else self.max_tokens,
            "stream": self.stream is True,
            "model": self.model or None,
        }

        if self.prompt:
            return CompletionRequest.from_prompt(self.prompt, system_instruction, **options), True

        if self.messages is not None:
            return CompletionRequest(messages=tuple(self.messages), **options), False

        raise InvalidRequestError()


def build_translate_response(result: CompletionResult, legacy: bool) -> dict[str, Any]:
    """Provider payload passthrough plus provider tag and text aliases."""
    body = dict(result.raw_payload)
    body["provider"] = result.provider_name
    body["text"] = result.text
    body["response"] = result.text
    body["content"] = result.text
    if legacy:
        body["sanskritText"] = result.text
    return body


class ProviderStatus(BaseModel):
    """Public view of one configured provider (no credential)."""

    name: str
    model: str
    enabled: bool


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="ok when at least one provider has a credential, degraded otherwise",
        examples=["ok", "degraded"]
    )
    version: str
    policy: str
    providers: list[ProviderStatus] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
