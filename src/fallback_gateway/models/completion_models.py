"""
Request/result models exchanged between the HTTP boundary and the engine.

These models are provider-neutral. Each provider family turns a
CompletionRequest into its own wire payload (see fallback_gateway.providers),
and the normalizer folds whatever came back into a CompletionResult.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from fallback_gateway.models.enums import Role


class ChatMessage(BaseModel):
    """One conversation turn in OpenAI chat format."""
    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="Turn author: system, user or assistant")
    content: Union[str, list[dict[str, Any]]] = Field(
        ...,
        description="Plain text, or a list of OpenAI content parts"
    )

    def text(self) -> str:
        """Text of the turn with non-text content parts dropped."""
        if isinstance(self.content, str):
            return self.content
        return "".join(
            part.get("text", "")
            for part in self.content
            if part.get("type", "text") == "text"
        )


class CompletionRequest(BaseModel):
    """
    Provider-neutral completion request.

    Read-only input to every request shaper; the engine never mutates it.
    Legacy single-prompt requests are expanded into two turns by the
    boundary layer before they reach this model.
    """
    model_config = ConfigDict(frozen=True)

    messages: tuple[ChatMessage, ...] = Field(..., description="Ordered chat turns, forwarded as given")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=1000, gt=0, description="Maximum tokens to generate")
    stream: bool = Field(default=False, description="Streaming is refused by the engine")
    model: Optional[str] = Field(
        default=None,
        description="Model sent to every provider in place of its default"
    )

    @classmethod
    def from_prompt(
        cls,
        prompt: str,
        system_instruction: str,
        **kwargs: Any,
    ) -> "CompletionRequest":
        """Build the canonical system + user pair from a single prompt."""
        return cls(
            messages=(
                ChatMessage(role=Role.SYSTEM, content=system_instruction),
                ChatMessage(role=Role.USER, content=prompt),
            ),
            **kwargs,
        )


class CompletionResult(BaseModel):
    """
    Normalized success envelope returned to the caller.

    Carries the provider payload verbatim so OpenAI-compatible callers can
    still read `choices`, `usage`, etc. Field aliases such as `sanskritText`
    belong to the boundary layer and are not added here.
    """
    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, description="Extracted, trimmed completion text")
    provider_name: str = Field(..., description="Provider that produced the answer")
    model: str = Field(..., description="Model the request was sent with")
    raw_payload: dict[str, Any] = Field(default_factory=dict, description="Provider payload, untouched")
    latency_ms: int = Field(..., ge=0, description="Time spent on the winning provider")
    attempts: int = Field(default=1, ge=1, description="Attempts made on the winning provider")
    providers_tried: list[str] = Field(
        default_factory=list,
        description="Providers attempted before (and including) the winner"
    )
