"""
Pydantic data models for the LLM Fallback Gateway.

Includes:
- Enums (Role, FallbackPolicy, Classification)
- Completion models (ChatMessage, CompletionRequest, CompletionResult)
"""

from fallback_gateway.models.enums import Classification, FallbackPolicy, Role
from fallback_gateway.models.completion_models import (
    ChatMessage,
    CompletionRequest,
    CompletionResult,
)

__all__ = [
    # Enums
    "Role",
    "FallbackPolicy",
    "Classification",
    # Completion models
    "ChatMessage",
    "CompletionRequest",
    "CompletionResult",
]
