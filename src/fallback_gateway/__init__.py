"""
LLM Fallback Gateway.

Sends chat/translation completions to a primary upstream provider and falls
back to secondary providers when it is exhausted:
- Per-attempt time budget
- Capped exponential backoff on retryable failures
- Sequential or racing fallback across an ordered provider list
- One normalized result shape regardless of which provider answered

Architecture: FastAPI boundary + httpx providers + asyncio orchestration engine
"""

__version__ = "0.1.0"
