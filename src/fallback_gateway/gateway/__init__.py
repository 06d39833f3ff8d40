"""
Orchestration engine: attempts, retries, fallback and normalization.

Main Components:
    - FallbackOrchestrator: Sequential or racing fallback over providers
    - RetryController: Capped exponential backoff around one provider
    - AttemptExecutor: One bounded-time HTTP call, classified
    - normalize_response: Provider payload -> CompletionResult
    - RetryPolicy / ProviderRun: Retry configuration and audit record

Usage:
    >>> from fallback_gateway.gateway import FallbackOrchestrator, RetryPolicy
    >>> orchestrator = FallbackOrchestrator(providers, retry_policy=RetryPolicy(max_retries=2))
    >>> result = await orchestrator.complete(request)
"""

from fallback_gateway.gateway.executor import AttemptExecutor
from fallback_gateway.gateway.exceptions import (
    AllProvidersExhaustedError,
    ClientError,
    ConfigurationError,
    EmptyResponseError,
    GatewayError,
    MalformedResponseError,
    MissingCredentialError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitedError,
    ServerError,
    StreamingNotSupportedError,
    UpstreamConnectionError,
    UpstreamProtocolError,
)
from fallback_gateway.gateway.metadata import ProviderRun, RetryPolicy
from fallback_gateway.gateway.normalizer import normalize_response
from fallback_gateway.gateway.orchestrator import FallbackOrchestrator, ProviderRoute
from fallback_gateway.gateway.outcome import AttemptFailure, AttemptOutcome, AttemptSuccess
from fallback_gateway.gateway.retry import RetryController, backoff_delay_ms

__all__ = [
    "FallbackOrchestrator",
    "ProviderRoute",
    "RetryController",
    "RetryPolicy",
    "ProviderRun",
    "AttemptExecutor",
    "AttemptOutcome",
    "AttemptSuccess",
    "AttemptFailure",
    "normalize_response",
    "backoff_delay_ms",
    "GatewayError",
    "ProviderError",
    "ProviderTimeoutError",
    "RateLimitedError",
    "ServerError",
    "UpstreamConnectionError",
    "UpstreamProtocolError",
    "ClientError",
    "MalformedResponseError",
    "EmptyResponseError",
    "ConfigurationError",
    "MissingCredentialError",
    "StreamingNotSupportedError",
    "AllProvidersExhaustedError",
]
