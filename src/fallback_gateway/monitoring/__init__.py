"""Monitoring and metrics instrumentation for the LLM Fallback Gateway.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from fallback_gateway.monitoring.metrics import (
    completions_total,
    fallbacks_total,
    provider_attempts_total,
    provider_latency_seconds,
    provider_retries_total,
)

__all__ = [
    "provider_attempts_total",
    "provider_latency_seconds",
    "provider_retries_total",
    "fallbacks_total",
    "completions_total",
]
