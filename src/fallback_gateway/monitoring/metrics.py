"""Custom Prometheus metrics for the LLM Fallback Gateway.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- provider_attempts_total (rising timeout / server_error share on the primary)
- fallbacks_total (primary provider degraded)
- completions_total{status="failed"} (every provider exhausted)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

provider_attempts_total = Counter(
    "provider_attempts_total",
    "Total upstream attempts by provider and outcome",
    ["provider", "outcome"],
)
"""
Upstream attempts counter.

Labels:
- provider: Groq, Cerebras, Gemini, ...
- outcome: success, or the failure kind (timeout, rate_limited, server_error,
  connection_error, client_error, malformed_response, protocol_error)
"""

provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Upstream attempt latency in seconds",
    ["provider", "success"],
    buckets=[0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0, 30.0],
)
"""
Per-attempt latency histogram.

Buckets sized around the default 8s attempt budget.

Alert thresholds:
- WARN: p95 > 4s on the primary provider
"""

provider_retries_total = Counter(
    "provider_retries_total",
    "Total retries scheduled after a retryable failure",
    ["provider"],
)

# === Orchestration Metrics ===

fallbacks_total = Counter(
    "fallbacks_total",
    "Times a provider failed terminally and the chain moved on",
    ["from_provider"],
)
"""
Fallback counter.

Labels:
- from_provider: Provider that was abandoned

Alert thresholds:
- WARN: fallback rate > 5% of completions
"""

completions_total = Counter(
    "completions_total",
    "Total orchestrated completions by policy and final status",
    ["policy", "status"],
)
"""
Completion counter.

Labels:
- policy: sequential, race
- status: success, failed, rejected (configuration / streaming)
"""
