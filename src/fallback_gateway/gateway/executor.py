"""
Attempt executor: one bounded-time call to one provider.

Uses httpx AsyncClient for the HTTP call. Each attempt:
- Opens its own client inside an `asyncio.timeout` scope, so the in-flight
  call is cancelled when the budget elapses and the connection is released
  on every exit path
- Classifies the outcome (retryable vs fatal) in one place
- Logs provider, model and latency or failure kind, never message bodies,
  credentials or full URLs (Gemini keys travel in the query string)
"""

import asyncio
import time
from typing import Optional

import httpx
import structlog

from fallback_gateway.gateway.exceptions import (
    ClientError,
    MalformedResponseError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitedError,
    ServerError,
    UpstreamConnectionError,
    UpstreamProtocolError,
)
from fallback_gateway.gateway.outcome import AttemptFailure, AttemptOutcome, AttemptSuccess
from fallback_gateway.monitoring.metrics import provider_attempts_total, provider_latency_seconds
from fallback_gateway.providers.descriptor import ProviderDescriptor, ShapedRequest


logger = structlog.get_logger(__name__)

ERROR_BODY_LIMIT = 500  # chars of upstream error text kept in messages
NO_BODY_PLACEHOLDER = "No response body"


def classify_status(provider: str, status_code: int, body: str) -> ProviderError:
    """
    Map a non-2xx status to the failure taxonomy.

    429 and 5xx are retryable; every other status is fatal.
    """
    message = f"{provider} error {status_code}: {body}"
    if status_code == 429:
        return RateLimitedError(provider, message, status_code=status_code)
    if status_code >= 500:
        return ServerError(provider, message, status_code=status_code)
    return ClientError(provider, message, status_code=status_code)


def _read_error_body(response: httpx.Response) -> str:
    try:
        text = response.text
    except (UnicodeDecodeError, httpx.HTTPError):
        return NO_BODY_PLACEHOLDER
    text = text.strip()
    if not text:
        return NO_BODY_PLACEHOLDER
    return text[:ERROR_BODY_LIMIT]


class AttemptExecutor:
    """
    Performs single provider attempts.

    Holds no per-request state, so one instance may serve concurrent
    attempts. `transport` lets tests plug in an httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    async def execute(
        self,
        descriptor: ProviderDescriptor,
        shaped: ShapedRequest,
        timeout_ms: int,
    ) -> AttemptOutcome:
        """
        POST the shaped request and classify the result.

        Args:
            descriptor: Provider being called
            shaped: Wire request built by the descriptor's shaper
            timeout_ms: Budget for the whole attempt (connect + response)

        Returns:
            AttemptSuccess with the JSON payload, or AttemptFailure
        """
        model = shaped.json.get("model", descriptor.model_id)
        start = time.perf_counter()
        timeout_s = timeout_ms / 1000.0

        try:
            async with asyncio.timeout(timeout_s):
                async with httpx.AsyncClient(
                    transport=self._transport,
                    timeout=httpx.Timeout(timeout_s),
                ) as client:
                    response = await client.post(
                        shaped.url,
                        json=shaped.json,
                        headers=shaped.headers,
                        params=shaped.params or None,
                    )
        except (TimeoutError, httpx.TimeoutException):
            return self._fail(
                descriptor,
                model,
                start,
                ProviderTimeoutError(
                    descriptor.name,
                    f"{descriptor.name} request timed out after {timeout_ms}ms",
                    details={"timeout_ms": timeout_ms},
                ),
            )
        except httpx.TransportError as e:
            return self._fail(
                descriptor,
                model,
                start,
                UpstreamConnectionError(
                    descriptor.name,
                    f"{descriptor.name} network error: {type(e).__name__}",
                    details={"error_type": type(e).__name__},
                ),
            )
        except httpx.DecodingError as e:
            return self._fail(
                descriptor,
                model,
                start,
                MalformedResponseError(
                    descriptor.name,
                    f"{descriptor.name} returned an undecodable body",
                    details={"error_type": type(e).__name__},
                ),
            )
        except httpx.RequestError as e:
            # Redirect loops and other non-transport request failures are fatal
            return self._fail(
                descriptor,
                model,
                start,
                UpstreamProtocolError(
                    descriptor.name,
                    f"{descriptor.name} request failed: {type(e).__name__}",
                    details={"error_type": type(e).__name__},
                ),
            )

        if not response.is_success:
            error = classify_status(descriptor.name, response.status_code, _read_error_body(response))
            return self._fail(descriptor, model, start, error)

        try:
            payload = response.json()
        except ValueError as e:
            return self._fail(
                descriptor,
                model,
                start,
                MalformedResponseError(
                    descriptor.name,
                    f"{descriptor.name} returned a non-JSON body",
                    status_code=response.status_code,
                    details={"parse_error": str(e)},
                ),
            )
        if not isinstance(payload, dict):
            return self._fail(
                descriptor,
                model,
                start,
                MalformedResponseError(
                    descriptor.name,
                    f"{descriptor.name} returned JSON that is not an object",
                    status_code=response.status_code,
                ),
            )

        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "Provider attempt succeeded",
            provider=descriptor.name,
            model=model,
            latency_ms=latency_ms,
        )
        provider_attempts_total.labels(provider=descriptor.name, outcome="success").inc()
        provider_latency_seconds.labels(provider=descriptor.name, success="true").observe(
            latency_ms / 1000.0
        )
        return AttemptSuccess(payload=payload, latency_ms=latency_ms)

    def _fail(
        self,
        descriptor: ProviderDescriptor,
        model: str,
        start: float,
        error: ProviderError,
    ) -> AttemptFailure:
        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.warning(
            "Provider attempt failed",
            provider=descriptor.name,
            model=model,
            latency_ms=latency_ms,
            kind=error.kind,
            status_code=error.status_code,
            retryable=error.retryable,
        )
        provider_attempts_total.labels(provider=descriptor.name, outcome=error.kind).inc()
        provider_latency_seconds.labels(provider=descriptor.name, success="false").observe(
            latency_ms / 1000.0
        )
        return AttemptFailure(error=error, latency_ms=latency_ms)
