"""
Retry controller: bounded retries with capped exponential backoff.

Wraps the attempt executor for exactly one provider. Only the executor's
classification decides whether another attempt is made:

    attempt 0 -> retryable failure -> sleep min(base * 2^0, cap) -> attempt 1
    attempt 1 -> retryable failure -> sleep min(base * 2^1, cap) -> attempt 2
    ...
    fatal failure, or attempt index == max_retries -> stop with last failure

With the defaults (base 1000ms, cap 5000ms, max_retries 2) the worst case is
timeout + 1s + timeout + 2s + timeout.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

import structlog

from fallback_gateway.gateway.executor import AttemptExecutor
from fallback_gateway.gateway.metadata import ProviderRun, RetryPolicy
from fallback_gateway.models.completion_models import CompletionRequest
from fallback_gateway.monitoring.metrics import provider_retries_total
from fallback_gateway.providers.descriptor import ProviderDescriptor


logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay_ms(index: int, base_ms: int = 1000, cap_ms: int = 5000) -> int:
    """Delay after the failed attempt with 0-based `index`."""
    return min(base_ms * (2 ** index), cap_ms)


class RetryController:
    """
    Runs one provider up to `policy.max_retries + 1` times.

    Attributes:
        descriptor: Provider this controller owns
        executor: Attempt executor used for each call
        policy: Retry limits and time budget
    """

    def __init__(
        self,
        descriptor: ProviderDescriptor,
        executor: AttemptExecutor,
        policy: RetryPolicy,
        sleep: Sleep = asyncio.sleep,
    ):
        self.descriptor = descriptor
        self.executor = executor
        self.policy = policy
        self._sleep = sleep

    async def run(self, request: CompletionRequest, model: Optional[str] = None) -> ProviderRun:
        """
        Execute the request against this provider with retries.

        Returns:
            ProviderRun whose outcome is the first success or the last failure
        """
        model = model or self.descriptor.model_id
        shaped = self.descriptor.shape(request, model)
        start = time.perf_counter()
        delays: list[int] = []
        index = 0

        while True:
            outcome = await self.executor.execute(self.descriptor, shaped, self.policy.timeout_ms)
            if outcome.ok:
                break

            if not outcome.error.retryable or index >= self.policy.max_retries:
                break

            delay_ms = backoff_delay_ms(
                index, self.policy.backoff_base_ms, self.policy.backoff_cap_ms
            )
            logger.warning(
                "Retrying provider",
                provider=self.descriptor.name,
                attempt=index + 1,
                max_attempts=self.policy.max_attempts,
                kind=outcome.error.kind,
                backoff_ms=delay_ms,
            )
            provider_retries_total.labels(provider=self.descriptor.name).inc()
            delays.append(delay_ms)
            await self._sleep(delay_ms / 1000.0)
            index += 1

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        attempts = index + 1

        if not outcome.ok:
            logger.error(
                "Provider failed",
                provider=self.descriptor.name,
                attempts=attempts,
                elapsed_ms=elapsed_ms,
                kind=outcome.error.kind,
            )

        return ProviderRun(
            provider=self.descriptor.name,
            model=model,
            outcome=outcome,
            attempts=attempts,
            backoff_ms=delays,
            elapsed_ms=elapsed_ms,
        )
