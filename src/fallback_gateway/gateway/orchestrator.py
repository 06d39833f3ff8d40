"""
Fallback orchestrator: one engine for every provider topology.

The orchestrator owns an ordered list of (ProviderDescriptor, RetryPolicy)
routes and a FallbackPolicy:

1. **SEQUENTIAL**: Run each provider's retry controller to completion, in
   priority order, and return the first usable answer.
2. **RACE**: Start every provider's retry controller at once, wait for all
   of them to settle, then keep the highest-priority usable answer. A slower
   primary still beats a faster secondary.

Providers without a credential are skipped. A caller-supplied model replaces
every provider's default model. When nothing succeeds, a chain
of more than one configured provider raises AllProvidersExhaustedError
naming every attempted provider; a single-provider deployment re-raises
that provider's own failure.

The orchestrator is cheap to build and is constructed per request; it holds
no state between calls.

Usage:
    orchestrator = FallbackOrchestrator(providers, FallbackPolicy.SEQUENTIAL, RetryPolicy())
    result = await orchestrator.complete(request)
"""

import asyncio
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import structlog

from fallback_gateway.gateway.exceptions import (
    AllProvidersExhaustedError,
    ConfigurationError,
    EmptyResponseError,
    MissingCredentialError,
    ProviderError,
    StreamingNotSupportedError,
)
from fallback_gateway.gateway.executor import AttemptExecutor
from fallback_gateway.gateway.metadata import ProviderRun, RetryPolicy
from fallback_gateway.gateway.normalizer import normalize_response
from fallback_gateway.gateway.retry import RetryController, Sleep
from fallback_gateway.models.completion_models import CompletionRequest, CompletionResult
from fallback_gateway.models.enums import FallbackPolicy
from fallback_gateway.monitoring.metrics import completions_total, fallbacks_total
from fallback_gateway.providers.descriptor import ProviderDescriptor


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProviderRoute:
    """One provider paired with the retry policy it runs under."""

    descriptor: ProviderDescriptor
    policy: RetryPolicy


class FallbackOrchestrator:
    """
    Sequences or races providers and normalizes the winning answer.

    Attributes:
        routes: Configured routes in priority order (disabled ones included)
        policy: SEQUENTIAL or RACE
        executor: Attempt executor shared by every retry controller
    """

    def __init__(
        self,
        providers: Sequence[ProviderDescriptor],
        policy: FallbackPolicy = FallbackPolicy.SEQUENTIAL,
        retry_policy: Optional[RetryPolicy] = None,
        retry_overrides: Optional[Mapping[str, RetryPolicy]] = None,
        executor: Optional[AttemptExecutor] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Args:
            providers: Descriptors in priority order (first is primary)
            policy: Fallback policy
            retry_policy: Default retry policy for every provider
            retry_overrides: Provider name -> policy replacing the default
            executor: Attempt executor (a default one is created if omitted)
            sleep: Backoff sleep, injectable for tests
        """
        if not providers:
            raise ConfigurationError("No providers configured")

        default_policy = retry_policy or RetryPolicy()
        overrides = retry_overrides or {}
        self.routes: tuple[ProviderRoute, ...] = tuple(
            ProviderRoute(descriptor, overrides.get(descriptor.name, default_policy))
            for descriptor in providers
        )
        self.policy = FallbackPolicy(policy)
        self.executor = executor or AttemptExecutor()
        self._sleep = sleep

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """
        Run the request through the fallback chain.

        Returns:
            CompletionResult from the highest-priority usable provider

        Raises:
            StreamingNotSupportedError: request.stream is true (no call made)
            MissingCredentialError: No configured provider has a credential
            AllProvidersExhaustedError: Every attempted provider failed (chains)
            ProviderError: The sole configured provider failed
        """
        if request.stream:
            completions_total.labels(policy=self.policy.value, status="rejected").inc()
            raise StreamingNotSupportedError()

        active = [route for route in self.routes if route.descriptor.enabled]
        skipped = [route.descriptor.name for route in self.routes if not route.descriptor.enabled]

        if not active:
            completions_total.labels(policy=self.policy.value, status="rejected").inc()
            raise MissingCredentialError(skipped)

        if skipped:
            logger.info("Skipping providers without credentials", skipped=skipped)

        logger.info(
            "Starting completion",
            policy=self.policy.value,
            providers=[route.descriptor.name for route in active],
            message_count=len(request.messages),
        )

        if self.policy == FallbackPolicy.RACE:
            result, failures = await self._race(active, request)
        else:
            result, failures = await self._sequential(active, request)

        if result is not None:
            completions_total.labels(policy=self.policy.value, status="success").inc()
            logger.info(
                "Completion succeeded",
                provider=result.provider_name,
                attempts=result.attempts,
                latency_ms=result.latency_ms,
                providers_tried=result.providers_tried,
            )
            return result

        completions_total.labels(policy=self.policy.value, status="failed").inc()
        logger.error(
            "All providers failed",
            failures={name: error.kind for name, error in failures.items()},
            skipped=skipped,
        )

        if len(self.routes) == 1:
            raise next(iter(failures.values()))
        raise AllProvidersExhaustedError(failures, skipped)

    async def _sequential(
        self,
        active: Sequence[ProviderRoute],
        request: CompletionRequest,
    ) -> tuple[Optional[CompletionResult], dict[str, ProviderError]]:
        failures: dict[str, ProviderError] = {}
        tried: list[str] = []

        for priority, route in enumerate(active):
            run = await self._controller(route).run(request, request.model)
            tried.append(route.descriptor.name)

            outcome = self._settle(route, run, tried)
            if isinstance(outcome, CompletionResult):
                return outcome, failures

            failures[route.descriptor.name] = outcome
            if priority < len(active) - 1:
                fallbacks_total.labels(from_provider=route.descriptor.name).inc()
                logger.warning(
                    "Falling back to next provider",
                    failed_provider=route.descriptor.name,
                    next_provider=active[priority + 1].descriptor.name,
                    kind=outcome.kind,
                )

        return None, failures

    async def _race(
        self,
        active: Sequence[ProviderRoute],
        request: CompletionRequest,
    ) -> tuple[Optional[CompletionResult], dict[str, ProviderError]]:
        # Every controller settles before anything is raised, so no run outlives the request
        runs = await asyncio.gather(
            *(self._controller(route).run(request, request.model) for route in active),
            return_exceptions=True,
        )
        crashed = [run for run in runs if isinstance(run, BaseException)]
        if crashed:
            raise crashed[0]

        tried = [route.descriptor.name for route in active]
        failures: dict[str, ProviderError] = {}

        # gather keeps input order, so the first usable run has top priority
        for route, run in zip(active, runs):
            outcome = self._settle(route, run, tried)
            if isinstance(outcome, CompletionResult):
                return outcome, failures
            failures[route.descriptor.name] = outcome

        return None, failures

    def _settle(
        self,
        route: ProviderRoute,
        run: ProviderRun,
        tried: Sequence[str],
    ) -> CompletionResult | ProviderError:
        """Normalize a successful run, or return the run's terminal error."""
        if not run.succeeded:
            return run.outcome.error
        try:
            return normalize_response(route.descriptor, run.outcome.payload, run, tried)
        except EmptyResponseError as e:
            logger.warning(
                "Provider returned no usable text",
                provider=route.descriptor.name,
                attempts=run.attempts,
            )
            return e

    def _controller(self, route: ProviderRoute) -> RetryController:
        return RetryController(route.descriptor, self.executor, route.policy, sleep=self._sleep)
