"""
Retry policy and per-provider run records.

RetryPolicy is configuration; ProviderRun is the audit record of what the
retry controller did for one provider during one request.
"""

from dataclasses import dataclass, field

from fallback_gateway.gateway.outcome import AttemptOutcome


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry settings for one provider.

    Attributes:
        max_retries: Retries after the first attempt (0 = single attempt)
        timeout_ms: Time budget of each individual attempt
        backoff_base_ms: Delay before the first retry
        backoff_cap_ms: Ceiling on any single delay
    """

    max_retries: int = 2
    timeout_ms: int = 8000
    backoff_base_ms: int = 1000
    backoff_cap_ms: int = 5000

    def __post_init__(self) -> None:
        """Validate policy invariants."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be > 0")

        if self.backoff_base_ms < 0 or self.backoff_cap_ms < 0:
            raise ValueError("backoff delays must be >= 0")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


@dataclass(frozen=True)
class ProviderRun:
    """
    What happened to one provider during one request.

    Attributes:
        provider: Provider name
        model: Model the requests were sent with
        outcome: Final outcome (success, or the last failure)
        attempts: Attempts made (1..max_retries + 1)
        backoff_ms: Delays slept between attempts, in order
        elapsed_ms: Wall time from first attempt to final outcome
    """

    provider: str
    model: str
    outcome: AttemptOutcome
    attempts: int
    backoff_ms: list[int] = field(default_factory=list)
    elapsed_ms: int = 0

    def __post_init__(self) -> None:
        """Validate run invariants."""
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")

        if len(self.backoff_ms) != self.attempts - 1:
            raise ValueError("exactly one backoff delay is recorded per retry")

    @property
    def succeeded(self) -> bool:
        return self.outcome.ok
