"""
Attempt outcomes.

One network call to one provider ends in exactly one of these. The executor
never raises for upstream problems; it returns an AttemptFailure whose error
carries the retryable/fatal classification.
"""

from dataclasses import dataclass
from typing import Any, Union

from fallback_gateway.gateway.exceptions import ProviderError
from fallback_gateway.models.enums import Classification


@dataclass(frozen=True)
class AttemptSuccess:
    """2xx with a JSON object body."""

    payload: dict[str, Any]
    latency_ms: int

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class AttemptFailure:
    """Failed attempt with its classified error."""

    error: ProviderError
    latency_ms: int = 0

    @property
    def ok(self) -> bool:
        return False

    @property
    def classification(self) -> Classification:
        return self.error.classification

    @property
    def message(self) -> str:
        return self.error.message


AttemptOutcome = Union[AttemptSuccess, AttemptFailure]
