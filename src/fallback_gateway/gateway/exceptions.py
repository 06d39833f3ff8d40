"""
Failure taxonomy for the orchestration engine.

Every failure carries a stable `kind` string (used in logs, metrics and HTTP
error bodies) and a `retryable` flag. The retry controller reads only that
flag; the orchestrator treats every terminal provider failure the same way.
"""

from typing import Any, Mapping, Optional, Sequence

from fallback_gateway.models.enums import Classification


class GatewayError(Exception):
    """
    Base exception for all gateway errors.

    Catching GatewayError covers every structured failure the engine
    can surface to the boundary layer.
    """
    kind = "gateway_error"
    retryable = False

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def classification(self) -> Classification:
        return Classification.RETRYABLE if self.retryable else Classification.FATAL


class ProviderError(GatewayError):
    """A single provider failed one attempt (or its last attempt)."""
    kind = "provider_error"

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.provider = provider
        self.status_code = status_code


class ProviderTimeoutError(ProviderError):
    """The per-attempt time budget elapsed before a response arrived."""
    kind = "timeout"
    retryable = True


class RateLimitedError(ProviderError):
    """Upstream answered HTTP 429."""
    kind = "rate_limited"
    retryable = True


class ServerError(ProviderError):
    """Upstream answered HTTP 5xx."""
    kind = "server_error"
    retryable = True


class UpstreamConnectionError(ProviderError):
    """
    No HTTP response at all: DNS failure, refused or reset connection.

    Retried like a server error since the next attempt may land on a
    healthy node.
    """
    kind = "connection_error"
    retryable = True


class ClientError(ProviderError):
    """Upstream rejected the request (4xx other than 429)."""
    kind = "client_error"


class MalformedResponseError(ProviderError):
    """2xx whose body is not a JSON object. Retrying will not fix it."""
    kind = "malformed_response"


class UpstreamProtocolError(ProviderError):
    """The request failed without a transport fault, e.g. too many redirects."""
    kind = "protocol_error"


class EmptyResponseError(ProviderError):
    """2xx whose payload yields no usable text after trimming."""
    kind = "empty_response"


class ConfigurationError(GatewayError):
    """The gateway cannot run the request as configured."""
    kind = "configuration_error"


class MissingCredentialError(ConfigurationError):
    """
    No enabled provider is left to try.

    Raised when the only configured provider (or every configured
    provider) lacks a credential. Distinct from runtime failures.
    """
    kind = "missing_credential"

    def __init__(self, providers: Sequence[str]):
        names = ", ".join(providers)
        super().__init__(
            f"No credential configured for provider(s): {names}",
            details={"providers": list(providers)},
        )
        self.providers = list(providers)


class StreamingNotSupportedError(ConfigurationError):
    """Caller asked for stream=true."""
    kind = "streaming_not_supported"

    def __init__(self):
        super().__init__("Streaming not yet supported. Set stream=false or omit it.")


class AllProvidersExhaustedError(GatewayError):
    """
    Every attempted provider in a fallback chain failed terminally.

    The message names every provider with its last reason so the failure
    can be diagnosed from the response alone.
    """
    kind = "all_providers_exhausted"

    def __init__(
        self,
        failures: Mapping[str, ProviderError],
        skipped: Sequence[str] = (),
    ):
        self.failures = dict(failures)
        self.skipped = list(skipped)
        reasons = ". ".join(f"{name}: {error.message}" for name, error in self.failures.items())
        super().__init__(
            f"All providers failed. {reasons}",
            details={
                "failures": [
                    {"provider": name, "kind": error.kind, "message": error.message}
                    for name, error in self.failures.items()
                ],
                "skipped": self.skipped,
            },
        )

    def summary(self) -> list[dict[str, Any]]:
        """Per-provider reasons in priority order."""
        return self.details["failures"]
