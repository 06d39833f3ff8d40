"""
FastAPI exception handlers for structured error responses.

Maps gateway failures to HTTP status codes. Every error body carries a
human-readable `error` string (what existing clients display) plus the
machine-readable `kind`.
"""

from datetime import datetime, timezone

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from fallback_gateway.api.models import InvalidRequestError
from fallback_gateway.gateway.exceptions import (
    AllProvidersExhaustedError,
    ConfigurationError,
    GatewayError,
    ProviderError,
    ProviderTimeoutError,
    StreamingNotSupportedError,
)

logger = structlog.get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def status_for(exc: GatewayError) -> int:
    """HTTP status for a gateway failure."""
    if isinstance(exc, (InvalidRequestError, StreamingNotSupportedError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, ConfigurationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, AllProvidersExhaustedError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(exc, ProviderTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    if isinstance(exc, ProviderError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """
    Handle every structured gateway failure.

    Configuration problems are reported as server configuration errors;
    aggregate failures list each provider's reason.
    """
    status_code = status_for(exc)
    message = exc.message
    if isinstance(exc, ConfigurationError) and not isinstance(exc, StreamingNotSupportedError):
        message = f"Server configuration error: {exc.message}"

    content = {
        "error": message,
        "kind": exc.kind,
        "timestamp": _timestamp(),
    }
    if isinstance(exc, AllProvidersExhaustedError):
        content["failures"] = exc.summary()

    log = logger.error if status_code >= 500 else logger.warning
    log("Gateway error", kind=exc.kind, status_code=status_code)

    return JSONResponse(status_code=status_code, content=content)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle malformed request bodies (bad JSON, wrong types).

    Maps to 400 Bad Request (client error).
    """
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]
    logger.warning("Invalid request body", error_count=len(errors))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid JSON in request body.",
            "kind": "invalid_request",
            "details": errors,
            "timestamp": _timestamp(),
        },
    )


async def pydantic_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handle out-of-range generation parameters (e.g. max_tokens <= 0).

    Maps to 400 Bad Request (client error).
    """
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]
    logger.warning("Invalid completion parameters", error_count=len(errors))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid completion parameters.",
            "kind": "invalid_request",
            "details": errors,
            "timestamp": _timestamp(),
        },
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.exception("Unhandled error in translate API", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "kind": "internal_error",
            "timestamp": _timestamp(),
        },
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    GatewayError: gateway_error_handler,
    RequestValidationError: request_validation_error_handler,
    PydanticValidationError: pydantic_validation_error_handler,
    Exception: generic_error_handler,
}
