"""Request tracing for the HTTP boundary."""

import time
import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def _request_id(request: Request) -> str:
    inbound = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if inbound and len(inbound) <= MAX_REQUEST_ID_LENGTH:
        return inbound
    return uuid.uuid4().hex


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line emitted while serving a request.

    A caller-supplied X-Request-ID is kept so gateway logs can be joined with
    the caller's; otherwise one is generated. The id is echoed back. Only
    method, path, status and duration are logged, since request bodies carry
    user prompts.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = _request_id(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "Request served", status_code=response.status_code, duration_ms=_since(start)
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            logger.exception("Request crashed", duration_ms=_since(start))
            raise
        finally:
            structlog.contextvars.clear_contextvars()


def _since(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
