"""
opsbot.observability.middleware

HTTP middleware for request-scoped logging context on the public endpoint.

Responsibilities:
- Generate/propagate request IDs.
- Bind request metadata into structlog contextvars.
- Emit one access log line per request with status and latency.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from opsbot.observability.logging import get_logger

log = get_logger(__name__)

_PROBE_PATHS = frozenset({"/healthz", "/readyz"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Ensures every request carries an `x-request-id` and that log lines emitted while
    serving it are tagged with it.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            # Orchestrator probes hit these constantly; keep them out of info logs.
            emit = log.debug if request.url.path in _PROBE_PATHS else log.info
            emit("request", status=response.status_code, elapsed_ms=elapsed_ms)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# Pairs with `observability.logging.configure_logging`; the contextvars processor there
# merges the bound request fields into every event.
