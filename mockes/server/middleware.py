"""
Request middleware.

Provides:
- Artificial per-request delay, applied before any handler side effect
- The product header official clients check before talking to a cluster
- Request ID generation and propagation
- Verbose request logging with gzip bodies decoded
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextvars import ContextVar
from typing import Awaitable, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from mockes.exceptions import UpstreamDecodeError
from mockes.protocol import decode_body

logger = logging.getLogger(__name__)

PRODUCT_HEADER = "X-Elastic-Product"
PRODUCT_NAME = "Elasticsearch"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_var.get()


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req-{uuid.uuid4().hex[:16]}"


def request_uri(request: Request) -> str:
    """Path plus query string, as the client sent it."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class ClusterEmulationMiddleware(BaseHTTPMiddleware):
    """
    Delay, identify as Elasticsearch and tag the request with an ID.

    The delay is read from the handler on ``app.state`` so every request
    waits before routing, counting or recording anything.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        delay = getattr(request.app.state.handler, "delay", 0.0)
        if delay > 0:
            await asyncio.sleep(delay)

        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        token = request_id_var.set(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        # required for official clients to recognize this as a valid endpoint.
        response.headers[PRODUCT_HEADER] = PRODUCT_NAME
        response.headers["X-Request-ID"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, URI and decoded body of every request. Enabled by --verbose."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        raw = await request.body()
        try:
            body = decode_body(raw, request.headers.get("content-encoding"))
            text = body.decode("utf-8", errors="replace")
        except UpstreamDecodeError as e:
            logger.warning("cannot read request body: %s", e.message)
            text = "<error reading gzipped body>"
        logger.info("%s %s\n%s", request.method, request_uri(request), text)
        return await call_next(request)
