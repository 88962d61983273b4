"""
FastAPI application factory.

Usage:
    from mockes.server.app import create_app

    app = create_app()

Or run directly:
    uvicorn mockes.server:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mockes.exceptions import MalformedActionError, MockESError, UpstreamDecodeError
from mockes.handler import MockHandler
from mockes.server.config import Settings, get_settings
from mockes.server.middleware import (
    PRODUCT_HEADER,
    PRODUCT_NAME,
    ClusterEmulationMiddleware,
    RequestLoggingMiddleware,
)
from mockes.server.printer import MetricsPrinter
from mockes.server.routers import bulk, cluster, history
from mockes.server.schemas import ErrorDetail, ErrorResponse


def handler_from_settings(settings: Settings) -> MockHandler:
    """
    Build the probabilistic handler described by ``settings``.

    Raises:
        ConfigError: If the settings are invalid.
    """
    settings.validate()
    return MockHandler(
        cluster_uuid=settings.cluster_uuid,
        delay=settings.delay,
        percent_duplicate=settings.percent_duplicate,
        percent_too_many=settings.percent_too_many,
        percent_non_index=settings.percent_non_index,
        percent_too_large=settings.percent_too_large,
        history_capacity=settings.history_capacity,
    )


def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=ErrorDetail(type=code, reason=message, request_id=request_id),
            status=status_code,
        ).model_dump(exclude_none=True),
        headers={PRODUCT_HEADER: PRODUCT_NAME},
    )


def create_app(
    handler: Optional[MockHandler] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        handler: Handler to serve. Built from ``settings`` when omitted; pass
            one with a ``decide`` callback for deterministic outcomes.
        settings: Defaults to the environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    if handler is None:
        handler = handler_from_settings(settings)
    printer = MetricsPrinter(handler.metrics, settings.metrics_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        await printer.start()
        yield
        await printer.stop()

    app = FastAPI(
        title="mock-es",
        description="Elasticsearch ingestion mock with error injection",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.handler = handler
    app.state.settings = settings
    app.state.metrics_printer = printer

    # Added last runs first: the delay happens before verbose logging.
    if settings.verbose:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ClusterEmulationMiddleware)

    @app.exception_handler(MalformedActionError)
    async def malformed_action_handler(request: Request, exc: MalformedActionError) -> JSONResponse:
        """Abort the bulk request, the process keeps serving."""
        return _error_response(request, 500, exc.code, exc.message)

    @app.exception_handler(UpstreamDecodeError)
    async def upstream_decode_handler(request: Request, exc: UpstreamDecodeError) -> JSONResponse:
        return _error_response(request, 400, exc.code, exc.message)

    @app.exception_handler(MockESError)
    async def mockes_error_handler(request: Request, exc: MockESError) -> JSONResponse:
        return _error_response(request, 500, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        return _error_response(request, 500, "internal_error", "An internal error occurred")

    app.include_router(cluster.router)
    app.include_router(bulk.router)
    app.include_router(history.router)
    app.include_router(cluster.fallback_router)

    return app
