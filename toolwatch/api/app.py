"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from toolwatch.api.dependencies import cleanup_dependencies
from toolwatch.api.middleware.timeout import TimeoutMiddleware
from toolwatch.api.routes import badges, checks, export, health, notify, repos
from toolwatch.config.settings import get_settings
from toolwatch.observability.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Operator API starting up")

    settings = get_settings()
    if settings.tracing_enabled:
        from toolwatch.observability.tracing import setup_tracing

        setup_tracing(
            service_name=settings.otel_service_name,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        )

    yield

    logger.info("Operator API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "checks", "description": "Tool probes, health cycles and effective status"},
        {"name": "badges", "description": "Badge display detection"},
        {"name": "export", "description": "Catalog export to GitHub and its audit log"},
        {"name": "repos", "description": "GitHub repository metadata"},
        {"name": "notifications", "description": "Verification issues on tool repositories"},
    ]

    app = FastAPI(
        title="toolwatch Operator API",
        description="""
On-demand triggers for the directory's verification and health jobs.

Every job run from here behaves exactly like its scheduled counterpart and
is recorded with trigger source `manual`.

## Authentication

Requires `X-API-KEY` header for all requests except `/health`.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Request timeout middleware (added before logging middleware so the
    # timeout wraps the entire request lifecycle)
    if settings.request_timeout_seconds > 0:
        app.add_middleware(
            TimeoutMiddleware,
            timeout_seconds=settings.request_timeout_seconds,
        )

    # Request logging, correlation ID, and tracing middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        from toolwatch.observability.tracing import get_tracer, is_tracing_enabled

        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        bind_context(request_id=request_id)

        start_time = time.perf_counter()

        try:
            if is_tracing_enabled():
                tracer = get_tracer("toolwatch.api")
                with tracer.start_as_current_span(
                    f"{request.method} {request.url.path}",
                    attributes={
                        "http.method": request.method,
                        "http.url": str(request.url),
                        "http.route": request.url.path,
                        "http.request_id": request_id,
                    },
                ) as span:
                    response = await call_next(request)
                    duration = time.perf_counter() - start_time
                    span.set_attribute("http.status_code", response.status_code)
                    span.set_attribute("http.duration_ms", round(duration * 1000, 2))
            else:
                response = await call_next(request)
                duration = time.perf_counter() - start_time

            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(checks.router, tags=["checks"])
    app.include_router(badges.router, tags=["badges"])
    app.include_router(export.router, tags=["export"])
    app.include_router(repos.router, tags=["repos"])
    app.include_router(notify.router, tags=["notifications"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "toolwatch Operator API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app
