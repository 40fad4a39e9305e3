import hmac
import logging
import re
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rule_canvas.api.routes.canvas import router as canvas_router
from rule_canvas.api.routes.health import router as health_router
from rule_canvas.api.routes.metadata import router as metadata_router
from rule_canvas.core.config import AppEnvironment, settings
from rule_canvas.core.errors import RuleCanvasError, get_status_code
from rule_canvas.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    extract_request_context,
    metrics_endpoint,
)
from rule_canvas.core.telemetry import (
    init_telemetry,
    instrument_fastapi,
    instrument_httpx,
    shutdown_telemetry,
)

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_SENSITIVE_PATTERNS = [
    r"[/\\][\w/.-]+\.(py|json)",  # File paths
    r"https?://[^\s]+",  # Upstream URLs
    r"Traceback \(most recent call last\)",
]


def _sanitize_error_details(details: dict[str, Any]) -> dict[str, Any]:
    """
    Sanitize error details to prevent information leakage in production.

    Redacts file paths, upstream URLs and tracebacks from string values,
    recursing into nested dicts and lists. Outside production the details
    are returned unchanged.
    """
    if settings.app_env != AppEnvironment.PROD:
        return details

    sanitized: dict[str, Any] = {}
    for key, value in details.items():
        if isinstance(value, str):
            if any(re.search(p, value, re.IGNORECASE) for p in _SENSITIVE_PATTERNS):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = value
        elif isinstance(value, dict):
            sanitized[key] = _sanitize_error_details(value)
        elif isinstance(value, list):
            sanitized[key] = [
                _sanitize_error_details(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            sanitized[key] = value
    return sanitized


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up:
    - OpenTelemetry distributed tracing
    - Structured logging with correlation IDs
    - CORS middleware
    - Observability middleware (metrics, request tracking)
    - Exception handlers for domain errors
    - API routers
    - Metrics endpoint for Prometheus scraping
    """
    app = FastAPI(
        title="Rule Canvas API",
        description="Graph model, validation and persistence for the visual rule canvas",
        version="0.1.0",
    )

    # ============================================================================
    # OpenTelemetry Distributed Tracing
    # ============================================================================

    @app.on_event("startup")
    async def startup_telemetry():
        """Initialize OpenTelemetry tracing and instrumentation."""
        provider = init_telemetry(
            service_name=settings.otel_service_name,
            app_env=settings.app_env.value,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
            otlp_headers=settings.otel_exporter_otlp_headers,
            sampler_name=settings.otel_traces_sampler,
            sampler_arg=settings.otel_traces_sampler_arg,
        )
        if provider is not None:
            instrument_fastapi(app)
            # Outbound calls to the rules engine
            instrument_httpx()

    @app.on_event("shutdown")
    async def shutdown_app():
        """Shutdown OpenTelemetry tracer provider gracefully."""
        shutdown_telemetry()

    # ============================================================================
    # Observability Middleware (must be first for correlation tracking)
    # ============================================================================

    if settings.observability_enabled:
        app.add_middleware(
            ObservabilityMiddleware,
            request_id_header=settings.observability_request_id_header,
        )

    # ============================================================================
    # CORS Configuration
    # ============================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================================================
    # Exception Handlers
    # ============================================================================

    @app.exception_handler(RuleCanvasError)
    async def rule_canvas_error_handler(request: Request, exc: RuleCanvasError) -> JSONResponse:
        """
        Map domain exceptions to HTTP status codes and a structured body.

        Args:
            request: The incoming request
            exc: The domain exception raised

        Returns:
            JSON response ``{error, message, details}``
        """
        status_code = get_status_code(exc)

        context = {
            "details": exc.details,
            "path": request.url.path,
            **extract_request_context(request),
        }

        if status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}", extra=context)
        elif status_code >= 400:
            logger.warning(f"{exc.__class__.__name__}: {exc.message}", extra=context)

        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.__class__.__name__,
                "message": exc.message,
                "details": _sanitize_error_details(exc.details),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Consistent error body for FastAPI HTTP exceptions."""
        if exc.status_code >= 500:
            logger.error(
                f"HTTP {exc.status_code}: {exc.detail}",
                extra={"path": request.url.path, **extract_request_context(request)},
            )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTPException",
                "message": exc.detail,
                "details": {},
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Catch-all handler for unexpected exceptions.

        Logs the full exception and returns a generic 500 error to the client
        without exposing internal implementation details.
        """
        context = {
            "path": request.url.path if request.url else "unknown",
            **extract_request_context(request),
        }
        logger.error(f"Unhandled exception: {exc}", exc_info=True, extra=context)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "InternalServerError",
                "message": "An unexpected error occurred",
                "details": {},
            },
        )

    # ============================================================================
    # Router Registration
    # ============================================================================

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(metadata_router, prefix=API_PREFIX)
    app.include_router(canvas_router, prefix=API_PREFIX)

    # ============================================================================
    # Metrics Endpoint (Prometheus) - Token Protected
    # ============================================================================

    async def protected_metrics(request: Request) -> Response:
        """
        Protected Prometheus metrics endpoint.

        Requires the X-Metrics-Token header to match METRICS_TOKEN.
        """
        expected_token = settings.metrics_token
        if not expected_token:
            logger.error(
                "Metrics endpoint accessed but METRICS_TOKEN not configured",
                extra={"security_event": True, "event_type": "METRICS_NOT_CONFIGURED"},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Metrics token not configured. Set METRICS_TOKEN environment variable.",
            )

        metrics_token = request.headers.get("X-Metrics-Token")
        if not hmac.compare_digest(metrics_token or "", expected_token):
            logger.warning(
                "Unauthorized metrics access attempt",
                extra={
                    "security_event": True,
                    "event_type": "METRICS_ACCESS_DENIED",
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid metrics token",
            )

        return metrics_endpoint()

    if settings.observability_enabled:
        app.add_route("/metrics", protected_metrics)

    return app


app = create_app()
