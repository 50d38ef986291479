import hmac
import logging

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dsl_builder import __version__
from dsl_builder.api.routes.dsl import router as dsl_router
from dsl_builder.api.routes.editor import router as editor_router
from dsl_builder.api.routes.health import router as health_router
from dsl_builder.core.config import AppEnvironment, settings
from dsl_builder.core.errors import DslBuilderError, get_status_code
from dsl_builder.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    extract_request_context,
    metrics_endpoint,
)

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up:
    - Observability middleware (request ids, metrics, request logs)
    - CORS for the browser editor
    - Exception handlers for domain and request validation errors
    - API routers
    - Metrics endpoint for Prometheus scraping
    """
    app = FastAPI(
        title="Integration DSL Builder API",
        description="Rule-tree editing and vendor/config DSL generation",
        version=__version__,
    )

    # ============================================================================
    # Middleware
    # ============================================================================

    if settings.observability_enabled:
        app.add_middleware(
            ObservabilityMiddleware,
            request_id_header=settings.observability_request_id_header,
        )

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

    @app.exception_handler(DslBuilderError)
    async def dsl_builder_error_handler(request: Request, exc: DslBuilderError) -> JSONResponse:
        """
        Handle domain errors from the editor and the generators.

        Maps domain exceptions to HTTP status codes and returns a
        structured error body.
        """
        status_code = get_status_code(exc)

        context = {
            "details": exc.details,
            "path": request.url.path,
            **extract_request_context(request),
        }

        if status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}", extra=context)
        else:
            logger.warning(f"{exc.__class__.__name__}: {exc.message}", extra=context)

        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.__class__.__name__,
                "message": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """
        Malformed request bodies.

        Reports location and message of each error; the rejected input is
        never echoed back.
        """
        errors = [
            {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        logger.warning(
            "Request validation failed",
            extra={"path": request.url.path, "errors": errors, **extract_request_context(request)},
        )

        return JSONResponse(
            status_code=422,
            content={
                "error": "RequestValidationError",
                "message": "Request validation failed",
                "details": {"errors": errors},
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Consistent error body for HTTP exceptions."""
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

        Logs the full exception and returns a generic 500 error without
        exposing internal details.
        """
        logger.error(
            f"Unhandled exception: {exc}",
            exc_info=True,
            extra={"path": request.url.path, **extract_request_context(request)},
        )

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
    app.include_router(dsl_router, prefix=API_PREFIX)
    app.include_router(editor_router, prefix=API_PREFIX)

    # ============================================================================
    # Metrics Endpoint (Prometheus)
    # ============================================================================

    async def protected_metrics(request: Request) -> Response:
        """
        Prometheus metrics endpoint.

        Requires the X-Metrics-Token header whenever METRICS_TOKEN is set
        (always the case in production).
        """
        expected_token = settings.metrics_token
        if expected_token:
            metrics_token = request.headers.get("X-Metrics-Token")
            if not hmac.compare_digest(metrics_token or "", expected_token):
                logger.warning(
                    "Unauthorized metrics access attempt",
                    extra={
                        "security_event": True,
                        "event_type": "METRICS_ACCESS_DENIED",
                        **extract_request_context(request),
                    },
                )
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Invalid metrics token",
                )
        elif settings.app_env == AppEnvironment.PROD:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Metrics token not configured. Set METRICS_TOKEN environment variable.",
            )

        return metrics_endpoint()

    if settings.observability_enabled:
        app.add_route("/metrics", protected_metrics)

    return app


app = create_app()
