"""
Observability module for the DSL builder.

Provides:
- Structured logging with JSON format and correlation IDs
- Request correlation ID (request_id) generation and propagation
- Prometheus metrics collection (HTTP, DSL generation)
- Request tracking middleware for latency and status codes

Usage:
    from dsl_builder.core.observability import (
        get_request_id,
        set_correlation_id,
        metrics,
        track_generation,
    )
"""

import json
import logging
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from fastapi import Request, Response
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp

from dsl_builder.core.errors import MissingValidationError

# ============================================================================
# Context Variables for Request Tracking
# ============================================================================

# Correlation ID - links all logs for a single request
_request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    """Generate a unique request ID for correlation."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Get the current request ID from context."""
    return _request_id_ctx.get()


def set_correlation_id(request_id: str) -> None:
    """Set the correlation ID for the current request context."""
    _request_id_ctx.set(request_id)


# ============================================================================
# Structured Logging Configuration
# ============================================================================

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name
    - message: Log message
    - request_id: Correlation ID (if available)
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["file"] = record.pathname
        log_entry["line"] = record.lineno
        log_entry["function"] = record.funcName

        # Fields passed through logger.info("msg", extra={...})
        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """
    Configure root logger with structured JSON formatting.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(handler)


# ============================================================================
# Prometheus Metrics
# ============================================================================

# Use a custom registry to avoid conflicts with other Prometheus metrics
_registry = CollectorRegistry()


class Metrics:
    """
    Centralized metrics collection for the application.

    Metrics groups:
    - HTTP: Request rate, errors, latency
    - Generator: Document generation outcomes, duration, size
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry

        # -------------------------------------------------------------------
        # HTTP Metrics
        # -------------------------------------------------------------------

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "route", "status_code"],
            registry=self.registry,
        )

        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "route"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self.registry,
        )

        self.http_requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method"],
            registry=self.registry,
        )

        self.http_errors_total = Counter(
            "http_errors_total",
            "Total HTTP errors",
            ["error_type", "method", "route"],
            registry=self.registry,
        )

        # -------------------------------------------------------------------
        # Generator Metrics
        # -------------------------------------------------------------------

        # Generation outcomes: success, refused (missing validation), error
        self.dsl_generations_total = Counter(
            "dsl_generations_total",
            "Total DSL document generations",
            ["document", "status"],
            registry=self.registry,
        )

        self.dsl_generation_duration_seconds = Histogram(
            "dsl_generation_duration_seconds",
            "DSL document generation duration in seconds",
            ["document"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
            registry=self.registry,
        )

        self.dsl_document_bytes = Histogram(
            "dsl_document_bytes",
            "Size of serialized DSL documents in bytes",
            ["document"],
            buckets=(256, 1024, 4096, 16384, 65536, 262144),
            registry=self.registry,
        )


# Global metrics instance
metrics = Metrics(_registry)


@contextmanager
def track_generation(document: str, metrics_instance: Metrics | None = None) -> Iterator[None]:
    """
    Context manager recording duration and outcome of one document generation.

    Usage:
        with track_generation("vendor"):
            dsl = generate_vendor_dsl(form)
    """
    m = metrics_instance or metrics
    start = time.perf_counter()
    status = "success"
    try:
        yield
    except MissingValidationError:
        status = "refused"
        raise
    except Exception:
        status = "error"
        raise
    finally:
        m.dsl_generation_duration_seconds.labels(document=document).observe(
            time.perf_counter() - start
        )
        m.dsl_generations_total.labels(document=document, status=status).inc()


# ============================================================================
# Middleware
# ============================================================================

# Route label for requests no route matched
UNMATCHED_ROUTE = "unmatched"


def resolve_route_pattern(request: Request) -> str:
    """
    Route template for metric labels, e.g. ``/api/v1/dsl/defaults/{kind}``.

    Requests without a matching route share ``UNMATCHED_ROUTE``.
    """
    route = request.scope.get("route")
    if route is None:
        app = request.scope.get("app")
        for candidate in getattr(app, "routes", []):
            match, _ = candidate.matches(request.scope)
            if match == Match.FULL:
                route = candidate
                break
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds observability to all requests.

    Features:
    - Generates and propagates request_id (correlation ID)
    - Logs all requests with structured fields
    - Tracks request latency
    - Records Prometheus metrics
    - Adds request_id to response headers
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics_instance: Metrics | None = None,
        skip_paths: list[str] | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        super().__init__(app)
        self.metrics = metrics_instance or metrics
        self.skip_paths = set(skip_paths or ["/api/v1/health", "/metrics"])
        self.request_id_header = request_id_header

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.request_id_header) or generate_request_id()
        set_correlation_id(request_id)

        path = request.url.path
        is_skipped_path = any(path.startswith(p) for p in self.skip_paths)

        self.metrics.http_requests_in_progress.labels(method=request.method).inc()
        start_time = time.time()
        logger = logging.getLogger("dsl_builder.request")

        try:
            response = await call_next(request)
            latency_ms = (time.time() - start_time) * 1000
            route = resolve_route_pattern(request)

            self.metrics.http_requests_total.labels(
                method=request.method, route=route, status_code=response.status_code
            ).inc()
            self.metrics.http_request_duration_seconds.labels(
                method=request.method, route=route
            ).observe(latency_ms / 1000)

            response.headers[self.request_id_header] = request_id

            if not is_skipped_path:
                logger.info(
                    f"{request.method} {path}",
                    extra={
                        "method": request.method,
                        "route": route,
                        "path": path,
                        "status_code": response.status_code,
                        "latency_ms": round(latency_ms, 2),
                    },
                )

            return response

        except Exception as e:
            latency_ms = (time.time() - start_time) * 1000
            route = resolve_route_pattern(request)
            error_type = type(e).__name__

            self.metrics.http_requests_total.labels(
                method=request.method, route=route, status_code=500
            ).inc()
            self.metrics.http_errors_total.labels(
                error_type=error_type, method=request.method, route=route
            ).inc()
            self.metrics.http_request_duration_seconds.labels(
                method=request.method, route=route
            ).observe(latency_ms / 1000)

            logger.error(
                f"{request.method} {path} - {error_type}: {str(e)}",
                extra={
                    "method": request.method,
                    "route": route,
                    "path": path,
                    "status_code": 500,
                    "latency_ms": round(latency_ms, 2),
                    "error_type": error_type,
                },
                exc_info=True,
            )
            raise

        finally:
            self.metrics.http_requests_in_progress.labels(method=request.method).dec()


# ============================================================================
# Metrics Endpoint
# ============================================================================


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(_registry),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


def extract_request_context(request: Request) -> dict[str, Any]:
    """Extract observability context from request for logging."""
    return {
        "request_id": get_request_id(),
        "client_ip": request.client.host if request.client else "unknown",
    }
