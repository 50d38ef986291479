"""
Unit tests for observability features.

Tests cover:
- Structured logging with JSON format
- Request correlation ID generation and propagation
- Generation metrics
- Request tracking middleware
"""

import json
import logging
import re

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from dsl_builder.core.errors import MissingValidationError, ValidationError
from dsl_builder.core.observability import (
    UNMATCHED_ROUTE,
    Metrics,
    ObservabilityMiddleware,
    StructuredFormatter,
    generate_request_id,
    get_request_id,
    metrics_endpoint,
    set_correlation_id,
    track_generation,
)
from dsl_builder.main import create_app


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def fresh_metrics(registry) -> Metrics:
    return Metrics(registry)


class TestRequestId:
    @pytest.mark.anyio
    async def test_generate_request_id_returns_uuid_format(self):
        request_id = generate_request_id()
        assert re.match(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", request_id)

    @pytest.mark.anyio
    async def test_set_and_get(self):
        set_correlation_id("request-1")
        assert get_request_id() == "request-1"


class TestStructuredFormatter:
    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord(
            name="dsl_builder.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="Generated %s DSL",
            args=("vendor",),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    @pytest.mark.anyio
    async def test_json_fields(self):
        set_correlation_id("req-42")
        entry = json.loads(StructuredFormatter().format(self._record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "dsl_builder.test"
        assert entry["message"] == "Generated vendor DSL"
        assert entry["request_id"] == "req-42"
        assert "timestamp" in entry

    @pytest.mark.anyio
    async def test_extra_fields(self):
        entry = json.loads(StructuredFormatter().format(self._record(preconditions=2)))
        assert entry["extra"]["preconditions"] == 2


class TestTrackGeneration:
    @pytest.mark.anyio
    async def test_success(self, registry, fresh_metrics):
        with track_generation("vendor", fresh_metrics):
            pass

        assert (
            registry.get_sample_value(
                "dsl_generations_total", {"document": "vendor", "status": "success"}
            )
            == 1.0
        )
        assert (
            registry.get_sample_value(
                "dsl_generation_duration_seconds_count", {"document": "vendor"}
            )
            == 1.0
        )

    @pytest.mark.anyio
    async def test_refused(self, registry, fresh_metrics):
        with pytest.raises(MissingValidationError):
            with track_generation("config", fresh_metrics):
                raise MissingValidationError("none")

        assert (
            registry.get_sample_value(
                "dsl_generations_total", {"document": "config", "status": "refused"}
            )
            == 1.0
        )

    @pytest.mark.anyio
    async def test_error(self, registry, fresh_metrics):
        with pytest.raises(ValidationError):
            with track_generation("config", fresh_metrics):
                raise ValidationError("bad")

        assert (
            registry.get_sample_value(
                "dsl_generations_total", {"document": "config", "status": "error"}
            )
            == 1.0
        )


class TestObservabilityMiddleware:
    @pytest.mark.anyio
    async def test_records_request(self, registry, fresh_metrics):
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware, metrics_instance=fresh_metrics)

        @app.get("/ping")
        def ping():
            return {"ok": True}

        response = TestClient(app).get("/ping", headers={"X-Request-ID": "abc"})

        assert response.headers["X-Request-ID"] == "abc"
        assert (
            registry.get_sample_value(
                "http_requests_total",
                {"method": "GET", "route": "/ping", "status_code": "200"},
            )
            == 1.0
        )

    @pytest.mark.anyio
    async def test_custom_header(self, fresh_metrics):
        app = FastAPI()
        app.add_middleware(
            ObservabilityMiddleware,
            metrics_instance=fresh_metrics,
            request_id_header="X-Correlation-ID",
        )

        @app.get("/ping")
        def ping():
            return {"request_id": get_request_id()}

        response = TestClient(app).get("/ping", headers={"X-Correlation-ID": "corr-1"})

        assert response.headers["X-Correlation-ID"] == "corr-1"
        assert response.json()["request_id"] == "corr-1"


class TestMetricsEndpoint:
    @pytest.mark.anyio
    async def test_prometheus_text(self):
        response = metrics_endpoint()
        assert response.media_type.startswith("text/plain")
        assert b"dsl_document_bytes" in response.body


class TestRouteLabels:
    """Metric labels use route templates, not raw request paths."""

    @staticmethod
    def _route_labels(registry: CollectorRegistry) -> set[str]:
        return {
            sample.labels["route"]
            for family in registry.collect()
            if family.name == "http_requests"
            for sample in family.samples
            if sample.name == "http_requests_total"
        }

    @pytest.mark.anyio
    async def test_path_parameters_share_one_label(self, registry, fresh_metrics):
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware, metrics_instance=fresh_metrics)

        @app.get("/defaults/{kind}")
        def defaults(kind: str):
            return {"kind": kind}

        client = TestClient(app)
        for i in range(10):
            client.get(f"/defaults/kind{i}")

        assert self._route_labels(registry) == {"/defaults/{kind}"}
        assert (
            registry.get_sample_value(
                "http_requests_total",
                {"method": "GET", "route": "/defaults/{kind}", "status_code": "200"},
            )
            == 10.0
        )

    @pytest.mark.anyio
    async def test_unmatched_paths_share_one_label(self, registry, fresh_metrics):
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware, metrics_instance=fresh_metrics)

        client = TestClient(app)
        for i in range(5):
            assert client.get(f"/random/{i}").status_code == 404

        assert self._route_labels(registry) == {UNMATCHED_ROUTE}

    @pytest.mark.anyio
    async def test_service_defaults_endpoint(self, registry, fresh_metrics):
        app = create_app()
        app.add_middleware(ObservabilityMiddleware, metrics_instance=fresh_metrics)

        client = TestClient(app)
        for kind in ["vendor", "config", "report", "other"]:
            client.get(f"/api/v1/dsl/defaults/{kind}")

        assert self._route_labels(registry) == {"/api/v1/dsl/defaults/{kind}"}
