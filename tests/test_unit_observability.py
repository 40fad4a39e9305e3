"""
Unit tests for observability features.

Tests cover:
- Structured logging with JSON format
- Request correlation ID (request_id) generation and propagation
- Prometheus metrics collection
- Request tracking middleware
- Rule store call metrics
"""

import json
import logging
import re
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import generate_latest

from rule_canvas.core.observability import (
    ObservabilityMiddleware,
    StructuredFormatter,
    configure_structured_logging,
    generate_request_id,
    get_request_id,
    metrics,
    metrics_endpoint,
    set_correlation_id,
    store_metrics,
)


def _record(msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname="/test/path.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )


def _sample(name: str, labels: dict[str, str]) -> float:
    value = metrics.registry.get_sample_value(name, labels)
    return value or 0.0


class TestRequestIdGeneration:
    """Tests for request ID generation and context management."""

    @pytest.mark.anyio
    async def test_generate_request_id_returns_uuid_format(self):
        """Test that generate_request_id returns a valid UUID string."""
        request_id = generate_request_id()
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
            re.IGNORECASE,
        )
        assert uuid_pattern.match(request_id)

    @pytest.mark.anyio
    async def test_request_id_context(self):
        """Test that the correlation ID can be set and read back."""
        set_correlation_id("request-1")
        assert get_request_id() == "request-1"
        set_correlation_id("")


class TestStructuredLogging:
    """Tests for structured JSON logging."""

    @pytest.mark.anyio
    async def test_structured_formatter_outputs_json(self):
        """Test that StructuredFormatter outputs valid JSON with the standard fields."""
        parsed = json.loads(StructuredFormatter().format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test.logger"
        assert parsed["message"] == "Test message"
        assert parsed["timestamp"].endswith("+00:00")
        assert parsed["line"] == 42

    @pytest.mark.anyio
    async def test_structured_formatter_includes_request_id(self):
        """Test that structured logs carry the current correlation ID."""
        set_correlation_id("req-123")
        try:
            parsed = json.loads(StructuredFormatter().format(_record()))
        finally:
            set_correlation_id("")

        assert parsed["request_id"] == "req-123"

    @pytest.mark.anyio
    async def test_structured_formatter_includes_extra_fields(self):
        """Test that structured logs include extra fields from logging.extra."""
        record = _record()
        record.rule_id = "rule-1"
        record.backend_id = 42

        parsed = json.loads(StructuredFormatter().format(record))

        assert parsed["extra"]["rule_id"] == "rule-1"
        assert parsed["extra"]["backend_id"] == 42

    @pytest.mark.anyio
    async def test_structured_formatter_includes_exception(self):
        """Test that exception type and message are rendered."""
        try:
            raise ValueError("bad value")
        except ValueError:
            record = logging.LogRecord(
                name="test.logger",
                level=logging.ERROR,
                pathname="/test/path.py",
                lineno=1,
                msg="failed",
                args=(),
                exc_info=sys.exc_info(),
            )

        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"] == {"type": "ValueError", "message": "bad value"}

    @pytest.mark.anyio
    async def test_configure_structured_logging(self):
        """Test that configure_structured_logging configures root logger."""
        root_logger = logging.getLogger()
        original_handlers = list(root_logger.handlers)
        original_level = root_logger.level
        try:
            configure_structured_logging("DEBUG")

            assert root_logger.level == logging.DEBUG
            assert isinstance(root_logger.handlers[0].formatter, StructuredFormatter)
        finally:
            root_logger.handlers[:] = original_handlers
            root_logger.setLevel(original_level)


class TestObservabilityMiddleware:
    """Tests for ObservabilityMiddleware."""

    @pytest.mark.anyio
    async def test_middleware_propagates_request_id_from_header(self):
        """Test that middleware uses X-Request-ID header if provided."""
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware)

        @app.get("/test")
        async def test_route():
            return {"request_id": get_request_id()}

        client = TestClient(app)
        response = client.get("/test", headers={"X-Request-ID": "custom-request-id-123"})

        assert response.status_code == 200
        assert response.json()["request_id"] == "custom-request-id-123"
        assert response.headers["X-Request-ID"] == "custom-request-id-123"

    @pytest.mark.anyio
    async def test_middleware_generates_request_id(self):
        """Test that middleware generates a request ID when none is sent."""
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware)

        @app.get("/test")
        async def test_route():
            return {"ok": True}

        response = TestClient(app).get("/test")

        assert response.status_code == 200
        assert len(response.headers["X-Request-ID"]) > 0

    @pytest.mark.anyio
    async def test_middleware_custom_header_name(self):
        """Test that the correlation header name is configurable."""
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware, request_id_header="X-Correlation-ID")

        @app.get("/test")
        async def test_route():
            return {"ok": True}

        response = TestClient(app).get("/test", headers={"X-Correlation-ID": "corr-1"})
        assert response.headers["X-Correlation-ID"] == "corr-1"

    @pytest.mark.anyio
    async def test_middleware_records_http_metrics(self):
        """Test that middleware records HTTP request metrics."""
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware)

        @app.get("/observed")
        async def observed():
            return {"ok": True}

        TestClient(app).get("/observed")

        metrics_output = generate_latest(metrics.registry).decode("utf-8")
        assert "http_requests_total{" in metrics_output
        assert 'route="/observed"' in metrics_output
        assert 'status_code="200"' in metrics_output


class TestStoreMetrics:
    """Tests for the rule store call tracker."""

    @pytest.mark.anyio
    async def test_track_success(self):
        """Test that a successful call is counted as success."""
        labels = {"operation": "obs_test_ok", "status": "success"}
        before = _sample("rule_store_calls_total", labels)

        with store_metrics.track("obs_test_ok"):
            pass

        assert _sample("rule_store_calls_total", labels) == before + 1

    @pytest.mark.anyio
    async def test_track_error_reraises(self):
        """Test that a failing call is counted as error and the exception propagates."""
        labels = {"operation": "obs_test_fail", "status": "error"}
        before = _sample("rule_store_calls_total", labels)

        with pytest.raises(RuntimeError):
            with store_metrics.track("obs_test_fail"):
                raise RuntimeError("boom")

        assert _sample("rule_store_calls_total", labels) == before + 1


class TestMetricsEndpoint:
    """Tests for the Prometheus exposition helper."""

    @pytest.mark.anyio
    async def test_metrics_endpoint_returns_prometheus_format(self):
        """Test that metrics endpoint returns Prometheus text format."""
        app = FastAPI()

        @app.get("/metrics")
        def metrics_route():
            return metrics_endpoint()

        response = TestClient(app).get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "version=0.0.4" in response.headers["content-type"]
        assert "rule_saves_total" in response.text
