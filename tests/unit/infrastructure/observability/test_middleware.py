"""Unit tests for RequestLoggingMiddleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from soundrate.infrastructure.observability.middleware import (
    CORRELATION_HEADER,
    RequestLoggingMiddleware,
)


class TestRequestLoggingMiddleware:
    """Test suite for RequestLoggingMiddleware."""

    @pytest.fixture
    def app(self) -> FastAPI:
        """Create a FastAPI app with middleware for testing."""
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware)

        @app.get("/test")
        async def test_endpoint() -> dict[str, str]:
            return {"message": "test"}

        @app.get("/missing")
        async def missing_endpoint() -> None:
            from fastapi import HTTPException

            raise HTTPException(status_code=404, detail="nope")

        @app.get("/error")
        async def error_endpoint() -> None:
            raise ValueError("Test error")

        return app

    @pytest.fixture
    def client(self, app: FastAPI) -> TestClient:
        return TestClient(app)

    def test_successful_request_logs_once(self, client: TestClient) -> None:
        """One info line per finished request: "✓ GET /test → 200 (Xms)"."""
        with patch("soundrate.infrastructure.observability.middleware.logger") as mock_logger:
            response = client.get("/test")

            assert response.status_code == 200
            assert mock_logger.info.call_count == 1
            log_message = mock_logger.info.call_args[0][0]
            assert log_message.startswith("✓ GET /test → 200")
            assert log_message.endswith("ms)")

    def test_client_error_is_marked(self, client: TestClient) -> None:
        with patch("soundrate.infrastructure.observability.middleware.logger") as mock_logger:
            client.get("/missing")

            log_message = mock_logger.info.call_args[0][0]
            assert log_message.startswith("✗ GET /missing → 404")

    def test_correlation_id_is_echoed(self, client: TestClient) -> None:
        """An incoming correlation id is reused and returned."""
        response = client.get("/test", headers={CORRELATION_HEADER: "req-42"})

        assert response.headers[CORRELATION_HEADER] == "req-42"

    def test_correlation_id_is_generated(self, client: TestClient) -> None:
        first = client.get("/test").headers[CORRELATION_HEADER]
        second = client.get("/test").headers[CORRELATION_HEADER]

        assert first
        assert first != second

    def test_error_request_logs_exception(self, client: TestClient) -> None:
        """Unhandled errors are logged with traceback and re-raised."""
        with patch("soundrate.infrastructure.observability.middleware.logger") as mock_logger:
            with pytest.raises(ValueError):
                client.get("/error")

            assert mock_logger.exception.call_count == 1
            log_message = mock_logger.exception.call_args[0][0]
            assert "GET /error" in log_message
            assert mock_logger.info.call_count == 0
