"""
Unit tests for server exception handlers.

Tests cover domain errors, request validation errors and unexpected
exceptions, both called directly and through a small FastAPI app.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field

from buildboss.core.errors import LimitExceededError, NotFoundError, ServiceUnavailableError
from buildboss.server.exception_handlers import setup_exception_handlers
from buildboss.server.exception_handlers.global_handler import (
    buildboss_error_handler,
    global_exception_handler,
)

HANDLER_MODULE = "buildboss.server.exception_handlers.global_handler"


@pytest.fixture
def mock_request():
    """Create a mock request object."""
    request = Mock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/projects"
    request.query_params = {}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


def _body(response: JSONResponse) -> dict:
    return json.loads(response.body.decode())


class TestDomainErrorHandler:
    """Rendering of ``BuildBossError`` subclasses."""

    @pytest.mark.asyncio
    async def test_status_and_detail(self, mock_request):
        response = await buildboss_error_handler(mock_request, NotFoundError("Project not found"))
        assert response.status_code == 404
        assert _body(response) == {"detail": "Project not found", "error_type": "NotFoundError"}

    @pytest.mark.asyncio
    async def test_extra_fields_are_merged(self, mock_request):
        exc = LimitExceededError("projects", 3, 3, "free")
        response = await buildboss_error_handler(mock_request, exc)
        body = _body(response)
        assert response.status_code == 403
        assert body["code"] == "LIMIT_EXCEEDED"
        assert body["resource"] == "projects"
        assert body["current_count"] == 3
        assert body["max_allowed"] == 3
        assert body["plan_name"] == "free"

    @pytest.mark.asyncio
    async def test_server_side_errors_logged_as_error(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger") as mock_logger:
            await buildboss_error_handler(mock_request, ServiceUnavailableError("Payments are not configured"))
            mock_logger.error.assert_called_once()
            mock_logger.info.assert_not_called()

    @pytest.mark.asyncio
    async def test_client_errors_logged_as_info(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger") as mock_logger:
            await buildboss_error_handler(mock_request, NotFoundError("Task not found"))
            mock_logger.info.assert_called_once()
            mock_logger.error.assert_not_called()


class TestGlobalExceptionHandler:
    """Test suite for the catch-all handler."""

    @pytest.mark.asyncio
    async def test_exception_handler_logs_error(self, mock_request):
        with patch(f"{HANDLER_MODULE}.logger") as mock_logger, patch(f"{HANDLER_MODULE}.log_error"):
            await global_exception_handler(mock_request, ValueError("Test error"))

            mock_logger.error.assert_called_once()
            call_args = mock_logger.error.call_args
            assert "Unhandled exception" in call_args[0][0]
            assert call_args[1]["extra"]["error_type"] == "ValueError"
            assert call_args[1]["extra"]["client"] == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_returns_500_with_error_id(self, mock_request):
        exc = RuntimeError("Test error")
        with patch(f"{HANDLER_MODULE}.logger"), patch(f"{HANDLER_MODULE}.log_error") as mock_log_error:
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        body = _body(response)
        assert body["detail"] == "Internal server error"
        assert body["error_id"] == id(exc)
        assert body["error_type"] == "RuntimeError"
        mock_log_error.assert_called_once()
        assert mock_log_error.call_args[0][0] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_missing_client(self, mock_request):
        mock_request.client = None
        with patch(f"{HANDLER_MODULE}.logger") as mock_logger, patch(f"{HANDLER_MODULE}.log_error"):
            await global_exception_handler(mock_request, KeyError("x"))
            assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class Payload(BaseModel):
    name: str = Field(min_length=1)
    budget: int


class TestSetupExceptionHandlers:
    """Handlers registered on a real app."""

    @pytest.fixture
    def app(self) -> FastAPI:
        app = FastAPI()
        setup_exception_handlers(app)

        @app.post("/items")
        async def create_item(payload: Payload):
            return payload

        @app.get("/missing")
        async def missing():
            raise NotFoundError("Company not found")

        @app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        return app

    @pytest.mark.asyncio
    async def test_validation_errors_are_400(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/items", json={"name": ""})
        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation error"
        assert {error["field"] for error in body["errors"]} == {"name", "budget"}
        assert all(error["message"] for error in body["errors"])

    @pytest.mark.asyncio
    async def test_domain_error_through_app(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/missing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Company not found"

    @pytest.mark.asyncio
    async def test_unhandled_error_through_app(self, app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        with patch(f"{HANDLER_MODULE}.log_error"):
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/boom")
        assert response.status_code == 500
        assert response.json()["error_type"] == "RuntimeError"
