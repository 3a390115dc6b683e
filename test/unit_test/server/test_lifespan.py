"""
Unit tests for FastAPI application lifespan management.

Tests verify that startup initializes the database, that a failing database
does not prevent the server from starting, and that the assembled app
exposes its routes under the API prefix.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

pytestmark = pytest.mark.asyncio

MAIN_MODULE = "buildboss.server.main"


class TestLifespan:
    """Startup and shutdown events."""

    async def test_startup_initializes_database(self):
        from buildboss.server.main import lifespan

        with patch(f"{MAIN_MODULE}.init_db", new=AsyncMock()) as mock_init, patch(f"{MAIN_MODULE}.logger") as mock_logger:
            async with lifespan(FastAPI()):
                mock_init.assert_awaited_once()
            messages = [call.args[0] for call in mock_logger.info.call_args_list]

        assert "Database initialized successfully" in messages
        assert "Shutting down BuildBoss Server..." in messages

    async def test_database_failure_does_not_block_startup(self):
        from buildboss.server.main import lifespan

        failing = AsyncMock(side_effect=ConnectionError("database unreachable"))
        with patch(f"{MAIN_MODULE}.init_db", new=failing), patch(f"{MAIN_MODULE}.logger") as mock_logger:
            async with lifespan(FastAPI()):
                pass

        mock_logger.error.assert_called_once()
        assert "database unreachable" in mock_logger.error.call_args[0][0]


class TestApplication:
    """The assembled FastAPI application."""

    async def test_routes_mounted_under_api_prefix(self):
        from buildboss.server.main import app

        paths = {route.path for route in app.routes}
        for expected in (
            "/api/v1/health",
            "/api/v1/auth/login",
            "/api/v1/companies",
            "/api/v1/projects",
            "/api/v1/tasks",
            "/api/v1/jobs",
            "/api/v1/requests",
            "/api/v1/messages",
            "/api/v1/notifications",
            "/api/v1/subscriptions/plans",
            "/api/v1/webhooks/stripe",
            "/api/v1/plans-admin/login",
            "/api/v1/admin/users",
            "/api/v1/admin/messages",
            "/api/v1/admin-messages",
        ):
            assert expected in paths, expected

    async def test_openapi_location(self):
        from buildboss.server.main import app

        assert app.openapi_url == "/api/v1/openapi.json"
