"""Unit tests for the authentication rate limit."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import Request
from slowapi.errors import RateLimitExceeded

from buildboss.server.core.config import settings
from buildboss.server.middleware.rate_limit import (
    DEVELOPMENT_AUTH_LIMIT,
    PRODUCTION_AUTH_LIMIT,
    auth_rate_limit,
    rate_limit_exceeded_handler,
)


class TestAuthRateLimit:
    @pytest.mark.parametrize(
        "environment,expected",
        [("development", DEVELOPMENT_AUTH_LIMIT), ("production", PRODUCTION_AUTH_LIMIT), ("test", PRODUCTION_AUTH_LIMIT)],
    )
    def test_default_per_environment(self, monkeypatch, environment, expected):
        monkeypatch.setattr(settings, "environment", environment)
        monkeypatch.setattr(settings, "auth_rate_limit", None)
        assert auth_rate_limit() == expected

    def test_configured_limit_wins(self, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")
        monkeypatch.setattr(settings, "auth_rate_limit", "20 per hour")
        assert auth_rate_limit() == "20 per hour"

    def test_production_is_five_per_quarter_hour(self):
        assert PRODUCTION_AUTH_LIMIT == "5 per 15 minutes"


class TestRateLimitExceededHandler:
    @pytest.mark.asyncio
    async def test_error_shape(self):
        request = Request(
            {
                "type": "http",
                "method": "POST",
                "path": "/api/v1/auth/login",
                "query_string": b"",
                "headers": [],
                "client": ("10.0.0.7", 50000),
            }
        )
        exc = RateLimitExceeded(MagicMock(error_message=None, limit="5 per 15 minute"))

        response = await rate_limit_exceeded_handler(request, exc)

        assert response.status_code == 429
        body = json.loads(response.body)
        assert body["error_type"] == "RateLimitExceeded"
        assert body["limit"] == "5 per 15 minute"
