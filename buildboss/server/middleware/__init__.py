"""
Middleware modules for the BuildBoss server.

This package contains custom middleware for request timing and monitoring,
and the rate limiter guarding the authentication endpoints.
"""

from .logfire_middleware import LogfireMiddleware
from .rate_limit import auth_rate_limit, limiter, rate_limit_exceeded_handler

__all__ = ["LogfireMiddleware", "auth_rate_limit", "limiter", "rate_limit_exceeded_handler"]
