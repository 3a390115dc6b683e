"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for error tracking and
tracing of the BuildBoss server, including:
- API endpoint tracing
- Database operation monitoring
- Outbound HTTP calls (Stripe, Google)
- Error tracking with request context

All helpers are safe to call when monitoring is disabled: ``logfire`` buffers
nothing and sends nothing until ``initialize_logfire`` has configured it.
"""

import logging
from typing import Optional

import logfire
from fastapi import FastAPI

from buildboss.server.core.config import settings

logger = logging.getLogger(__name__)

_initialized = False


def is_logfire_enabled() -> bool:
    """Whether Logfire has been configured for this process."""
    return _initialized


def initialize_logfire(app: FastAPI | None = None) -> None:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    This function sets up Logfire with automatic instrumentation for:
    - SQLAlchemy database operations
    - HTTPX HTTP requests
    - FastAPI endpoints

    Args:
        app: FastAPI application instance for FastAPI instrumentation (optional).
             If provided, enables automatic tracing of FastAPI endpoints.

    The initialization is conditional on LOGFIRE_ENABLED and LOGFIRE_TOKEN.
    """
    global _initialized

    config = settings.monitoring
    if not config.enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return

    if not config.token:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return

    try:
        logfire.configure(
            token=config.token,
            service_name=config.service_name,
            service_version=settings.app_version,
            environment=config.environment,
            sampling=logfire.SamplingOptions(head=config.sample_rate),
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return

    _initialized = True

    try:
        logfire.instrument_sqlalchemy()
        logger.info("Logfire: SQLAlchemy instrumentation enabled")
    except Exception as e:
        logger.warning(f"Failed to instrument SQLAlchemy: {e}")

    try:
        logfire.instrument_httpx()
        logger.info("Logfire: HTTPX instrumentation enabled")
    except Exception as e:
        logger.warning(f"Failed to instrument HTTPX: {e}")

    if app is not None:
        try:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    logger.info(
        f"Logfire monitoring initialized: "
        f"project={config.project_name}, "
        f"environment={config.environment}, "
        f"service={config.service_name}"
    )


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not _initialized:
        return
    try:
        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log API request to Logfire: {method} {path}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Report an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if not _initialized:
        return
    try:
        logfire.error(
            "{error_type}: {error_message}",
            error_type=error_type,
            error_message=error_message,
            **(context or {}),
        )
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")


def log_billing_event(event_type: str, user_id: Optional[str] = None, **attributes) -> None:
    """
    Record a billing lifecycle event (checkout, webhook, cancellation).

    Args:
        event_type: Stripe event type or local billing action
        user_id: Affected user, when known
        **attributes: Extra attributes attached to the span
    """
    if not _initialized:
        return
    try:
        logfire.info("Billing event {event_type}", event_type=event_type, user_id=user_id, **attributes)
    except Exception:
        logger.debug(f"Could not log billing event to Logfire: {event_type}")
