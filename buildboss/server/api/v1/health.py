"""
Health Check Endpoints.

This module provides basic system status endpoints (health, detailed health,
version) used for monitoring, deployment verification and by the web client
to detect that a new release is available.
"""

import resource
import sys

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from buildboss.core.database.base import utc_now
from buildboss.core.logging_config import get_logger
from buildboss.server.core.config import settings
from buildboss.server.services.deps import SessionDep

logger = get_logger(__name__)

router = APIRouter()

# Resident memory above this is reported as a warning
MEMORY_WARNING_MB = 1024


def _memory_check() -> dict:
    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    rss_mb = usage / (1024 * 1024) if sys.platform == "darwin" else usage / 1024
    return {
        "status": "WARNING" if rss_mb > MEMORY_WARNING_MB else "OK",
        "max_rss_mb": round(rss_mb, 1),
    }


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {
        "status": "OK",
        "message": "BuildBoss API is running",
        "timestamp": utc_now().isoformat(),
        "environment": settings.environment,
    }


@router.get(
    "/health/detailed",
    summary="Detailed Health Check",
    description="Check the database and process memory.",
    response_description="Status object with per-check results.",
    responses={503: {"description": "A critical check failed"}},
)
async def detailed_health_check(session: SessionDep):
    """
    Detailed health check.

    Runs ``SELECT 1`` against the database and reports memory usage. The overall
    status is ``CRITICAL`` (HTTP 503) when the database is unreachable.
    """
    checks = {}
    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = {"status": "OK"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        checks["database"] = {"status": "CRITICAL", "error": str(e)}
    checks["memory"] = _memory_check()

    overall = "CRITICAL" if any(check["status"] == "CRITICAL" for check in checks.values()) else "OK"
    body = {
        "status": overall,
        "timestamp": utc_now().isoformat(),
        "environment": settings.environment,
        "version": settings.app_version,
        "checks": checks,
    }
    code = status.HTTP_503_SERVICE_UNAVAILABLE if overall == "CRITICAL" else status.HTTP_200_OK
    return JSONResponse(status_code=code, content=body)


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve the backend and frontend release versions.",
    response_description="Version object.",
)
async def version():
    """
    Get release versions.

    The web client polls this endpoint and offers a reload when the frontend
    version differs from the one it was built with.
    """
    return {
        "backend_version": settings.app_version or "1.0.0",
        "frontend_version": settings.frontend_app_version or "1.0.0",
        "timestamp": utc_now().isoformat(),
    }
