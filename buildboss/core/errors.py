"""Domain error types raised by the BuildBoss service layer.

Purpose:
- Let services signal business-rule failures without depending on FastAPI.
- Carry the HTTP status and any structured context the client needs (for
  example the plan limit that was hit).

Usage:
- Raise a subclass from services; the handler registered by
  ``setup_exception_handlers`` renders it as ``{"detail": ..., "error_type": ...}``
  plus the error's ``extra`` fields.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class BuildBossError(Exception):
    """Base error for expected business-rule failures.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code that represents the failure.
        extra: Optional structured fields merged into the error response.
    """

    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}


class BadRequestError(BuildBossError):
    """The request is well-formed but violates a business rule (HTTP 400)."""

    status_code = 400


class ConflictError(BadRequestError):
    """The resource already exists or is in an incompatible state (HTTP 400)."""


class AuthenticationError(BuildBossError):
    """Credentials are missing or wrong (HTTP 401)."""

    status_code = 401


class ForbiddenError(BuildBossError):
    """The caller is authenticated but not allowed to act (HTTP 403)."""

    status_code = 403


class NotFoundError(BuildBossError):
    """The requested resource does not exist or is not visible (HTTP 404)."""

    status_code = 404


class ServiceUnavailableError(BuildBossError):
    """A required external integration is not configured (HTTP 503)."""

    status_code = 503


class SubscriptionRequiredError(ForbiddenError):
    """The user has no subscription, or it is not active."""

    def __init__(self, message: str = "An active subscription is required") -> None:
        super().__init__(message, extra={"code": "SUBSCRIPTION_REQUIRED"})


class LimitExceededError(ForbiddenError):
    """A plan resource limit has been reached.

    Args:
        resource: Resource type that was being created (e.g. ``projects``).
        current_count: How many of the resource the user already has.
        max_allowed: The plan's limit for the resource.
        plan_name: Name of the user's plan.
    """

    def __init__(self, resource: str, current_count: int, max_allowed: int, plan_name: str) -> None:
        super().__init__(
            f"Plan limit reached for {resource} ({current_count}/{max_allowed})",
            extra={
                "code": "LIMIT_EXCEEDED",
                "resource": resource,
                "current_count": current_count,
                "max_allowed": max_allowed,
                "plan_name": plan_name,
            },
        )
        self.resource = resource
        self.current_count = current_count
        self.max_allowed = max_allowed
        self.plan_name = plan_name


class PremiumFeatureError(ForbiddenError):
    """The user's plan does not include a premium feature."""

    def __init__(self, feature: str, plan_name: str) -> None:
        super().__init__(
            f"Feature '{feature}' is not available on plan '{plan_name}'",
            extra={"code": "PREMIUM_FEATURE", "feature": feature, "plan_name": plan_name},
        )
        self.feature = feature
        self.plan_name = plan_name
