"""
Plans Administration API Endpoints.

Back-office panel for the people who manage the plan catalogue and user
subscriptions. Administrators are separate accounts (``plans_admins``) that
sign in with their own short-lived token. Every plan or subscription change
made here is written to the ``plan_changes`` audit log.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, status

from buildboss.core.database.base import column_values, utc_now
from buildboss.core.database.entities.subscriptions import Subscription, SubscriptionPlan
from buildboss.core.database.repositories import (
    PlanChangeRepository,
    PlanRepository,
    PlansAdminRepository,
    SubscriptionRepository,
    UserRepository,
)
from buildboss.core.errors import BadRequestError, ForbiddenError, NotFoundError
from buildboss.core.logging_config import get_logger, get_security_logger
from buildboss.core.models.domain.enums import PlanChangeType, SubscriptionStatus
from buildboss.core.models.io import (
    AdminChangePasswordRequest,
    AdminLoginRequest,
    AdminRead,
    PlanActiveUpdate,
    PlanChangeRead,
    PlanRead,
    PlanUpdate,
    SubscriptionRead,
    UserRead,
    UserSubscriptionUpdate,
)
from buildboss.core.security import create_admin_token, hash_password, verify_password
from buildboss.server.core.constant import FREE_PLAN_NAME
from buildboss.server.services.deps import CurrentAdminDep, SessionDep
from buildboss.server.services.plans import initialize_plans, set_plan_active, update_plan
from buildboss.server.services.subscription_limits import get_subscription_with_plan, get_usage_stats, plan_limits

logger = get_logger(__name__)
security_logger = get_security_logger()

router = APIRouter(tags=["plans-admin"])

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


def _json_values(values: Dict[str, Any]) -> Dict[str, Any]:
    """Datetimes as ISO strings so the values fit a JSON column."""
    return {key: value.isoformat() if isinstance(value, datetime) else value for key, value in values.items()}


async def _get_plan(session, plan_id: str) -> SubscriptionPlan:
    plan = await PlanRepository(session).get_by_id(plan_id)
    if plan is None:
        raise NotFoundError("Plan not found")
    return plan


@router.post(
    "/login",
    summary="Admin Login",
    description="Authenticate a plans administrator.",
    responses={401: {"description": "Invalid credentials or inactive account"}},
)
async def admin_login(payload: AdminLoginRequest, session: SessionDep):
    admins = PlansAdminRepository(session)
    admin = await admins.get_by_email(payload.email)
    if admin is None or not admin.is_active or not verify_password(payload.password, admin.password):
        security_logger.warning(f"Failed admin login attempt for {payload.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    admin = await admins.apply_update(admin, {"last_login_at": utc_now()})
    logger.info(f"Admin {admin.id} logged in")
    return {"token": create_admin_token(admin.id, admin.email), "admin": AdminRead.model_validate(admin)}


@router.post(
    "/change-password",
    summary="Change Admin Password",
    responses={400: {"description": "Current password is wrong"}},
)
async def change_password(payload: AdminChangePasswordRequest, admin: CurrentAdminDep, session: SessionDep):
    if not verify_password(payload.current_password, admin.password):
        raise BadRequestError("Current password is incorrect")
    await PlansAdminRepository(session).apply_update(
        admin, {"password": hash_password(payload.new_password), "password_changed_at": utc_now()}
    )
    security_logger.info(f"Admin {admin.id} changed password")
    return {"success": True, "message": "Password changed"}


@router.get("/plans", summary="All Plans", description="Every plan, active or not, ordered by price.")
async def all_plans(admin: CurrentAdminDep, session: SessionDep):
    plans = await PlanRepository(session).list()
    return {"plans": [PlanRead.model_validate(plan) for plan in plans]}


@router.post(
    "/initialize-plans",
    summary="Initialize Plans",
    description="Create the default plan catalogue when the table is empty.",
)
async def initialize(admin: CurrentAdminDep, session: SessionDep):
    created, count = await initialize_plans(session, admin.id)
    message = "Plans initialized" if created else "Plans already exist"
    return {"success": True, "created": created, "count": count, "message": message}


@router.post(
    "/plans",
    summary="Create Plan",
    description="Not available: the plan catalogue is fixed.",
    responses={403: {"description": "Always"}},
)
async def create_plan(admin: CurrentAdminDep):
    raise ForbiddenError("Creating plans is not allowed; edit the existing plans instead")


@router.put(
    "/plans/{plan_id}",
    response_model=PlanRead,
    summary="Update Plan",
    description="Edit a plan's display data, price, limits or features.",
    responses={404: {"description": "Plan not found"}},
)
async def edit_plan(plan_id: str, payload: PlanUpdate, admin: CurrentAdminDep, session: SessionDep) -> PlanRead:
    plan = await _get_plan(session, plan_id)
    plan = await update_plan(session, plan, payload.model_dump(exclude_unset=True), admin.id)
    return PlanRead.model_validate(plan)


@router.delete(
    "/plans/{plan_id}",
    summary="Delete Plan",
    description="Not available: plans can only be deactivated.",
    responses={403: {"description": "Plan exists"}, 404: {"description": "Plan not found"}},
)
async def delete_plan(plan_id: str, admin: CurrentAdminDep, session: SessionDep):
    await _get_plan(session, plan_id)
    raise ForbiddenError("Deleting plans is not allowed; deactivate the plan instead")


@router.patch("/plans/{plan_id}/active", response_model=PlanRead, summary="Set Plan Active")
async def set_active(
    plan_id: str, payload: PlanActiveUpdate, admin: CurrentAdminDep, session: SessionDep
) -> PlanRead:
    plan = await _get_plan(session, plan_id)
    return PlanRead.model_validate(await set_plan_active(session, plan, payload.is_active, admin.id))


@router.patch("/plans/{plan_id}/toggle", response_model=PlanRead, summary="Toggle Plan Active")
async def toggle_active(plan_id: str, admin: CurrentAdminDep, session: SessionDep) -> PlanRead:
    plan = await _get_plan(session, plan_id)
    return PlanRead.model_validate(await set_plan_active(session, plan, not plan.is_active, admin.id))


@router.get("/changes", summary="Change Log", description="The 100 most recent plan and subscription changes.")
async def changes(admin: CurrentAdminDep, session: SessionDep):
    entries = await PlanChangeRepository(session).list()
    return {"changes": [PlanChangeRead.model_validate(entry) for entry in entries]}


@router.get(
    "/user-by-email",
    summary="Find User by E-mail",
    responses={404: {"description": "User not found"}},
)
async def user_by_email(admin: CurrentAdminDep, session: SessionDep, email: str = Query(min_length=1)):
    user = await UserRepository(session).get_by_email(email)
    if user is None:
        raise NotFoundError("User not found")
    subscription, plan = await get_subscription_with_plan(session, user.id)
    subscription_read = SubscriptionRead.model_validate(subscription) if subscription else None
    if subscription_read is not None:
        subscription_read.plan = PlanRead.model_validate(plan) if plan else None
    return {"user": UserRead.model_validate(user), "subscription": subscription_read}


@router.patch(
    "/user-subscription/{user_id}",
    response_model=SubscriptionRead,
    summary="Update User Subscription",
    description="Change a user's plan, status or dates; creates a free subscription first when missing.",
    responses={404: {"description": "User or plan not found"}},
)
async def update_user_subscription(
    user_id: str, payload: UserSubscriptionUpdate, admin: CurrentAdminDep, session: SessionDep
) -> SubscriptionRead:
    """
    Edit a user's subscription by hand.

    Both the provisioning of a missing subscription and the edit itself are
    recorded in the change log against the user's e-mail.
    """
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    plans = PlanRepository(session)
    changes_log = PlanChangeRepository(session)
    subscriptions = SubscriptionRepository(session)

    subscription = await subscriptions.get_for_user(user_id)
    if subscription is None:
        free_plan = await plans.get_by_name(FREE_PLAN_NAME)
        if free_plan is None:
            raise NotFoundError("Free plan not found; initialize the plans first")
        subscription = Subscription(user_id=user_id, plan_id=free_plan.id, status=SubscriptionStatus.ACTIVE.value)
        changes_log.record(
            plan_id=free_plan.id,
            plan_name=f"{user.email} subscription",
            change_type=PlanChangeType.ADMIN_USER_CREATED.value,
            new_values={"plan_id": free_plan.id, "status": subscription.status},
            admin_id=admin.id,
        )
        subscription = await subscriptions.create(subscription)

    changes = column_values(payload.model_dump(exclude_unset=True))
    target_plan = None
    if changes.get("plan_id"):
        target_plan = await plans.get_by_id(changes["plan_id"])
        if target_plan is None:
            raise NotFoundError("Plan not found")
    old_values = {key: getattr(subscription, key) for key in changes}
    changes_log.record(
        plan_id=target_plan.id if target_plan else subscription.plan_id,
        plan_name=f"{user.email} subscription",
        change_type=PlanChangeType.ADMIN_USER_UPDATE.value,
        old_values=_json_values(old_values),
        new_values=_json_values(changes),
        admin_id=admin.id,
    )
    subscription = await subscriptions.apply_update(subscription, changes)
    logger.info(f"Admin {admin.id} updated subscription of user {user_id}: {sorted(changes)}")
    return SubscriptionRead.model_validate(subscription)


@router.get("/user-stats", summary="User Statistics")
async def user_stats(admin: CurrentAdminDep, session: SessionDep):
    subscriptions = SubscriptionRepository(session)
    return {
        "total_users": await UserRepository(session).count(),
        "subscriptions_by_status": await subscriptions.count_by_status(),
        "users_by_plan": await subscriptions.count_by_plan(),
    }


@router.get(
    "/search-users",
    summary="Search Users",
    description="Find users by e-mail or name.",
    responses={400: {"description": "Query shorter than 2 characters"}},
)
async def search_users(admin: CurrentAdminDep, session: SessionDep, q: str = ""):
    term = q.strip()
    if len(term) < SEARCH_MIN_LENGTH:
        raise BadRequestError(f"Search query must be at least {SEARCH_MIN_LENGTH} characters long")
    users = await UserRepository(session).search(term, limit=SEARCH_LIMIT)
    return {"users": [UserRead.model_validate(user) for user in users]}


@router.get(
    "/user-usage/{user_id}",
    summary="User Usage",
    responses={404: {"description": "User or subscription not found"}},
)
async def user_usage(user_id: str, admin: CurrentAdminDep, session: SessionDep):
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    _, plan = await get_subscription_with_plan(session, user_id)
    if plan is None:
        raise NotFoundError("User has no subscription")
    return {
        "usage": await get_usage_stats(session, user_id),
        "limits": plan_limits(plan),
        "plan": PlanRead.model_validate(plan),
    }


@router.get(
    "/cancelled-subscriptions",
    summary="Cancelled Subscriptions",
    description="Subscriptions cancelled or scheduled to cancel, most recent first.",
)
async def cancelled_subscriptions(admin: CurrentAdminDep, session: SessionDep):
    subscriptions = await SubscriptionRepository(session).list_cancelled()
    users = await UserRepository(session).get_many([s.user_id for s in subscriptions])
    plans = await PlanRepository(session).get_many([s.plan_id for s in subscriptions])
    items = []
    for subscription in subscriptions:
        read = SubscriptionRead.model_validate(subscription)
        plan: Optional[SubscriptionPlan] = plans.get(subscription.plan_id)
        read.plan = PlanRead.model_validate(plan) if plan else None
        user = users.get(subscription.user_id)
        items.append({"subscription": read, "user": UserRead.model_validate(user) if user else None})
    return {"subscriptions": items}


@router.get(
    "/cancellation-reasons",
    summary="Cancellation Reasons",
    description="Distinct cancellation reasons with counts, most frequent first.",
)
async def cancellation_reasons(admin: CurrentAdminDep, session: SessionDep):
    return {"reasons": await SubscriptionRepository(session).cancellation_reasons()}
