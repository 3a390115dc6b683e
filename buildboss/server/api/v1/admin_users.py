"""
Admin Users API Endpoints.

User management for plans administrators: listing with activity counts,
platform statistics, profile and subscription edits, and account removal.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Query

from buildboss.core.database.base import column_values, utc_now
from buildboss.core.database.entities.subscriptions import Subscription
from buildboss.core.database.repositories import (
    CompanyRepository,
    PlanRepository,
    SubscriptionRepository,
    UserRepository,
)
from buildboss.core.errors import NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import SubscriptionStatus, UserRole
from buildboss.core.models.io import (
    AdminUserSubscriptionUpdate,
    AdminUserUpdate,
    CompanyRead,
    Pagination,
    PlanRead,
    SubscriptionRead,
    UserRead,
    offset_for,
)
from buildboss.server.core.constant import PREMIUM_PLAN_NAMES
from buildboss.server.services.deps import CurrentAdminDep, SessionDep
from buildboss.server.services.subscription_limits import get_subscription_with_plan

logger = get_logger(__name__)

router = APIRouter(tags=["admin-users"])

ACTIVE_USER_WINDOW = timedelta(days=30)


async def _get_user(session, user_id: str):
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get(
    "",
    summary="List Users",
    description="Paginated users with counts of owned companies, memberships and created tasks.",
)
async def list_users(
    admin: CurrentAdminDep,
    session: SessionDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    search: Optional[str] = Query(default=None, max_length=100),
    role: Optional[UserRole] = None,
    status_filter: Optional[str] = Query(default=None, alias="status", pattern="^(confirmed|unconfirmed)$"),
):
    users_repo = UserRepository(session)
    filters = {"search": search, "role": role.value if role else None, "status": status_filter}
    total = await users_repo.count_filtered(filters)
    users = await users_repo.list(limit=limit, offset=offset_for(page, limit), filters=filters)
    items = []
    for user in users:
        companies, memberships, tasks = await users_repo.activity_counts(user.id)
        items.append(
            {
                "user": UserRead.model_validate(user),
                "counts": {"owned_companies": companies, "worker_memberships": memberships, "created_tasks": tasks},
            }
        )
    return {"users": items, "pagination": Pagination.build(page, limit, total)}


@router.get(
    "/stats/overview",
    summary="User Statistics",
    description="Totals, recent activity, premium users and breakdowns by role and plan.",
)
async def stats_overview(admin: CurrentAdminDep, session: SessionDep):
    users_repo = UserRepository(session)
    subscriptions = SubscriptionRepository(session)
    now = utc_now()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return {
        "total_users": await users_repo.count(),
        "active_users": await users_repo.count_logged_in_since(now - ACTIVE_USER_WINDOW),
        "new_users_this_month": await users_repo.count_created_since(month_start),
        "premium_users": await subscriptions.count_on_plans(PREMIUM_PLAN_NAMES),
        "users_by_role": await users_repo.count_by_role(),
        "users_by_plan": await subscriptions.count_by_plan(),
    }


@router.get(
    "/{user_id}",
    summary="User Detail",
    description="A user with subscription, plan and owned companies.",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: str, admin: CurrentAdminDep, session: SessionDep):
    user = await _get_user(session, user_id)
    subscription, plan = await get_subscription_with_plan(session, user.id)
    subscription_read = SubscriptionRead.model_validate(subscription) if subscription else None
    if subscription_read is not None:
        subscription_read.plan = PlanRead.model_validate(plan) if plan else None
    companies = await CompanyRepository(session).list_owned(user.id)
    return {
        "user": UserRead.model_validate(user),
        "subscription": subscription_read,
        "companies": [CompanyRead.model_validate(company) for company in companies],
    }


@router.put(
    "/{user_id}",
    response_model=UserRead,
    summary="Update User",
    description="Edit name, role or e-mail confirmation of a user.",
    responses={404: {"description": "User not found"}},
)
async def update_user(user_id: str, payload: AdminUserUpdate, admin: CurrentAdminDep, session: SessionDep) -> UserRead:
    user = await _get_user(session, user_id)
    changes = column_values(payload.model_dump(exclude_unset=True))
    if changes.get("is_email_confirmed"):
        changes["confirmation_token"] = None
    user = await UserRepository(session).apply_update(user, changes)
    logger.info(f"Admin {admin.id} updated user {user_id}: {sorted(changes)}")
    return UserRead.model_validate(user)


@router.patch(
    "/{user_id}/subscription",
    response_model=SubscriptionRead,
    summary="Set User Plan",
    description="Create or update the user's subscription on the given plan.",
    responses={404: {"description": "User or plan not found"}},
)
async def set_user_subscription(
    user_id: str, payload: AdminUserSubscriptionUpdate, admin: CurrentAdminDep, session: SessionDep
) -> SubscriptionRead:
    await _get_user(session, user_id)
    plan = await PlanRepository(session).get_by_id(payload.plan_id)
    if plan is None:
        raise NotFoundError("Plan not found")
    status_value = (payload.status or SubscriptionStatus.ACTIVE).value
    subscriptions = SubscriptionRepository(session)
    subscription = await subscriptions.get_for_user(user_id)
    if subscription is None:
        subscription = await subscriptions.create(Subscription(user_id=user_id, plan_id=plan.id, status=status_value))
    else:
        subscription = await subscriptions.apply_update(subscription, {"plan_id": plan.id, "status": status_value})
    logger.info(f"Admin {admin.id} set user {user_id} to plan {plan.name} ({status_value})")
    read = SubscriptionRead.model_validate(subscription)
    read.plan = PlanRead.model_validate(plan)
    return read


@router.delete(
    "/{user_id}",
    summary="Delete User",
    description="Remove a user with their companies, content and subscription.",
    responses={404: {"description": "User not found"}},
)
async def delete_user(user_id: str, admin: CurrentAdminDep, session: SessionDep):
    user = await _get_user(session, user_id)
    await UserRepository(session).delete_with_related(user)
    logger.warning(f"Admin {admin.id} deleted user {user_id}")
    return {"success": True, "message": "User deleted"}
