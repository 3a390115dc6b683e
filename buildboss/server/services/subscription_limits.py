"""
Subscription and usage limits.

Plans cap how many companies, projects, workers, job offers and work requests
a user may have; ``-1`` means unlimited. Creation endpoints call
``check_resource_limit`` before inserting, and premium-only features call
``check_premium_feature``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import to_naive_utc, utc_now
from buildboss.core.database.entities.subscriptions import Subscription, SubscriptionPlan
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories import (
    CompanyRepository,
    JobOfferRepository,
    PlanRepository,
    ProjectRepository,
    SubscriptionRepository,
    WorkerRepository,
    WorkRequestRepository,
)
from buildboss.core.errors import LimitExceededError, PremiumFeatureError, SubscriptionRequiredError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import ResourceType, SubscriptionStatus
from buildboss.core.models.io.subscriptions import UsageStats
from buildboss.server.core.constant import FREE_PLAN_NAME, UNLIMITED

from .plans import initialize_plans

logger = get_logger(__name__)

# Resource type -> (usage field, plan limit column)
RESOURCE_FIELDS: Dict[ResourceType, Tuple[str, str]] = {
    ResourceType.COMPANIES: ("companies", "max_companies"),
    ResourceType.PROJECTS: ("projects", "max_projects"),
    ResourceType.WORKERS: ("workers", "max_workers"),
    ResourceType.JOB_OFFERS: ("job_offers", "max_job_offers"),
    ResourceType.WORK_REQUESTS: ("work_requests", "max_work_requests"),
}

PREMIUM_FEATURES = (
    "has_advanced_reports",
    "has_api_access",
    "has_priority_support",
    "has_custom_branding",
    "has_team_management",
)


def is_subscription_active(subscription: Optional[Subscription], now: Optional[datetime] = None) -> bool:
    """ACTIVE subscriptions, and TRIAL subscriptions whose trial has not ended."""
    if subscription is None:
        return False
    if subscription.status == SubscriptionStatus.ACTIVE.value:
        return True
    if subscription.status == SubscriptionStatus.TRIAL.value and subscription.trial_end_date is not None:
        return to_naive_utc(subscription.trial_end_date) > (now or utc_now())
    return False


async def get_usage_stats(session: AsyncSession, user_id: str) -> UsageStats:
    """Count the plan-limited resources a user currently has."""
    return UsageStats(
        companies=await CompanyRepository(session).count_owned(user_id),
        projects=await ProjectRepository(session).count_in_owned_companies(user_id),
        workers=await WorkerRepository(session).count_in_owned_companies(user_id),
        job_offers=await JobOfferRepository(session).count_active_created_by(user_id),
        work_requests=await WorkRequestRepository(session).count_active_created_by(user_id),
    )


def plan_limits(plan: SubscriptionPlan) -> Dict[str, int]:
    """The plan's limits keyed like ``UsageStats``."""
    return {usage_field: getattr(plan, column) for usage_field, column in RESOURCE_FIELDS.values()}


def usage_percentages(usage: UsageStats, plan: SubscriptionPlan) -> Dict[str, int]:
    """Percentage of each limit in use; unlimited resources report 0."""
    percentages = {}
    for usage_field, limit in plan_limits(plan).items():
        current = getattr(usage, usage_field)
        if limit == UNLIMITED or limit <= 0:
            percentages[usage_field] = 0
        else:
            percentages[usage_field] = round(current / limit * 100)
    return percentages


async def get_subscription_with_plan(
    session: AsyncSession, user_id: str
) -> Tuple[Optional[Subscription], Optional[SubscriptionPlan]]:
    subscription = await SubscriptionRepository(session).get_for_user(user_id)
    if subscription is None:
        return None, None
    plan = await PlanRepository(session).get_by_id(subscription.plan_id)
    return subscription, plan


async def _active_plan(session: AsyncSession, user: User) -> SubscriptionPlan:
    subscription, plan = await get_subscription_with_plan(session, user.id)
    if subscription is None or plan is None:
        raise SubscriptionRequiredError("No subscription found for this account")
    if not is_subscription_active(subscription):
        raise SubscriptionRequiredError("Your subscription is not active")
    return plan


async def check_resource_limit(session: AsyncSession, user: User, resource: ResourceType) -> None:
    """
    Refuse creating another ``resource`` when the user's plan limit is reached.

    Raises:
        SubscriptionRequiredError: No subscription, or it is not active
        LimitExceededError: ``current >= max`` for a limited resource
    """
    plan = await _active_plan(session, user)
    usage_field, column = RESOURCE_FIELDS[resource]
    max_allowed = getattr(plan, column)
    if max_allowed == UNLIMITED:
        return
    usage = await get_usage_stats(session, user.id)
    current = getattr(usage, usage_field)
    if current >= max_allowed:
        logger.info(f"User {user.id} hit the {resource.value} limit of plan {plan.name} ({current}/{max_allowed})")
        raise LimitExceededError(resource.value, current, max_allowed, plan.name)


async def check_premium_feature(session: AsyncSession, user: User, feature: str) -> None:
    """
    Refuse a premium feature the user's plan does not include.

    Args:
        feature: One of ``PREMIUM_FEATURES`` (plan flag name)
    """
    if feature not in PREMIUM_FEATURES:
        raise ValueError(f"Unknown premium feature: {feature}")
    plan = await _active_plan(session, user)
    if not getattr(plan, feature):
        raise PremiumFeatureError(feature, plan.name)


async def ensure_subscription(session: AsyncSession, user_id: str) -> Subscription:
    """Return the user's subscription, provisioning an ACTIVE free plan when missing."""
    subscriptions = SubscriptionRepository(session)
    subscription = await subscriptions.get_for_user(user_id)
    if subscription is not None:
        return subscription

    plans = PlanRepository(session)
    free_plan = await plans.get_by_name(FREE_PLAN_NAME)
    if free_plan is None:
        await initialize_plans(session)
        free_plan = await plans.get_by_name(FREE_PLAN_NAME)

    subscription = await subscriptions.create(
        Subscription(user_id=user_id, plan_id=free_plan.id, status=SubscriptionStatus.ACTIVE.value)
    )
    logger.info(f"Provisioned free plan for user {user_id}")
    return subscription
