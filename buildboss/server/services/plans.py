"""
Plan catalogue service.

Seeds the fixed catalogue of subscription plans and records every change made
to plans (or, by administrators, to user subscriptions) in the change log.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.entities.subscriptions import SubscriptionPlan
from buildboss.core.database.repositories import PlanChangeRepository, PlanRepository
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import PlanChangeType
from buildboss.server.core.constant import DEFAULT_PLANS

logger = get_logger(__name__)

EDITABLE_PLAN_FIELDS = (
    "display_name",
    "description",
    "price",
    "currency",
    "stripe_price_id",
    "max_companies",
    "max_projects",
    "max_workers",
    "max_job_offers",
    "max_work_requests",
    "max_storage_gb",
    "has_advanced_reports",
    "has_api_access",
    "has_priority_support",
    "has_custom_branding",
    "has_team_management",
    "is_active",
)


def plan_snapshot(plan: SubscriptionPlan, fields=EDITABLE_PLAN_FIELDS) -> Dict[str, Any]:
    """The editable attributes of a plan as a JSON-friendly dict."""
    return {field: getattr(plan, field) for field in fields}


async def initialize_plans(session: AsyncSession, admin_id: Optional[str] = None) -> Tuple[bool, int]:
    """
    Create the default plan catalogue when no plan exists yet.

    Args:
        session: Database session
        admin_id: Administrator recorded as the author of the change entries

    Returns:
        ``(created, count)``: whether plans were created and how many plans exist
    """
    plans = PlanRepository(session)
    existing = await plans.count()
    if existing:
        logger.debug(f"Plan catalogue already holds {existing} plans")
        return False, existing

    changes = PlanChangeRepository(session)
    created: List[SubscriptionPlan] = []
    for definition in DEFAULT_PLANS:
        plan = SubscriptionPlan(**definition)
        session.add(plan)
        created.append(plan)
    await session.flush()
    for plan in created:
        changes.record(
            plan_id=plan.id,
            plan_name=plan.name,
            change_type=PlanChangeType.INITIALIZED.value,
            new_values=plan_snapshot(plan),
            admin_id=admin_id,
        )
    await session.commit()
    logger.info(f"Initialized plan catalogue with {len(created)} plans")
    return True, len(created)


async def update_plan(
    session: AsyncSession, plan: SubscriptionPlan, changes: Dict[str, Any], admin_id: Optional[str]
) -> SubscriptionPlan:
    """Apply allowed attribute changes to a plan and log old and new values."""
    allowed = {key: value for key, value in changes.items() if key in EDITABLE_PLAN_FIELDS}
    old_values = plan_snapshot(plan, allowed.keys())
    PlanChangeRepository(session).record(
        plan_id=plan.id,
        plan_name=plan.name,
        change_type=PlanChangeType.UPDATED.value,
        old_values=old_values,
        new_values=allowed,
        admin_id=admin_id,
    )
    plan = await PlanRepository(session).apply_update(plan, allowed)
    logger.info(f"Plan {plan.name} updated: {sorted(allowed)}")
    return plan


async def set_plan_active(
    session: AsyncSession, plan: SubscriptionPlan, is_active: bool, admin_id: Optional[str]
) -> SubscriptionPlan:
    """Activate or deactivate a plan and log the transition."""
    change_type = PlanChangeType.ACTIVATED if is_active else PlanChangeType.DEACTIVATED
    PlanChangeRepository(session).record(
        plan_id=plan.id,
        plan_name=plan.name,
        change_type=change_type.value,
        old_values={"is_active": plan.is_active},
        new_values={"is_active": is_active},
        admin_id=admin_id,
    )
    return await PlanRepository(session).apply_update(plan, {"is_active": is_active})
