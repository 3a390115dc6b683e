"""
Billing repositories.

Data access for the plan catalogue, user subscriptions and recorded payments,
including the aggregates used by the administration panels.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlmodel import select

from buildboss.core.models.domain.enums import SubscriptionStatus

from ..entities.subscriptions import Payment, Subscription, SubscriptionPlan
from .base import BaseRepository, QueryBuilder


class PlanRepository(BaseRepository[SubscriptionPlan]):
    """Repository for subscription plan data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, SubscriptionPlan)

    async def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        stmt = select(SubscriptionPlan).where(SubscriptionPlan.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[SubscriptionPlan]:
        """List plans ordered by price, cheapest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``is_active`` to restrict to active or inactive plans

        Returns:
            List of SubscriptionPlan instances
        """
        stmt = QueryBuilder.apply_filters(select(SubscriptionPlan), SubscriptionPlan, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt.order_by(SubscriptionPlan.price.asc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active(self) -> List[SubscriptionPlan]:
        return await self.list(filters={"is_active": True})

    async def get_many(self, plan_ids: List[str]) -> Dict[str, SubscriptionPlan]:
        if not plan_ids:
            return {}
        stmt = select(SubscriptionPlan).where(SubscriptionPlan.id.in_(set(plan_ids)))
        result = await self.session.execute(stmt)
        return {plan.id: plan for plan in result.scalars().all()}


class SubscriptionRepository(BaseRepository[Subscription]):
    """Repository for user subscription data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Subscription)

    async def get_for_user(self, user_id: str) -> Optional[Subscription]:
        stmt = select(Subscription).where(Subscription.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_stripe_subscription_id(self, stripe_subscription_id: str) -> Optional[Subscription]:
        stmt = select(Subscription).where(Subscription.stripe_subscription_id == stripe_subscription_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Subscription]:
        """List subscriptions, most recently updated first, filtered by equality on columns."""
        stmt = QueryBuilder.apply_filters(select(Subscription), Subscription, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt.order_by(Subscription.updated_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[str, int]:
        stmt = select(Subscription.status, func.count()).group_by(Subscription.status)
        result = await self.session.execute(stmt)
        return {status: int(count) for status, count in result.all()}

    async def count_by_plan(self) -> Dict[str, int]:
        """Number of subscriptions per plan name."""
        stmt = (
            select(SubscriptionPlan.name, func.count(Subscription.id))
            .join(SubscriptionPlan, SubscriptionPlan.id == Subscription.plan_id)
            .group_by(SubscriptionPlan.name)
        )
        result = await self.session.execute(stmt)
        return {name: int(count) for name, count in result.all()}

    async def count_on_plans(self, plan_names) -> int:
        """Number of subscriptions on any of the named plans."""
        plan_ids = select(SubscriptionPlan.id).where(SubscriptionPlan.name.in_(list(plan_names)))
        return await self.count(Subscription.plan_id.in_(plan_ids))

    async def list_cancelled(self) -> List[Subscription]:
        """Subscriptions cancelled or scheduled to cancel, most recent first."""
        stmt = (
            select(Subscription)
            .where(
                or_(
                    Subscription.cancel_at_period_end == True,  # noqa: E712
                    Subscription.canceled_at.is_not(None),
                )
            )
            .order_by(Subscription.canceled_at.desc(), Subscription.updated_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_trials_ending_between(self, start: datetime, end: datetime) -> List[Subscription]:
        """Subscriptions in trial whose trial ends within ``[start, end]``."""
        stmt = select(Subscription).where(
            Subscription.status == SubscriptionStatus.TRIAL.value,
            Subscription.trial_end_date >= start,
            Subscription.trial_end_date <= end,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_past_due_since(self, since: datetime) -> List[Subscription]:
        stmt = select(Subscription).where(
            Subscription.status == SubscriptionStatus.PAST_DUE.value, Subscription.updated_at >= since
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def cancellation_reasons(self) -> List[Dict[str, Any]]:
        """Distinct cancellation reasons with their counts, most frequent first."""
        count = func.count(Subscription.id)
        stmt = (
            select(Subscription.cancel_reason, count)
            .where(Subscription.cancel_reason.is_not(None))
            .group_by(Subscription.cancel_reason)
            .order_by(count.desc())
        )
        result = await self.session.execute(stmt)
        return [{"reason": reason, "count": int(total)} for reason, total in result.all()]


class PaymentRepository(BaseRepository[Payment]):
    """Repository for payment data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Payment)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Payment]:
        """List payments, newest first, filtered by ``subscription_id`` or ``status``."""
        stmt = QueryBuilder.apply_filters(select(Payment), Payment, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt.order_by(Payment.created_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def recent_for_subscription(self, subscription_id: str, limit: int = 5) -> List[Payment]:
        return await self.list(limit=limit, filters={"subscription_id": subscription_id})
