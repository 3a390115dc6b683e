"""
Billing entity models.

This module contains the plan catalogue, the per-user subscription mirrored
from Stripe, and the payments recorded from Stripe invoice webhooks.

A limit value of ``-1`` on a plan means "unlimited".
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, Text

from buildboss.core.models.domain.enums import PaymentStatus, SubscriptionStatus

from ..base import Base, new_id, utc_now


class SubscriptionPlan(Base, table=True):
    """Subscription plan with resource limits and feature flags.

    ``price`` is in the smallest currency unit (grosze for PLN).

    Table: subscription_plans
    """

    __tablename__ = "subscription_plans"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    name: str = Field(max_length=32, unique=True, index=True)
    display_name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, sa_type=Text)
    price: int = Field(default=0)
    currency: str = Field(default="PLN", max_length=3)
    stripe_price_id: Optional[str] = Field(default=None, max_length=64)

    max_companies: int = Field(default=1)
    max_projects: int = Field(default=3)
    max_workers: int = Field(default=5)
    max_job_offers: int = Field(default=1)
    max_work_requests: int = Field(default=2)
    max_storage_gb: float = Field(default=0.5)

    has_advanced_reports: bool = Field(default=False)
    has_api_access: bool = Field(default=False)
    has_priority_support: bool = Field(default=False)
    has_custom_branding: bool = Field(default=False)
    has_team_management: bool = Field(default=False)

    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"SubscriptionPlan(name={self.name}, price={self.price}, active={self.is_active})"


class Subscription(Base, table=True):
    """A user's subscription to a plan.

    Each user has at most one subscription row; plan changes update it in place.

    Table: subscriptions
    """

    __tablename__ = "subscriptions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True, max_length=32)
    plan_id: str = Field(foreign_key="subscription_plans.id", index=True, max_length=32)
    status: str = Field(default=SubscriptionStatus.ACTIVE.value, max_length=24, index=True)

    start_date: datetime = Field(default_factory=utc_now)
    end_date: Optional[datetime] = Field(default=None)
    trial_end_date: Optional[datetime] = Field(default=None)
    next_billing_date: Optional[datetime] = Field(default=None)

    stripe_customer_id: Optional[str] = Field(default=None, max_length=64, index=True)
    stripe_subscription_id: Optional[str] = Field(default=None, max_length=64, unique=True)
    stripe_price_id: Optional[str] = Field(default=None, max_length=64)

    cancel_at_period_end: bool = Field(default=False)
    canceled_at: Optional[datetime] = Field(default=None)
    cancel_reason: Optional[str] = Field(default=None, sa_type=Text)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Subscription(id={self.id}, user_id={self.user_id}, status={self.status})"


class Payment(Base, table=True):
    """Invoice payment reported by Stripe.

    Table: payments
    """

    __tablename__ = "payments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    subscription_id: str = Field(foreign_key="subscriptions.id", index=True, max_length=32)
    amount: int = Field(default=0)
    currency: str = Field(default="PLN", max_length=3)
    status: str = Field(default=PaymentStatus.PENDING.value, max_length=16, index=True)
    description: Optional[str] = Field(default=None, max_length=255)

    stripe_invoice_id: Optional[str] = Field(default=None, max_length=64, index=True)
    stripe_payment_intent_id: Optional[str] = Field(default=None, max_length=64)
    failure_reason: Optional[str] = Field(default=None, sa_type=Text)

    paid_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Payment(id={self.id}, amount={self.amount}, status={self.status})"
