"""
Billing I/O models.

This module contains the representation of plans (with formatted price and
feature flags), subscriptions, payments and usage, and the request bodies of
the checkout and cancellation endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field, computed_field


class PlanRead(BaseModel):
    """Schema for reading a subscription plan from API."""

    id: str
    name: str
    display_name: str
    description: Optional[str] = None
    price: int = Field(description="Price in the smallest currency unit")
    currency: str
    stripe_price_id: Optional[str] = None
    max_companies: int
    max_projects: int
    max_workers: int
    max_job_offers: int
    max_work_requests: int
    max_storage_gb: float
    has_advanced_reports: bool
    has_api_access: bool
    has_priority_support: bool
    has_custom_branding: bool
    has_team_management: bool
    is_active: bool

    class Config:
        from_attributes = True

    @computed_field
    @property
    def price_formatted(self) -> str:
        return f"{self.price / 100:.2f} {self.currency}"

    @computed_field
    @property
    def features(self) -> Dict[str, bool]:
        return {
            "advanced_reports": self.has_advanced_reports,
            "api_access": self.has_api_access,
            "priority_support": self.has_priority_support,
            "custom_branding": self.has_custom_branding,
            "team_management": self.has_team_management,
        }


class SubscriptionRead(BaseModel):
    """Schema for reading a user subscription from API."""

    id: str
    user_id: str
    plan_id: str
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None
    next_billing_date: Optional[datetime] = None
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    cancel_at_period_end: bool
    canceled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    plan: Optional[PlanRead] = None

    class Config:
        from_attributes = True


class PaymentRead(BaseModel):
    """Schema for reading a payment from API."""

    id: str
    subscription_id: str
    amount: int
    currency: str
    status: str
    description: Optional[str] = None
    stripe_invoice_id: Optional[str] = None
    failure_reason: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UsageStats(BaseModel):
    """Current resource counts of a user, keyed like the plan limits."""

    companies: int = 0
    projects: int = 0
    workers: int = 0
    job_offers: int = 0
    work_requests: int = 0


class CheckoutRequest(BaseModel):
    plan_id: Optional[str] = None


class CheckoutSession(BaseModel):
    session_id: str
    url: Optional[str] = None


class CancelRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)
