"""
Back-office I/O models.

Schemas of the plans administration panel, the admin user management
endpoints and admin-to-user messaging.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from buildboss.core.models.domain.enums import AdminMessagePriority, SubscriptionStatus, UserRole
from buildboss.core.security import password_policy_error

from .common import PartialUpdate
from .users import UserSummary


class AdminRead(BaseModel):
    """Schema for reading a plans administrator from API."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AdminChangePasswordRequest(BaseModel):
    """Schema for changing the administrator's own password."""

    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        error = password_policy_error(value)
        if error:
            raise ValueError(error)
        return value


class PlanUpdate(PartialUpdate):
    """Editable attributes of a plan; the plan name is fixed."""

    non_nullable = (
        "display_name",
        "price",
        "currency",
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

    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    stripe_price_id: Optional[str] = Field(default=None, max_length=64)
    max_companies: Optional[int] = Field(default=None, ge=-1)
    max_projects: Optional[int] = Field(default=None, ge=-1)
    max_workers: Optional[int] = Field(default=None, ge=-1)
    max_job_offers: Optional[int] = Field(default=None, ge=-1)
    max_work_requests: Optional[int] = Field(default=None, ge=-1)
    max_storage_gb: Optional[float] = Field(default=None, ge=-1)
    has_advanced_reports: Optional[bool] = None
    has_api_access: Optional[bool] = None
    has_priority_support: Optional[bool] = None
    has_custom_branding: Optional[bool] = None
    has_team_management: Optional[bool] = None
    is_active: Optional[bool] = None


class PlanActiveUpdate(BaseModel):
    is_active: bool


class PlanChangeRead(BaseModel):
    """Schema for reading a plan change log entry."""

    id: str
    plan_id: Optional[str] = None
    plan_name: str
    change_type: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    admin_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserSubscriptionUpdate(PartialUpdate):
    """Schema for an administrator changing a user's subscription."""

    non_nullable = ("plan_id", "status")

    plan_id: Optional[str] = None
    status: Optional[SubscriptionStatus] = None
    end_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None


class AdminUserUpdate(PartialUpdate):
    non_nullable = ("role", "is_email_confirmed")

    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    role: Optional[UserRole] = None
    is_email_confirmed: Optional[bool] = None


class AdminUserSubscriptionUpdate(BaseModel):
    plan_id: str = Field(min_length=1)
    status: Optional[SubscriptionStatus] = None


class AdminMessageCreate(BaseModel):
    """Schema for an administrator writing to a user."""

    recipient_id: str = Field(min_length=1)
    subject: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=2000)
    priority: AdminMessagePriority = AdminMessagePriority.NORMAL


class ReplyCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)


class AdminMessageReplyRead(BaseModel):
    """Schema for reading a reply in an admin message thread."""

    id: str
    message_id: str
    content: str
    sender_type: str
    sender_admin_id: Optional[str] = None
    sender_user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AdminMessageRead(BaseModel):
    """Schema for reading an admin message from API."""

    id: str
    subject: str
    content: str
    priority: str
    status: str
    sender_type: str
    sender_admin_id: Optional[str] = None
    recipient_id: str
    created_at: datetime
    updated_at: datetime

    sender: Optional[AdminRead] = None
    recipient: Optional[UserSummary] = None
    replies: Optional[List[AdminMessageReplyRead]] = None

    class Config:
        from_attributes = True
