"""
Company and worker I/O models.

This module contains the request and response schemas of the company
endpoints, including invitations and per-company worker permissions.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from buildboss.core.models.domain.enums import WorkerStatus

from .common import PartialUpdate
from .users import UserSummary


class CompanyRead(BaseModel):
    """Schema for reading a company from API."""

    id: str
    name: str
    nip: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    created_by_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CompanyCreate(BaseModel):
    """Schema for creating a company via API."""

    name: str = Field(min_length=2, max_length=100)
    nip: Optional[str] = Field(default=None, max_length=20)
    description: Optional[str] = Field(default=None, max_length=500)
    address: Optional[str] = Field(default=None, max_length=200)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[str] = Field(default=None, max_length=500)


class CompanyUpdate(PartialUpdate):
    """Schema for updating a company via API."""

    non_nullable = ("name",)

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    nip: Optional[str] = Field(default=None, max_length=20)
    description: Optional[str] = Field(default=None, max_length=500)
    address: Optional[str] = Field(default=None, max_length=200)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[str] = Field(default=None, max_length=500)


class WorkerPermissions(BaseModel):
    can_view: bool = True
    can_edit: bool = False
    can_manage_finance: bool = False


class WorkerRead(BaseModel):
    """Schema for reading a company membership from API."""

    id: str
    user_id: str
    company_id: str
    position: Optional[str] = None
    status: str
    can_view: bool
    can_edit: bool
    can_manage_finance: bool
    invited_at: datetime
    joined_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    company: Optional[CompanyRead] = None

    class Config:
        from_attributes = True


class InviteWorkerRequest(BaseModel):
    """Schema for inviting a registered user to a company."""

    email: EmailStr
    position: Optional[str] = Field(default=None, max_length=100)
    can_view: bool = True
    can_edit: bool = False
    can_manage_finance: bool = False


class BulkInviteRequest(BaseModel):
    invitations: List[InviteWorkerRequest] = Field(min_length=1, max_length=50)


class WorkerUpdate(PartialUpdate):
    """Schema for changing a worker's position, status or permissions."""

    non_nullable = ("status", "can_view", "can_edit", "can_manage_finance")

    position: Optional[str] = Field(default=None, max_length=100)
    status: Optional[WorkerStatus] = None
    can_view: Optional[bool] = None
    can_edit: Optional[bool] = None
    can_manage_finance: Optional[bool] = None


class CompanyListItem(CompanyRead):
    """Company annotated with the caller's relationship to it."""

    user_role: str = Field(description="OWNER or WORKER")
    user_permissions: WorkerPermissions
    workers_count: int = 0
