"""
Company and worker entity models.

A company is owned by the user who created it. Other users join a company as
workers: they are invited, accept or reject, and carry per-company
permissions (view, edit, manage finance).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Text

from buildboss.core.models.domain.enums import WorkerStatus

from ..base import Base, new_id, utc_now


class Company(Base, table=True):
    """Construction company (tenant).

    Table: companies
    """

    __tablename__ = "companies"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    name: str = Field(max_length=100, index=True)
    nip: Optional[str] = Field(default=None, max_length=20, unique=True)
    description: Optional[str] = Field(default=None, sa_type=Text)
    address: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[str] = Field(default=None, max_length=500)

    created_by_id: str = Field(foreign_key="users.id", index=True, max_length=32)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Company(id={self.id}, name={self.name})"


class Worker(Base, table=True):
    """Membership of a user in a company.

    One row per (user, company) pair.

    Table: workers
    """

    __tablename__ = "workers"
    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_workers_user_company"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=32)
    company_id: str = Field(foreign_key="companies.id", index=True, max_length=32)

    position: Optional[str] = Field(default=None, max_length=100)
    status: str = Field(default=WorkerStatus.INVITED.value, max_length=16, index=True)
    can_view: bool = Field(default=True)
    can_edit: bool = Field(default=False)
    can_manage_finance: bool = Field(default=False)

    invited_at: datetime = Field(default_factory=utc_now)
    joined_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Worker(id={self.id}, user_id={self.user_id}, company_id={self.company_id}, status={self.status})"
