"""
Work request entity model.

Work requests are commissions posted by clients (optionally on behalf of a
company) that contractors can answer through direct messages.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, Text

from buildboss.core.models.domain.enums import WorkRequestType

from ..base import Base, new_id, utc_now


class WorkRequest(Base, table=True):
    """Commission published in the public work-request board.

    Table: work_requests
    """

    __tablename__ = "work_requests"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    title: str = Field(max_length=200)
    description: str = Field(sa_type=Text)
    category: str = Field(max_length=32, index=True)
    type: str = Field(default=WorkRequestType.ONE_TIME.value, max_length=16)

    voivodeship: str = Field(max_length=32, index=True)
    city: str = Field(max_length=100, index=True)
    address: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)

    budget_min: Optional[float] = Field(default=None)
    budget_max: Optional[float] = Field(default=None)
    currency: str = Field(default="PLN", max_length=3)
    deadline: Optional[datetime] = Field(default=None)

    requirements: Optional[str] = Field(default=None, sa_type=Text)
    materials: Optional[str] = Field(default=None, sa_type=Text)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=32)

    is_active: bool = Field(default=True, index=True)
    is_public: bool = Field(default=True)
    expires_at: Optional[datetime] = Field(default=None)

    company_id: Optional[str] = Field(default=None, foreign_key="companies.id", index=True, max_length=32)
    created_by_id: str = Field(foreign_key="users.id", index=True, max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"WorkRequest(id={self.id}, title={self.title}, category={self.category})"
