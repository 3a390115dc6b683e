"""
Job marketplace entity models.

Companies publish job offers; users apply to them. Offers are visible in the
public listing while active, public and not expired.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Text

from buildboss.core.models.domain.enums import ApplicationStatus, EmploymentType, ExperienceLevel

from ..base import Base, new_id, utc_now


class JobOffer(Base, table=True):
    """Job posting published on behalf of a company.

    Table: job_offers
    """

    __tablename__ = "job_offers"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    title: str = Field(max_length=200)
    description: str = Field(sa_type=Text)
    category: str = Field(max_length=32, index=True)
    employment_type: str = Field(default=EmploymentType.FULL_TIME.value, max_length=16)
    experience_level: str = Field(default=ExperienceLevel.JUNIOR.value, max_length=16)

    country: str = Field(default="Polska", max_length=64)
    voivodeship: str = Field(max_length=32, index=True)
    city: str = Field(max_length=100, index=True)
    address: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)

    salary_min: Optional[float] = Field(default=None)
    salary_max: Optional[float] = Field(default=None)
    currency: str = Field(default="PLN", max_length=3)

    requirements: Optional[str] = Field(default=None, sa_type=Text)
    benefits: Optional[str] = Field(default=None, sa_type=Text)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=32)

    is_active: bool = Field(default=True, index=True)
    is_public: bool = Field(default=True)
    expires_at: Optional[datetime] = Field(default=None)

    company_id: str = Field(foreign_key="companies.id", index=True, max_length=32)
    created_by_id: str = Field(foreign_key="users.id", index=True, max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"JobOffer(id={self.id}, title={self.title}, category={self.category})"


class JobApplication(Base, table=True):
    """A user's application to a job offer.

    One application per (offer, applicant) pair.

    Table: job_applications
    """

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_offer_id", "applicant_id", name="uq_job_applications_offer_applicant"),
        {"extend_existing": True},
    )

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    job_offer_id: str = Field(foreign_key="job_offers.id", index=True, max_length=32)
    applicant_id: str = Field(foreign_key="users.id", index=True, max_length=32)

    cover_letter: Optional[str] = Field(default=None, sa_type=Text)
    cv_url: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(default=ApplicationStatus.PENDING.value, max_length=16, index=True)
    notes: Optional[str] = Field(default=None, sa_type=Text)
    reviewed_at: Optional[datetime] = Field(default=None)

    applied_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"JobApplication(id={self.id}, job_offer_id={self.job_offer_id}, status={self.status})"
