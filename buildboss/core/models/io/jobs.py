"""
Marketplace I/O models.

This module contains the schemas of job offers, job applications and work
requests. Categories and voivodeships are validated against the dictionaries
in ``buildboss.server.core.constant``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from buildboss.core.models.domain.enums import (
    ApplicationStatus,
    EmploymentType,
    ExperienceLevel,
    WorkRequestType,
)
from buildboss.server.core.constant import JOB_CATEGORIES, VOIVODESHIPS, WORK_CATEGORIES

from .common import PartialUpdate
from .companies import CompanyRead
from .users import UserSummary

CURRENCIES = ("PLN", "EUR", "USD", "GBP")


def _check_choice(value: Optional[str], choices, label: str) -> Optional[str]:
    if value is not None and value not in choices:
        raise ValueError(f"Unknown {label}: {value}")
    return value


def _check_range(low: Optional[float], high: Optional[float], label: str) -> None:
    if low is not None and high is not None and high < low:
        raise ValueError(f"{label}_max must be greater than or equal to {label}_min")


class JobOfferRead(BaseModel):
    """Schema for reading a job offer from API."""

    id: str
    title: str
    description: str
    category: str
    employment_type: str
    experience_level: str
    country: str
    voivodeship: str
    city: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str
    requirements: Optional[str] = None
    benefits: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_active: bool
    is_public: bool
    expires_at: Optional[datetime] = None
    company_id: str
    created_by_id: str
    created_at: datetime
    updated_at: datetime

    has_applied: Optional[bool] = None
    applications_count: Optional[int] = None
    company: Optional[CompanyRead] = None
    created_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class JobOfferCreate(BaseModel):
    """Schema for publishing a job offer via API."""

    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20, max_length=5000)
    category: str
    voivodeship: str
    city: str = Field(min_length=2, max_length=100)
    company_id: str = Field(min_length=1)
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    experience_level: ExperienceLevel = ExperienceLevel.JUNIOR
    country: str = Field(default="Polska", max_length=64)
    address: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    salary_min: Optional[float] = Field(default=None, ge=0, le=1_000_000)
    salary_max: Optional[float] = Field(default=None, ge=0, le=1_000_000)
    currency: str = "PLN"
    requirements: Optional[str] = Field(default=None, max_length=2000)
    benefits: Optional[str] = Field(default=None, max_length=2000)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=32)
    is_public: bool = True
    expires_at: Optional[datetime] = None

    @field_validator("category")
    @classmethod
    def _category(cls, value: str) -> str:
        return _check_choice(value, JOB_CATEGORIES, "category")

    @field_validator("voivodeship")
    @classmethod
    def _voivodeship(cls, value: str) -> str:
        return _check_choice(value, VOIVODESHIPS, "voivodeship")

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: str) -> str:
        return _check_choice(value, CURRENCIES, "currency")

    @model_validator(mode="after")
    def _salary_range(self):
        _check_range(self.salary_min, self.salary_max, "salary")
        return self


class JobOfferUpdate(PartialUpdate):
    """Schema for editing a job offer via API."""

    non_nullable = (
        "title",
        "description",
        "category",
        "voivodeship",
        "city",
        "employment_type",
        "experience_level",
        "country",
        "currency",
        "is_active",
        "is_public",
    )

    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20, max_length=5000)
    category: Optional[str] = None
    voivodeship: Optional[str] = None
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    employment_type: Optional[EmploymentType] = None
    experience_level: Optional[ExperienceLevel] = None
    country: Optional[str] = Field(default=None, max_length=64)
    address: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    salary_min: Optional[float] = Field(default=None, ge=0, le=1_000_000)
    salary_max: Optional[float] = Field(default=None, ge=0, le=1_000_000)
    currency: Optional[str] = None
    requirements: Optional[str] = Field(default=None, max_length=2000)
    benefits: Optional[str] = Field(default=None, max_length=2000)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=32)
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("category")
    @classmethod
    def _category(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, JOB_CATEGORIES, "category")

    @field_validator("voivodeship")
    @classmethod
    def _voivodeship(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, VOIVODESHIPS, "voivodeship")

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, CURRENCIES, "currency")

    @model_validator(mode="after")
    def _salary_range(self):
        _check_range(self.salary_min, self.salary_max, "salary")
        return self


class JobApplicationCreate(BaseModel):
    cover_letter: Optional[str] = Field(default=None, max_length=5000)
    cv_url: Optional[str] = Field(default=None, max_length=500)


class JobApplicationRead(BaseModel):
    """Schema for reading a job application from API."""

    id: str
    job_offer_id: str
    applicant_id: str
    cover_letter: Optional[str] = None
    cv_url: Optional[str] = None
    status: str
    notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    applied_at: datetime
    updated_at: datetime
    applicant: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class JobApplicationUpdate(BaseModel):
    """Schema for reviewing an application."""

    status: ApplicationStatus
    notes: Optional[str] = Field(default=None, max_length=2000)


class WorkRequestRead(BaseModel):
    """Schema for reading a work request from API."""

    id: str
    title: str
    description: str
    category: str
    type: str
    voivodeship: str
    city: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    currency: str
    deadline: Optional[datetime] = None
    requirements: Optional[str] = None
    materials: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_active: bool
    is_public: bool
    expires_at: Optional[datetime] = None
    company_id: Optional[str] = None
    created_by_id: str
    created_at: datetime
    updated_at: datetime

    can_contact: Optional[bool] = None
    messages_count: Optional[int] = None
    company: Optional[CompanyRead] = None
    created_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class WorkRequestCreate(BaseModel):
    """Schema for publishing a work request via API."""

    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20, max_length=5000)
    category: str
    voivodeship: str
    city: str = Field(min_length=2, max_length=100)
    company_id: Optional[str] = None
    type: WorkRequestType = WorkRequestType.ONE_TIME
    address: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    budget_min: Optional[float] = Field(default=None, ge=0)
    budget_max: Optional[float] = Field(default=None, ge=0)
    currency: str = "PLN"
    deadline: Optional[datetime] = None
    requirements: Optional[str] = Field(default=None, max_length=2000)
    materials: Optional[str] = Field(default=None, max_length=2000)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=32)
    is_public: bool = True
    expires_at: Optional[datetime] = None

    @field_validator("category")
    @classmethod
    def _category(cls, value: str) -> str:
        return _check_choice(value, WORK_CATEGORIES, "category")

    @field_validator("voivodeship")
    @classmethod
    def _voivodeship(cls, value: str) -> str:
        return _check_choice(value, VOIVODESHIPS, "voivodeship")

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: str) -> str:
        return _check_choice(value, CURRENCIES, "currency")

    @model_validator(mode="after")
    def _budget_range(self):
        _check_range(self.budget_min, self.budget_max, "budget")
        return self


class WorkRequestUpdate(PartialUpdate):
    """Schema for editing a work request via API."""

    non_nullable = (
        "title",
        "description",
        "category",
        "voivodeship",
        "city",
        "type",
        "currency",
        "is_active",
        "is_public",
    )

    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20, max_length=5000)
    category: Optional[str] = None
    voivodeship: Optional[str] = None
    city: Optional[str] = Field(default=None, min_length=2, max_length=100)
    type: Optional[WorkRequestType] = None
    address: Optional[str] = Field(default=None, max_length=255)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    budget_min: Optional[float] = Field(default=None, ge=0)
    budget_max: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    deadline: Optional[datetime] = None
    requirements: Optional[str] = Field(default=None, max_length=2000)
    materials: Optional[str] = Field(default=None, max_length=2000)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=32)
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("category")
    @classmethod
    def _category(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, WORK_CATEGORIES, "category")

    @field_validator("voivodeship")
    @classmethod
    def _voivodeship(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, VOIVODESHIPS, "voivodeship")

    @field_validator("currency")
    @classmethod
    def _currency(cls, value: Optional[str]) -> Optional[str]:
        return _check_choice(value, CURRENCIES, "currency")

    @model_validator(mode="after")
    def _budget_range(self):
        _check_range(self.budget_min, self.budget_max, "budget")
        return self
