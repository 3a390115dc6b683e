"""
User and authentication I/O models.

Request bodies for registration, login and profile editing, and the public
representation of a user account. The password hash and the confirmation
token never leave the server.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from buildboss.core.security import password_policy_error


class UserRead(BaseModel):
    """Schema for reading a user account from API."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    is_email_confirmed: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    """Compact user reference embedded in other records."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class RegisterRequest(BaseModel):
    """Schema for creating an account with e-mail and password."""

    email: EmailStr
    password: str = Field(description="At least 8 characters with lower, upper case letters and a digit")
    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def _password_policy(cls, value: str) -> str:
        error = password_policy_error(value)
        if error:
            raise ValueError(error)
        return value


class LoginRequest(BaseModel):
    """Schema for signing in with e-mail and password."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.strip().lower()


class VerifyPasswordRequest(BaseModel):
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Schema for editing the caller's own profile.

    Values are trimmed and blank strings clear the field.
    """

    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    avatar: Optional[str] = Field(default=None, max_length=500)

    @field_validator("first_name", "last_name", "avatar")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class UserSearchResult(UserSummary):
    """User found by e-mail search, optionally annotated with company membership."""

    is_in_company: Optional[bool] = None
    company_status: Optional[str] = None
