"""
User entity models.

This module contains the database entity for platform user accounts. A user
signs in with e-mail and password or with Google, owns companies, works for
companies as a worker, and holds at most one subscription.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from buildboss.core.models.domain.enums import UserRole

from ..base import Base, new_id, utc_now


class User(Base, table=True):
    """Platform user account.

    ``password`` is ``None`` for accounts created through Google sign-in.
    ``confirmation_token`` is cleared once the e-mail address is confirmed.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    email: str = Field(max_length=255, unique=True, index=True)
    password: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    avatar: Optional[str] = Field(default=None, max_length=500)
    role: str = Field(default=UserRole.WORKER.value, max_length=16, index=True)

    is_email_confirmed: bool = Field(default=False)
    confirmation_token: Optional[str] = Field(default=None, max_length=64, index=True)
    google_id: Optional[str] = Field(default=None, max_length=64, unique=True)

    last_login_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    @property
    def full_name(self) -> str:
        """First and last name joined, falling back to the e-mail address."""
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.email

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"
