"""
Back-office entity models.

This module contains the plans-administrator accounts (separate from platform
users), the audit log of plan and subscription changes made by those
administrators, and the admin-to-user message threads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON
from sqlmodel import Field, Text

from buildboss.core.models.domain.enums import AdminMessagePriority, AdminMessageStatus, SenderType

from ..base import Base, new_id, utc_now


class PlansAdmin(Base, table=True):
    """Administrator of the plans panel, authenticated with the admin token.

    Table: plans_admins
    """

    __tablename__ = "plans_admins"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    email: str = Field(max_length=255, unique=True, index=True)
    password: str = Field(max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    is_active: bool = Field(default=True)

    last_login_at: Optional[datetime] = Field(default=None)
    password_changed_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"PlansAdmin(id={self.id}, email={self.email}, active={self.is_active})"


class PlanChange(Base, table=True):
    """Audit entry for a change made through the plans panel.

    ``plan_id`` is kept as a plain column so the history survives plan edits.

    Table: plan_changes
    """

    __tablename__ = "plan_changes"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    plan_id: Optional[str] = Field(default=None, max_length=32, index=True)
    plan_name: str = Field(max_length=100)
    change_type: str = Field(max_length=32, index=True)
    old_values: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    new_values: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    admin_id: Optional[str] = Field(default=None, foreign_key="plans_admins.id", max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"PlanChange(id={self.id}, plan={self.plan_name}, type={self.change_type})"


class AdminMessage(Base, table=True):
    """Message sent by an administrator to a platform user.

    Table: admin_messages
    """

    __tablename__ = "admin_messages"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    subject: str = Field(max_length=200)
    content: str = Field(sa_type=Text)
    priority: str = Field(default=AdminMessagePriority.NORMAL.value, max_length=8, index=True)
    status: str = Field(default=AdminMessageStatus.UNREAD.value, max_length=16, index=True)

    sender_type: str = Field(default=SenderType.ADMIN.value, max_length=8)
    sender_admin_id: Optional[str] = Field(default=None, foreign_key="plans_admins.id", max_length=32)
    recipient_id: str = Field(foreign_key="users.id", index=True, max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"AdminMessage(id={self.id}, recipient_id={self.recipient_id}, status={self.status})"


class AdminMessageReply(Base, table=True):
    """Reply in an admin message thread, written by either side.

    Table: admin_message_replies
    """

    __tablename__ = "admin_message_replies"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    message_id: str = Field(foreign_key="admin_messages.id", index=True, max_length=32)
    content: str = Field(sa_type=Text)
    sender_type: str = Field(max_length=8)
    sender_admin_id: Optional[str] = Field(default=None, foreign_key="plans_admins.id", max_length=32)
    sender_user_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=32)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"AdminMessageReply(id={self.id}, message_id={self.message_id}, sender={self.sender_type})"
