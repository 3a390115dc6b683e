"""
Direct message and notification entity models.

Messages are exchanged between two users, optionally in the context of a job
offer or a work request. Notifications are per-user records created by
services (task assignment, invitations, new messages, admin messages).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON
from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class Message(Base, table=True):
    """Direct message between two users.

    Table: messages
    """

    __tablename__ = "messages"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    subject: Optional[str] = Field(default=None, max_length=200)
    content: str = Field(sa_type=Text)
    is_read: bool = Field(default=False, index=True)

    sender_id: str = Field(foreign_key="users.id", index=True, max_length=32)
    receiver_id: str = Field(foreign_key="users.id", index=True, max_length=32)
    job_offer_id: Optional[str] = Field(default=None, foreign_key="job_offers.id", index=True, max_length=32)
    work_request_id: Optional[str] = Field(
        default=None, foreign_key="work_requests.id", index=True, max_length=32
    )

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Message(id={self.id}, sender_id={self.sender_id}, receiver_id={self.receiver_id})"


class Notification(Base, table=True):
    """In-app notification for a single user.

    ``data`` holds identifiers the client uses to deep-link (task, company,
    message ids).

    Table: notifications
    """

    __tablename__ = "notifications"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    user_id: str = Field(foreign_key="users.id", index=True, max_length=32)
    type: str = Field(max_length=32, index=True)
    title: str = Field(max_length=200)
    message: str = Field(sa_type=Text)
    data: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    is_read: bool = Field(default=False, index=True)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Notification(id={self.id}, user_id={self.user_id}, type={self.type})"
