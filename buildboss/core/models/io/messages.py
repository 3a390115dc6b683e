"""
Messaging and notification I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from buildboss.core.models.domain.enums import NotificationType

from .users import UserSummary


class MessageRead(BaseModel):
    """Schema for reading a direct message from API."""

    id: str
    subject: Optional[str] = None
    content: str
    is_read: bool
    sender_id: str
    receiver_id: str
    job_offer_id: Optional[str] = None
    work_request_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    """Schema for sending a direct message, optionally about an offer or request."""

    receiver_id: str = Field(min_length=1)
    content: str = Field(min_length=1, max_length=5000)
    subject: Optional[str] = Field(default=None, max_length=200)
    job_offer_id: Optional[str] = None
    work_request_id: Optional[str] = None


class ThreadReadRequest(BaseModel):
    partner_id: str = Field(min_length=1)
    job_offer_id: Optional[str] = None
    work_request_id: Optional[str] = None


class Conversation(BaseModel):
    """One conversation: a partner plus the offer or request it is about."""

    partner: Optional[UserSummary] = None
    partner_id: str
    job_offer_id: Optional[str] = None
    work_request_id: Optional[str] = None
    context: str = Field(description="job_offer, work_request or direct")
    last_message: MessageRead
    unread_count: int


class ConversationList(BaseModel):
    conversations: List[Conversation]


class NotificationRead(BaseModel):
    """Schema for reading a notification from API."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationTestCreate(BaseModel):
    """Schema of the development-only test notification."""

    type: NotificationType = NotificationType.SYSTEM
    title: str = Field(default="Test notification", max_length=200)
    message: str = Field(default="This is a test notification", max_length=2000)
    data: Optional[Dict[str, Any]] = None
