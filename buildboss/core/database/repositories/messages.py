"""
Message and notification repositories.

Data access for direct messages between users (grouped into conversations by
partner and context) and for per-user notifications.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, or_, update
from sqlmodel import select

from ..entities.messages import Message, Notification
from .base import BaseRepository, QueryBuilder


def _thread_condition(
    user_id: str, partner_id: str, job_offer_id: Optional[str], work_request_id: Optional[str]
):
    condition = or_(
        and_(Message.sender_id == user_id, Message.receiver_id == partner_id),
        and_(Message.sender_id == partner_id, Message.receiver_id == user_id),
    )
    context = [
        Message.job_offer_id == job_offer_id if job_offer_id else Message.job_offer_id.is_(None),
        Message.work_request_id == work_request_id if work_request_id else Message.work_request_id.is_(None),
    ]
    return and_(condition, *context)


class MessageRepository(BaseRepository[Message]):
    """Repository for direct message data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Message)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Message]:
        """List messages, newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``participant_id`` (sent or received by the user) plus
                equality filters on message columns

        Returns:
            List of Message instances
        """
        filters = dict(filters or {})
        stmt = select(Message)
        participant_id = filters.pop("participant_id", None)
        if participant_id:
            stmt = stmt.where(or_(Message.sender_id == participant_id, Message.receiver_id == participant_id))
        stmt = QueryBuilder.apply_filters(stmt, Message, filters)
        stmt = QueryBuilder.apply_pagination(stmt.order_by(Message.created_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(self, user_id: str) -> List[Message]:
        return await self.list(filters={"participant_id": user_id})

    async def thread(
        self,
        user_id: str,
        partner_id: str,
        job_offer_id: Optional[str] = None,
        work_request_id: Optional[str] = None,
    ) -> List[Message]:
        """All messages between two users in one context, oldest first."""
        stmt = (
            select(Message)
            .where(_thread_condition(user_id, partner_id, job_offer_id, work_request_id))
            .order_by(Message.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_thread_read(
        self,
        user_id: str,
        partner_id: str,
        job_offer_id: Optional[str] = None,
        work_request_id: Optional[str] = None,
    ) -> int:
        """Mark messages the partner sent to the user in one context as read.

        Returns:
            Number of messages that changed state
        """
        stmt = (
            update(Message)
            .where(
                _thread_condition(user_id, partner_id, job_offer_id, work_request_id),
                Message.receiver_id == user_id,
                Message.is_read == False,  # noqa: E712
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount or 0)

    async def count_unread(self, user_id: str) -> int:
        return await self.count(Message.receiver_id == user_id, Message.is_read == False)  # noqa: E712


class NotificationRepository(BaseRepository[Notification]):
    """Repository for notification data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Notification)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Notification]:
        """List notifications, newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``user_id`` and ``unread_only``

        Returns:
            List of Notification instances
        """
        stmt = self._filtered(filters or {}).order_by(Notification.created_at.desc())
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_filtered(self, filters: Optional[Dict[str, Any]] = None) -> int:
        result = await self.session.execute(QueryBuilder.count_statement(self._filtered(filters or {})))
        return int(result.scalar_one())

    def _filtered(self, filters: Dict[str, Any]):
        stmt = select(Notification)
        if filters.get("user_id"):
            stmt = stmt.where(Notification.user_id == filters["user_id"])
        if filters.get("unread_only"):
            stmt = stmt.where(Notification.is_read == False)  # noqa: E712
        return stmt

    async def count_unread(self, user_id: str) -> int:
        return await self.count(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712

    async def exists_since(self, user_id: str, type: str, since: datetime) -> bool:
        """Whether the user already got a notification of ``type`` at or after ``since``."""
        return (
            await self.count(
                Notification.user_id == user_id, Notification.type == type, Notification.created_at >= since
            )
            > 0
        )

    async def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        stmt = select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_all_read(self, user_id: str) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount or 0)

    async def clear_all(self, user_id: str) -> int:
        result = await self.session.execute(delete(Notification).where(Notification.user_id == user_id))
        await self.session.commit()
        return int(result.rowcount or 0)
