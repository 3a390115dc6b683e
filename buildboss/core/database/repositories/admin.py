"""
Back-office repositories.

Data access for plans administrators, the plan change log and admin-to-user
message threads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import select

from buildboss.core.models.domain.enums import AdminMessagePriority, AdminMessageStatus

from ..entities.admin import AdminMessage, AdminMessageReply, PlanChange, PlansAdmin
from .base import BaseRepository, QueryBuilder


class PlansAdminRepository(BaseRepository[PlansAdmin]):
    """Repository for plans administrator accounts."""

    def __init__(self, session) -> None:
        super().__init__(session, PlansAdmin)

    async def get_by_email(self, email: str) -> Optional[PlansAdmin]:
        stmt = select(PlansAdmin).where(PlansAdmin.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[PlansAdmin]:
        stmt = QueryBuilder.apply_filters(select(PlansAdmin), PlansAdmin, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt.order_by(PlansAdmin.email), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class PlanChangeRepository(BaseRepository[PlanChange]):
    """Repository for the plan change audit log."""

    def __init__(self, session) -> None:
        super().__init__(session, PlanChange)

    async def list(
        self,
        limit: Optional[int] = 100,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[PlanChange]:
        """List changes, newest first; the latest 100 unless told otherwise."""
        stmt = QueryBuilder.apply_filters(select(PlanChange), PlanChange, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt.order_by(PlanChange.created_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    def record(
        self,
        *,
        plan_name: str,
        change_type: str,
        plan_id: Optional[str] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        admin_id: Optional[str] = None,
    ) -> PlanChange:
        """Stage a change entry in the current session; the caller commits."""
        change = PlanChange(
            plan_id=plan_id,
            plan_name=plan_name,
            change_type=change_type,
            old_values=old_values,
            new_values=new_values,
            admin_id=admin_id,
        )
        self.session.add(change)
        return change


class AdminMessageRepository(BaseRepository[AdminMessage]):
    """Repository for admin-to-user messages and their replies."""

    def __init__(self, session) -> None:
        super().__init__(session, AdminMessage)

    def _filtered(self, filters: Dict[str, Any]):
        return QueryBuilder.apply_filters(
            select(AdminMessage),
            AdminMessage,
            {key: filters.get(key) for key in ("status", "priority", "recipient_id")},
        )

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[AdminMessage]:
        """List messages, newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``status``, ``priority`` and ``recipient_id``

        Returns:
            List of AdminMessage instances
        """
        stmt = self._filtered(filters or {}).order_by(AdminMessage.created_at.desc())
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_filtered(self, filters: Optional[Dict[str, Any]] = None) -> int:
        result = await self.session.execute(QueryBuilder.count_statement(self._filtered(filters or {})))
        return int(result.scalar_one())

    async def replies(self, message_id: str) -> List[AdminMessageReply]:
        """Replies of a thread, oldest first."""
        stmt = (
            select(AdminMessageReply)
            .where(AdminMessageReply.message_id == message_id)
            .order_by(AdminMessageReply.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_reply(self, reply: AdminMessageReply) -> AdminMessageReply:
        self.session.add(reply)
        await self.session.commit()
        await self.session.refresh(reply)
        return reply

    async def stats(self, day_start: datetime) -> Dict[str, int]:
        """Total, unread, high-priority and since-``day_start`` message counts."""
        return {
            "total": await self.count(),
            "unread": await self.count(AdminMessage.status == AdminMessageStatus.UNREAD.value),
            "high_priority": await self.count(AdminMessage.priority == AdminMessagePriority.HIGH.value),
            "today": await self.count(AdminMessage.created_at >= day_start),
        }
