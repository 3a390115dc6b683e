"""
User repository.

Data access for platform user accounts: lookups used by authentication,
user search for invitations and messaging, admin listings and statistics,
and account removal together with the records the user owns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, update
from sqlmodel import select

from ..entities.admin import AdminMessage, AdminMessageReply
from ..entities.companies import Company, Worker
from ..entities.jobs import JobApplication, JobOffer
from ..entities.messages import Message, Notification
from ..entities.projects import Project, Task
from ..entities.subscriptions import Payment, Subscription
from ..entities.users import User
from ..entities.work_requests import WorkRequest
from .base import BaseRepository, QueryBuilder


class UserRepository(BaseRepository[User]):
    """Repository for user account data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by e-mail address (stored lowercased)."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_confirmation_token(self, token: str) -> Optional[User]:
        """Get the user holding an unconsumed e-mail confirmation token."""
        stmt = select(User).where(User.confirmation_token == token)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_google_id(self, google_id: str) -> Optional[User]:
        """Get the user linked to a Google account."""
        stmt = select(User).where(User.google_id == google_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, user_ids: List[str]) -> Dict[str, User]:
        """Load several users at once, keyed by id."""
        if not user_ids:
            return {}
        stmt = select(User).where(User.id.in_(set(user_ids)))
        result = await self.session.execute(stmt)
        return {user.id: user for user in result.scalars().all()}

    async def search_confirmed_by_email(self, term: str, exclude_user_id: str, limit: int = 10) -> List[User]:
        """Find confirmed users whose e-mail contains ``term``, excluding the caller."""
        stmt = (
            select(User)
            .where(User.email.ilike(f"%{term.strip().lower()}%"))
            .where(User.is_email_confirmed == True)  # noqa: E712
            .where(User.id != exclude_user_id)
            .order_by(User.email)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def search(self, term: str, limit: int = 10, include_company_names: bool = False) -> List[User]:
        """Find users by e-mail, first or last name, optionally by owned company name."""
        pattern = f"%{term.strip()}%"
        conditions = [User.email.ilike(pattern), User.first_name.ilike(pattern), User.last_name.ilike(pattern)]
        if include_company_names:
            owned = select(Company.created_by_id).where(Company.name.ilike(pattern))
            conditions.append(User.id.in_(owned))
        stmt = select(User).where(or_(*conditions)).order_by(User.email).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[User]:
        """List users, newest first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``role``, ``status`` (confirmed|unconfirmed) and ``search``

        Returns:
            List of User instances
        """
        stmt = self._filtered(filters or {}).order_by(User.created_at.desc())
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_filtered(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count users matching the same filters as ``list``."""
        result = await self.session.execute(QueryBuilder.count_statement(self._filtered(filters or {})))
        return int(result.scalar_one())

    def _filtered(self, filters: Dict[str, Any]):
        stmt = select(User)
        if filters.get("role"):
            stmt = stmt.where(User.role == filters["role"])
        if filters.get("status") == "confirmed":
            stmt = stmt.where(User.is_email_confirmed == True)  # noqa: E712
        elif filters.get("status") == "unconfirmed":
            stmt = stmt.where(User.is_email_confirmed == False)  # noqa: E712
        return QueryBuilder.apply_search(stmt, [User.email, User.first_name, User.last_name], filters.get("search"))

    async def count_by_role(self) -> Dict[str, int]:
        """Number of users per role."""
        stmt = select(User.role, func.count()).group_by(User.role)
        result = await self.session.execute(stmt)
        return {role: int(count) for role, count in result.all()}

    async def count_logged_in_since(self, since: datetime) -> int:
        return await self.count(User.last_login_at >= since)

    async def count_created_since(self, since: datetime) -> int:
        return await self.count(User.created_at >= since)

    async def activity_counts(self, user_id: str) -> Tuple[int, int, int]:
        """Owned companies, worker memberships and created tasks of a user."""
        companies = await self._scalar_count(select(func.count()).select_from(Company).where(Company.created_by_id == user_id))
        memberships = await self._scalar_count(select(func.count()).select_from(Worker).where(Worker.user_id == user_id))
        tasks = await self._scalar_count(select(func.count()).select_from(Task).where(Task.created_by_id == user_id))
        return companies, memberships, tasks

    async def _scalar_count(self, stmt) -> int:
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def delete_with_related(self, user: User) -> None:
        """Remove a user together with everything that references the account.

        Companies owned by the user are removed with their projects, tasks,
        workers and job offers.
        """
        owned_company_ids = select(Company.id).where(Company.created_by_id == user.id)
        project_ids = select(Project.id).where(
            or_(Project.company_id.in_(owned_company_ids), Project.created_by_id == user.id)
        )
        offer_ids = select(JobOffer.id).where(
            or_(JobOffer.company_id.in_(owned_company_ids), JobOffer.created_by_id == user.id)
        )
        request_ids = select(WorkRequest.id).where(
            or_(WorkRequest.company_id.in_(owned_company_ids), WorkRequest.created_by_id == user.id)
        )
        subscription_ids = select(Subscription.id).where(Subscription.user_id == user.id)
        admin_message_ids = select(AdminMessage.id).where(AdminMessage.recipient_id == user.id)

        statements = [
            delete(AdminMessageReply).where(
                or_(AdminMessageReply.message_id.in_(admin_message_ids), AdminMessageReply.sender_user_id == user.id)
            ),
            delete(AdminMessage).where(AdminMessage.recipient_id == user.id),
            delete(Notification).where(Notification.user_id == user.id),
            delete(Message).where(
                or_(
                    Message.sender_id == user.id,
                    Message.receiver_id == user.id,
                    Message.job_offer_id.in_(offer_ids),
                    Message.work_request_id.in_(request_ids),
                )
            ),
            delete(JobApplication).where(
                or_(JobApplication.applicant_id == user.id, JobApplication.job_offer_id.in_(offer_ids))
            ),
            delete(JobOffer).where(JobOffer.id.in_(offer_ids)),
            delete(WorkRequest).where(WorkRequest.id.in_(request_ids)),
            delete(Task).where(or_(Task.project_id.in_(project_ids), Task.created_by_id == user.id)),
            update(Task).where(Task.assigned_to_id == user.id).values(assigned_to_id=None),
            delete(Project).where(Project.id.in_(project_ids)),
            delete(Worker).where(or_(Worker.user_id == user.id, Worker.company_id.in_(owned_company_ids))),
            delete(Company).where(Company.created_by_id == user.id),
            delete(Payment).where(Payment.subscription_id.in_(subscription_ids)),
            delete(Subscription).where(Subscription.user_id == user.id),
        ]
        for stmt in statements:
            await self.session.execute(stmt)
        await self.session.delete(user)
        await self.session.commit()
