"""
Company and worker repositories.

Data access for companies and company memberships. "Accessible" companies are
those the user owns or works for as an ``ACTIVE`` worker.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, or_
from sqlmodel import select

from buildboss.core.models.domain.enums import WorkerStatus

from ..entities.companies import Company, Worker
from ..entities.jobs import JobApplication, JobOffer
from ..entities.messages import Message
from ..entities.projects import Project, Task
from ..entities.work_requests import WorkRequest
from .base import BaseRepository, QueryBuilder


def _active_member_company_ids(user_id: str):
    return select(Worker.company_id).where(Worker.user_id == user_id, Worker.status == WorkerStatus.ACTIVE.value)


class CompanyRepository(BaseRepository[Company]):
    """Repository for company data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Company)

    def accessible_ids_statement(self, user_id: str):
        """Select statement of ids of companies the user owns or actively works for."""
        return select(Company.id).where(
            or_(Company.created_by_id == user_id, Company.id.in_(_active_member_company_ids(user_id)))
        )

    async def get_by_nip(self, nip: str) -> Optional[Company]:
        stmt = select(Company).where(Company.nip == nip)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Company]:
        """List companies, most recently updated first.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``accessible_by`` (user id), ``created_by_id`` and ``search``

        Returns:
            List of Company instances
        """
        filters = filters or {}
        stmt = select(Company)
        if filters.get("accessible_by"):
            stmt = stmt.where(Company.id.in_(self.accessible_ids_statement(filters["accessible_by"])))
        if filters.get("created_by_id"):
            stmt = stmt.where(Company.created_by_id == filters["created_by_id"])
        stmt = QueryBuilder.apply_search(stmt, [Company.name], filters.get("search"))
        stmt = QueryBuilder.apply_pagination(stmt.order_by(Company.updated_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_owned(self, user_id: str) -> List[Company]:
        return await self.list(filters={"created_by_id": user_id})

    async def count_owned(self, user_id: str) -> int:
        return await self.count(Company.created_by_id == user_id)

    async def count_accessible(self, user_id: str) -> int:
        return await self.count(Company.id.in_(self.accessible_ids_statement(user_id)))

    async def worker_counts(self, company_ids: List[str]) -> Dict[str, int]:
        """Number of worker rows per company."""
        if not company_ids:
            return {}
        stmt = (
            select(Worker.company_id, func.count())
            .where(Worker.company_id.in_(company_ids))
            .group_by(Worker.company_id)
        )
        result = await self.session.execute(stmt)
        return {company_id: int(count) for company_id, count in result.all()}

    async def delete_with_related(self, company: Company) -> None:
        """Remove a company with its workers, projects, tasks and job offers."""
        project_ids = select(Project.id).where(Project.company_id == company.id)
        offer_ids = select(JobOffer.id).where(JobOffer.company_id == company.id)
        statements = [
            delete(Task).where(Task.project_id.in_(project_ids)),
            delete(Project).where(Project.company_id == company.id),
            delete(Message).where(Message.job_offer_id.in_(offer_ids)),
            delete(JobApplication).where(JobApplication.job_offer_id.in_(offer_ids)),
            delete(JobOffer).where(JobOffer.company_id == company.id),
            delete(Worker).where(Worker.company_id == company.id),
        ]
        for stmt in statements:
            await self.session.execute(stmt)
        # Work requests outlive the company they were posted for
        requests = await self.session.execute(select(WorkRequest).where(WorkRequest.company_id == company.id))
        for request in requests.scalars().all():
            request.company_id = None
            self.session.add(request)
        await self.session.delete(company)
        await self.session.commit()


class WorkerRepository(BaseRepository[Worker]):
    """Repository for company membership data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, Worker)

    async def get_membership(self, user_id: str, company_id: str) -> Optional[Worker]:
        """Get the worker row of a user in a company regardless of status."""
        stmt = select(Worker).where(Worker.user_id == user_id, Worker.company_id == company_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Worker]:
        """List worker rows.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``company_id``, ``user_id`` and ``status``

        Returns:
            List of Worker instances, most recently joined or invited first
        """
        stmt = QueryBuilder.apply_filters(select(Worker), Worker, filters or {})
        stmt = stmt.order_by(Worker.joined_at.desc(), Worker.invited_at.desc())
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_company(self, company_id: str) -> List[Worker]:
        return await self.list(filters={"company_id": company_id})

    async def list_invitations(self, user_id: str, limit: Optional[int] = None) -> List[Worker]:
        """Pending invitations of a user, newest first."""
        stmt = (
            select(Worker)
            .where(Worker.user_id == user_id, Worker.status == WorkerStatus.INVITED.value)
            .order_by(Worker.invited_at.desc())
        )
        stmt = QueryBuilder.apply_pagination(stmt, limit, None)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_user(self, user_id: str) -> List[Worker]:
        return await self.list(filters={"user_id": user_id})

    async def memberships_in(self, company_id: str, user_ids: List[str]) -> Dict[str, Worker]:
        """Worker rows of the given users in one company, keyed by user id."""
        if not user_ids:
            return {}
        stmt = select(Worker).where(Worker.company_id == company_id, Worker.user_id.in_(user_ids))
        result = await self.session.execute(stmt)
        return {worker.user_id: worker for worker in result.scalars().all()}

    async def count_by_status(self, company_id: str) -> Dict[str, int]:
        stmt = (
            select(Worker.status, func.count())
            .where(Worker.company_id == company_id)
            .group_by(Worker.status)
        )
        result = await self.session.execute(stmt)
        return {status: int(count) for status, count in result.all()}

    async def count_in_owned_companies(self, user_id: str) -> int:
        """Workers of every company the user owns."""
        owned = select(Company.id).where(Company.created_by_id == user_id)
        return await self.count(Worker.company_id.in_(owned))

    async def count_for_user(self, user_id: str, status: WorkerStatus) -> int:
        return await self.count(Worker.user_id == user_id, Worker.status == status.value)
