"""
Marketplace repositories.

Data access for job offers, job applications and work requests. Public
listings only show records that are active, public and not expired.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import delete, func, or_
from sqlmodel import select

from ..base import utc_now
from ..entities.jobs import JobApplication, JobOffer
from ..entities.messages import Message
from ..entities.work_requests import WorkRequest
from .base import BaseRepository, QueryBuilder

SORTABLE_FIELDS = ("created_at", "salary_min", "salary_max", "budget_min", "budget_max", "title", "expires_at")


def _visible(model, now: datetime):
    return (
        model.is_active == True,  # noqa: E712
        model.is_public == True,  # noqa: E712
        or_(model.expires_at.is_(None), model.expires_at > now),
    )


def _ordering(model, sort_by: Optional[str], sort_order: Optional[str]):
    column = getattr(model, sort_by, None) if sort_by in SORTABLE_FIELDS else None
    column = column if column is not None else model.created_at
    return column.asc() if sort_order == "asc" else column.desc()


class JobOfferRepository(BaseRepository[JobOffer]):
    """Repository for job offer data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, JobOffer)

    def _public(self, filters: Dict[str, Any]):
        stmt = select(JobOffer).where(*_visible(JobOffer, utc_now()))
        stmt = QueryBuilder.apply_filters(
            stmt,
            JobOffer,
            {key: filters.get(key) for key in ("category", "voivodeship", "employment_type", "experience_level")},
        )
        if filters.get("city"):
            stmt = stmt.where(JobOffer.city.ilike(f"%{filters['city']}%"))
        if filters.get("salary_min") is not None:
            stmt = stmt.where(JobOffer.salary_min >= filters["salary_min"])
        if filters.get("salary_max") is not None:
            stmt = stmt.where(JobOffer.salary_max <= filters["salary_max"])
        return QueryBuilder.apply_search(
            stmt, [JobOffer.title, JobOffer.description, JobOffer.city], filters.get("search")
        )

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[JobOffer]:
        """List publicly visible job offers.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``category``, ``voivodeship``, ``city``, ``employment_type``,
                ``experience_level``, ``salary_min``, ``salary_max``, ``search``,
                ``sort_by`` and ``sort_order``

        Returns:
            List of JobOffer instances
        """
        filters = filters or {}
        stmt = self._public(filters).order_by(_ordering(JobOffer, filters.get("sort_by"), filters.get("sort_order")))
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_public(self, filters: Optional[Dict[str, Any]] = None) -> int:
        result = await self.session.execute(QueryBuilder.count_statement(self._public(filters or {})))
        return int(result.scalar_one())

    async def get_visible(self, offer_id: str) -> Optional[JobOffer]:
        """Get an offer only if it is shown in the public listing."""
        stmt = select(JobOffer).where(JobOffer.id == offer_id, *_visible(JobOffer, utc_now()))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_created_by(self, user_id: str) -> List[JobOffer]:
        stmt = select(JobOffer).where(JobOffer.created_by_id == user_id).order_by(JobOffer.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_active_created_by(self, user_id: str) -> int:
        return await self.count(JobOffer.created_by_id == user_id, JobOffer.is_active == True)  # noqa: E712

    async def delete_with_related(self, offer: JobOffer) -> None:
        """Remove an offer with its applications and the messages about it."""
        await self.session.execute(delete(JobApplication).where(JobApplication.job_offer_id == offer.id))
        await self.session.execute(delete(Message).where(Message.job_offer_id == offer.id))
        await self.session.delete(offer)
        await self.session.commit()


class JobApplicationRepository(BaseRepository[JobApplication]):
    """Repository for job application data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, JobApplication)

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[JobApplication]:
        """List applications, newest first, filtered by ``job_offer_id``, ``applicant_id`` or ``status``."""
        stmt = QueryBuilder.apply_filters(select(JobApplication), JobApplication, filters or {})
        stmt = QueryBuilder.apply_pagination(stmt.order_by(JobApplication.applied_at.desc()), limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for(self, job_offer_id: str, applicant_id: str) -> Optional[JobApplication]:
        stmt = select(JobApplication).where(
            JobApplication.job_offer_id == job_offer_id, JobApplication.applicant_id == applicant_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def offers_applied_by(self, applicant_id: str, offer_ids: List[str]) -> Set[str]:
        """Subset of ``offer_ids`` the user has applied to."""
        if not offer_ids:
            return set()
        stmt = select(JobApplication.job_offer_id).where(
            JobApplication.applicant_id == applicant_id, JobApplication.job_offer_id.in_(offer_ids)
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def counts_for_offers(self, offer_ids: List[str]) -> Dict[str, int]:
        if not offer_ids:
            return {}
        stmt = (
            select(JobApplication.job_offer_id, func.count())
            .where(JobApplication.job_offer_id.in_(offer_ids))
            .group_by(JobApplication.job_offer_id)
        )
        result = await self.session.execute(stmt)
        return {offer_id: int(count) for offer_id, count in result.all()}


class WorkRequestRepository(BaseRepository[WorkRequest]):
    """Repository for work request data access operations using SQLModel."""

    def __init__(self, session) -> None:
        super().__init__(session, WorkRequest)

    def _public(self, filters: Dict[str, Any]):
        stmt = select(WorkRequest).where(*_visible(WorkRequest, utc_now()))
        stmt = QueryBuilder.apply_filters(
            stmt, WorkRequest, {key: filters.get(key) for key in ("category", "voivodeship", "type")}
        )
        if filters.get("city"):
            stmt = stmt.where(WorkRequest.city.ilike(f"%{filters['city']}%"))
        if filters.get("budget_min") is not None:
            stmt = stmt.where(WorkRequest.budget_min >= filters["budget_min"])
        if filters.get("budget_max") is not None:
            stmt = stmt.where(WorkRequest.budget_max <= filters["budget_max"])
        return QueryBuilder.apply_search(
            stmt, [WorkRequest.title, WorkRequest.description, WorkRequest.city], filters.get("search")
        )

    async def list(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[WorkRequest]:
        """List publicly visible work requests.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: ``category``, ``voivodeship``, ``city``, ``type``,
                ``budget_min``, ``budget_max``, ``search``, ``sort_by``, ``sort_order``

        Returns:
            List of WorkRequest instances
        """
        filters = filters or {}
        stmt = self._public(filters).order_by(
            _ordering(WorkRequest, filters.get("sort_by"), filters.get("sort_order"))
        )
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_public(self, filters: Optional[Dict[str, Any]] = None) -> int:
        result = await self.session.execute(QueryBuilder.count_statement(self._public(filters or {})))
        return int(result.scalar_one())

    async def get_visible(self, request_id: str) -> Optional[WorkRequest]:
        stmt = select(WorkRequest).where(WorkRequest.id == request_id, *_visible(WorkRequest, utc_now()))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_created_by(
        self,
        user_id: str,
        company_id: Optional[str] = None,
        status: str = "all",
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> List[WorkRequest]:
        """Requests authored by a user; ``status`` is ``all``, ``active`` or ``inactive``."""
        stmt = select(WorkRequest).where(WorkRequest.created_by_id == user_id)
        if company_id:
            stmt = stmt.where(WorkRequest.company_id == company_id)
        if status == "active":
            stmt = stmt.where(WorkRequest.is_active == True)  # noqa: E712
        elif status == "inactive":
            stmt = stmt.where(WorkRequest.is_active == False)  # noqa: E712
        stmt = stmt.order_by(_ordering(WorkRequest, sort_by, sort_order))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_active_created_by(self, user_id: str) -> int:
        return await self.count(WorkRequest.created_by_id == user_id, WorkRequest.is_active == True)  # noqa: E712

    async def message_counts(self, request_ids: List[str]) -> Dict[str, int]:
        if not request_ids:
            return {}
        stmt = (
            select(Message.work_request_id, func.count())
            .where(Message.work_request_id.in_(request_ids))
            .group_by(Message.work_request_id)
        )
        result = await self.session.execute(stmt)
        return {request_id: int(count) for request_id, count in result.all()}

    async def delete_with_related(self, request: WorkRequest) -> None:
        """Remove a request with the messages about it."""
        await self.session.execute(delete(Message).where(Message.work_request_id == request.id))
        await self.session.delete(request)
        await self.session.commit()
