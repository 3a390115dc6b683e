"""
Company access rules.

A user is a *member* of a company when they created it or hold an ``ACTIVE``
worker row in it, and an *editor* when they created it or are an ``ACTIVE``
worker with ``can_edit``. Helpers raise domain errors so routers can call them
directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.entities.companies import Company, Worker
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories import CompanyRepository, WorkerRepository
from buildboss.core.errors import ForbiddenError, NotFoundError
from buildboss.core.logging_config import get_security_logger
from buildboss.core.models.domain.enums import WorkerStatus

security_logger = get_security_logger()


@dataclass
class CompanyAccess:
    """The caller's relationship to one company."""

    company: Company
    worker: Optional[Worker] = None
    is_owner: bool = False

    @property
    def is_member(self) -> bool:
        return self.is_owner or (self.worker is not None and self.worker.status == WorkerStatus.ACTIVE.value)

    @property
    def can_edit(self) -> bool:
        return self.is_owner or (self.is_member and bool(self.worker and self.worker.can_edit))

    @property
    def role(self) -> str:
        return "OWNER" if self.is_owner else "WORKER"


async def resolve_access(session: AsyncSession, company_id: str, user: User) -> Optional[CompanyAccess]:
    """Load a company and the user's membership in it; ``None`` if the company does not exist."""
    company = await CompanyRepository(session).get_by_id(company_id)
    if company is None:
        return None
    if company.created_by_id == user.id:
        return CompanyAccess(company=company, is_owner=True)
    worker = await WorkerRepository(session).get_membership(user.id, company_id)
    return CompanyAccess(company=company, worker=worker)


async def require_member(session: AsyncSession, company_id: str, user: User) -> CompanyAccess:
    """Company visible to the user, otherwise 404 so its existence is not revealed."""
    access = await resolve_access(session, company_id, user)
    if access is None or not access.is_member:
        raise NotFoundError("Company not found or access denied")
    return access


async def require_editor(session: AsyncSession, company_id: str, user: User) -> CompanyAccess:
    """Company the user may edit; 404 when not a member, 403 when read-only."""
    access = await require_member(session, company_id, user)
    if not access.can_edit:
        security_logger.warning(f"User {user.id} denied edit access to company {company_id}")
        raise ForbiddenError("You do not have permission to edit this company")
    return access


async def require_owner(session: AsyncSession, company_id: str, user: User) -> CompanyAccess:
    """Company created by the user; 404 when invisible, 403 for other members."""
    access = await resolve_access(session, company_id, user)
    if access is None:
        raise NotFoundError("Company not found")
    if not access.is_owner:
        if not access.is_member:
            raise NotFoundError("Company not found or access denied")
        security_logger.warning(f"User {user.id} denied owner action on company {company_id}")
        raise ForbiddenError("Only the company owner can perform this action")
    return access
