"""
Dashboard API Endpoints.

Summary counts and recent activity shown on the signed-in user's dashboard.
"""

from __future__ import annotations

from fastapi import APIRouter

from buildboss.core.database.entities.companies import Worker
from buildboss.core.database.repositories import CompanyRepository, WorkerRepository
from buildboss.core.models.domain.enums import WorkerStatus
from buildboss.core.models.io import CompanyRead, WorkerRead
from buildboss.server.services.access import require_member
from buildboss.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter(tags=["dashboard"])

RECENT_LIMIT = 5


async def _with_companies(session, workers: list[Worker]) -> list[WorkerRead]:
    companies = CompanyRepository(session)
    items = []
    for worker in workers:
        read = WorkerRead.model_validate(worker)
        company = await companies.get_by_id(worker.company_id)
        read.company = CompanyRead.model_validate(company) if company else None
        items.append(read)
    return items


@router.get(
    "/stats",
    summary="Dashboard Statistics",
    description="Company counts by relationship and the number of pending invitations.",
)
async def dashboard_stats(user: CurrentUserDep, session: SessionDep):
    companies = CompanyRepository(session)
    workers = WorkerRepository(session)
    as_owner = await companies.count_owned(user.id)
    total = await companies.count_accessible(user.id)
    return {
        "companies": {"total": total, "as_owner": as_owner, "as_worker": total - as_owner},
        "pending_invitations": await workers.count_for_user(user.id, WorkerStatus.INVITED),
    }


@router.get(
    "/recent-activity",
    summary="Recent Activity",
    description="The most recently updated accessible companies and the latest invitations.",
)
async def recent_activity(user: CurrentUserDep, session: SessionDep):
    recent = await CompanyRepository(session).list(limit=RECENT_LIMIT, filters={"accessible_by": user.id})
    invitations = await WorkerRepository(session).list_invitations(user.id, limit=RECENT_LIMIT)
    return {
        "recent_companies": [CompanyRead.model_validate(company) for company in recent],
        "recent_invitations": await _with_companies(session, invitations),
    }


@router.get(
    "/invitations",
    summary="Pending Invitations",
    description="Company invitations waiting for the user's answer.",
)
async def invitations(user: CurrentUserDep, session: SessionDep):
    pending = await WorkerRepository(session).list_invitations(user.id)
    return {"invitations": await _with_companies(session, pending)}


@router.get(
    "/company-stats/{company_id}",
    summary="Company Worker Statistics",
    description="Worker counts of a company the user belongs to.",
    responses={404: {"description": "Company not found or not accessible"}},
)
async def company_stats(company_id: str, user: CurrentUserDep, session: SessionDep):
    """
    Worker counts of one company.

    ``inactive`` combines ``INACTIVE`` and ``LEFT`` workers.
    """
    access = await require_member(session, company_id, user)
    by_status = await WorkerRepository(session).count_by_status(company_id)
    return {
        "company": CompanyRead.model_validate(access.company),
        "workers": {
            "total": sum(by_status.values()),
            "active": by_status.get(WorkerStatus.ACTIVE.value, 0),
            "invited": by_status.get(WorkerStatus.INVITED.value, 0),
            "inactive": by_status.get(WorkerStatus.INACTIVE.value, 0) + by_status.get(WorkerStatus.LEFT.value, 0),
        },
    }
