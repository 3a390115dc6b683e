"""
Work Requests API Endpoints.

Clients publish commissions ("work requests") that contractors browse and
answer through direct messages. Only the author can change or remove a
request.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import column_values
from buildboss.core.database.entities.users import User
from buildboss.core.database.entities.work_requests import WorkRequest
from buildboss.core.database.repositories import CompanyRepository, UserRepository, WorkRequestRepository
from buildboss.core.errors import ForbiddenError, NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import ResourceType, WorkRequestType
from buildboss.core.models.io import (
    CompanyRead,
    Pagination,
    UserSummary,
    WorkRequestCreate,
    WorkRequestRead,
    WorkRequestUpdate,
    offset_for,
)
from buildboss.server.core.constant import VOIVODESHIPS, WORK_CATEGORIES
from buildboss.server.services.access import resolve_access
from buildboss.server.services.deps import CurrentUserDep, OptionalUserDep, SessionDep
from buildboss.server.services.subscription_limits import check_resource_limit

logger = get_logger(__name__)

router = APIRouter(tags=["work-requests"])


async def _request_reads(
    session: AsyncSession, requests: List[WorkRequest], viewer: Optional[User] = None
) -> List[WorkRequestRead]:
    """Requests with company, author and ``can_contact`` for the viewer."""
    companies = CompanyRepository(session)
    authors = await UserRepository(session).get_many([request.created_by_id for request in requests])
    items = []
    for request in requests:
        read = WorkRequestRead.model_validate(request)
        if request.company_id:
            company = await companies.get_by_id(request.company_id)
            read.company = CompanyRead.model_validate(company) if company else None
        author = authors.get(request.created_by_id)
        read.created_by = UserSummary.model_validate(author) if author else None
        read.can_contact = viewer is not None and viewer.id != request.created_by_id
        items.append(read)
    return items


async def _authored_request(session: AsyncSession, request_id: str, user: User) -> WorkRequest:
    request = await WorkRequestRepository(session).get_by_id(request_id)
    if request is None:
        raise NotFoundError("Work request not found")
    if request.created_by_id != user.id:
        raise ForbiddenError("Only the author can change this work request")
    return request


@router.get(
    "",
    summary="List Work Requests",
    description="Public board of active, public and not expired work requests.",
    response_description="Requests and pagination metadata.",
)
async def list_requests(
    session: SessionDep,
    user: OptionalUserDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=50),
    category: Optional[str] = None,
    voivodeship: Optional[str] = None,
    city: Optional[str] = None,
    type: Optional[WorkRequestType] = None,
    budget_min: Optional[float] = Query(default=None, ge=0),
    budget_max: Optional[float] = Query(default=None, ge=0),
    search: Optional[str] = Query(default=None, max_length=100),
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = Query(default=None, pattern="^(asc|desc)$"),
):
    filters = column_values(
        {
            "category": category,
            "voivodeship": voivodeship,
            "city": city,
            "type": type,
            "budget_min": budget_min,
            "budget_max": budget_max,
            "search": search,
            "sort_by": sort_by,
            "sort_order": sort_order,
        }
    )
    requests_repo = WorkRequestRepository(session)
    total = await requests_repo.count_public(filters)
    requests = await requests_repo.list(limit=limit, offset=offset_for(page, limit), filters=filters)
    return {
        "requests": await _request_reads(session, requests, user),
        "pagination": Pagination.build(page, limit, total),
    }


@router.get("/categories", summary="Work Categories", description="Work request categories with display labels.")
async def categories():
    return {"categories": [{"value": key, "label": label} for key, label in WORK_CATEGORIES.items()]}


@router.get("/voivodeships", summary="Voivodeships", description="Polish voivodeships used for locations.")
async def voivodeships():
    return {"voivodeships": VOIVODESHIPS}


@router.get(
    "/my/requests",
    summary="My Work Requests",
    description="Requests authored by the signed-in user with message counts.",
)
async def my_requests(
    user: CurrentUserDep,
    session: SessionDep,
    company_id: Optional[str] = None,
    status_filter: str = Query(default="all", alias="status", pattern="^(all|active|inactive)$"),
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = Query(default=None, pattern="^(asc|desc)$"),
):
    requests_repo = WorkRequestRepository(session)
    requests = await requests_repo.list_created_by(
        user.id, company_id=company_id, status=status_filter, sort_by=sort_by, sort_order=sort_order
    )
    counts = await requests_repo.message_counts([request.id for request in requests])
    items = await _request_reads(session, requests, user)
    for item in items:
        item.messages_count = counts.get(item.id, 0)
    return {"requests": items}


@router.get(
    "/{request_id}",
    response_model=WorkRequestRead,
    summary="Get Work Request",
    responses={404: {"description": "Request not found, inactive or expired"}},
)
async def get_request(request_id: str, session: SessionDep, user: OptionalUserDep) -> WorkRequestRead:
    request = await WorkRequestRepository(session).get_visible(request_id)
    if request is None:
        raise NotFoundError("Work request not found")
    return (await _request_reads(session, [request], user))[0]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=WorkRequestRead,
    summary="Publish Work Request",
    description="Publish a work request, optionally on behalf of a company the user works for.",
    responses={403: {"description": "Not part of the company or plan limit reached"}},
)
async def create_request(payload: WorkRequestCreate, user: CurrentUserDep, session: SessionDep) -> WorkRequestRead:
    await check_resource_limit(session, user, ResourceType.WORK_REQUESTS)
    if payload.company_id:
        access = await resolve_access(session, payload.company_id, user)
        if access is None or not (access.is_owner or access.worker is not None):
            raise ForbiddenError("You do not belong to this company")
    request = await WorkRequestRepository(session).create(
        WorkRequest(**column_values(payload.model_dump()), created_by_id=user.id)
    )
    logger.info(f"Work request {request.id} published by user {user.id}")
    return (await _request_reads(session, [request], user))[0]


@router.put(
    "/{request_id}",
    response_model=WorkRequestRead,
    summary="Update Work Request",
    description="Edit a work request. Author only.",
    responses={403: {"description": "Not the author"}, 404: {"description": "Request not found"}},
)
async def update_request(
    request_id: str, payload: WorkRequestUpdate, user: CurrentUserDep, session: SessionDep
) -> WorkRequestRead:
    request = await _authored_request(session, request_id, user)
    request = await WorkRequestRepository(session).apply_update(
        request, column_values(payload.model_dump(exclude_unset=True))
    )
    return (await _request_reads(session, [request], user))[0]


@router.delete(
    "/{request_id}",
    summary="Delete Work Request",
    description="Delete a work request and the messages about it. Author only.",
    responses={403: {"description": "Not the author"}, 404: {"description": "Request not found"}},
)
async def delete_request(request_id: str, user: CurrentUserDep, session: SessionDep):
    request = await _authored_request(session, request_id, user)
    await WorkRequestRepository(session).delete_with_related(request)
    logger.info(f"Work request {request_id} deleted by user {user.id}")
    return {"success": True, "message": "Work request deleted"}
