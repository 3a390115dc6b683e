"""
Job Offers API Endpoints.

The public job board plus the management side used by companies: publishing
offers, reviewing applications and answering applicants. Listing and detail
endpoints are open to anonymous visitors.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import column_values, utc_now
from buildboss.core.database.entities.jobs import JobApplication, JobOffer
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories import (
    CompanyRepository,
    JobApplicationRepository,
    JobOfferRepository,
    UserRepository,
)
from buildboss.core.errors import BadRequestError, ForbiddenError, NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import (
    EmploymentType,
    ExperienceLevel,
    NotificationType,
    ResourceType,
)
from buildboss.core.models.io import (
    CompanyRead,
    JobApplicationCreate,
    JobApplicationRead,
    JobApplicationUpdate,
    JobOfferCreate,
    JobOfferRead,
    JobOfferUpdate,
    Pagination,
    UserSummary,
    offset_for,
)
from buildboss.server.core.constant import JOB_CATEGORIES, VOIVODESHIPS
from buildboss.server.services.access import require_editor, resolve_access
from buildboss.server.services.deps import CurrentUserDep, OptionalUserDep, SessionDep
from buildboss.server.services.notifications import create_notification
from buildboss.server.services.subscription_limits import check_resource_limit

logger = get_logger(__name__)

router = APIRouter(tags=["jobs"])


async def _offer_reads(session: AsyncSession, offers: List[JobOffer]) -> List[JobOfferRead]:
    """Offers with their company and author attached."""
    companies = CompanyRepository(session)
    authors = await UserRepository(session).get_many([offer.created_by_id for offer in offers])
    items = []
    for offer in offers:
        read = JobOfferRead.model_validate(offer)
        company = await companies.get_by_id(offer.company_id)
        read.company = CompanyRead.model_validate(company) if company else None
        author = authors.get(offer.created_by_id)
        read.created_by = UserSummary.model_validate(author) if author else None
        items.append(read)
    return items


async def _managed_offer(session: AsyncSession, offer_id: str, user: User) -> JobOffer:
    """
    Offer the user may manage: its author or an editor of its company.

    Raises:
        NotFoundError: The offer does not exist
        ForbiddenError: The user is neither the author nor an editor
    """
    offer = await JobOfferRepository(session).get_by_id(offer_id)
    if offer is None:
        raise NotFoundError("Job offer not found")
    if offer.created_by_id == user.id:
        return offer
    access = await resolve_access(session, offer.company_id, user)
    if access is None or not access.can_edit:
        raise ForbiddenError("You do not have permission to manage this job offer")
    return offer


@router.get(
    "",
    summary="List Job Offers",
    description="Public job board: active, public and not expired offers with filters and pagination.",
    response_description="Offers and pagination metadata.",
)
async def list_offers(
    session: SessionDep,
    user: OptionalUserDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=50),
    category: Optional[str] = None,
    voivodeship: Optional[str] = None,
    city: Optional[str] = None,
    employment_type: Optional[EmploymentType] = None,
    experience_level: Optional[ExperienceLevel] = None,
    salary_min: Optional[float] = Query(default=None, ge=0),
    salary_max: Optional[float] = Query(default=None, ge=0),
    search: Optional[str] = Query(default=None, max_length=100),
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = Query(default=None, pattern="^(asc|desc)$"),
):
    """
    List job offers.

    Signed-in callers also get ``has_applied`` on every offer.
    """
    filters = column_values(
        {
            "category": category,
            "voivodeship": voivodeship,
            "city": city,
            "employment_type": employment_type,
            "experience_level": experience_level,
            "salary_min": salary_min,
            "salary_max": salary_max,
            "search": search,
            "sort_by": sort_by,
            "sort_order": sort_order,
        }
    )
    offers_repo = JobOfferRepository(session)
    total = await offers_repo.count_public(filters)
    offers = await offers_repo.list(limit=limit, offset=offset_for(page, limit), filters=filters)
    items = await _offer_reads(session, offers)
    if user is not None:
        applied = await JobApplicationRepository(session).offers_applied_by(user.id, [o.id for o in offers])
        for item in items:
            item.has_applied = item.id in applied
    return {"offers": items, "pagination": Pagination.build(page, limit, total)}


@router.get("/categories", summary="Job Categories", description="Job categories with display labels.")
async def categories():
    return {"categories": [{"value": key, "label": label} for key, label in JOB_CATEGORIES.items()]}


@router.get("/voivodeships", summary="Voivodeships", description="Polish voivodeships used for locations.")
async def voivodeships():
    return {"voivodeships": VOIVODESHIPS}


@router.get(
    "/my/offers",
    summary="My Job Offers",
    description="Offers published by the signed-in user, with application counts.",
)
async def my_offers(user: CurrentUserDep, session: SessionDep):
    offers = await JobOfferRepository(session).list_created_by(user.id)
    counts = await JobApplicationRepository(session).counts_for_offers([offer.id for offer in offers])
    items = await _offer_reads(session, offers)
    for item in items:
        item.applications_count = counts.get(item.id, 0)
    return {"offers": items}


@router.get(
    "/{offer_id}",
    response_model=JobOfferRead,
    summary="Get Job Offer",
    responses={404: {"description": "Offer not found, inactive or expired"}},
)
async def get_offer(offer_id: str, session: SessionDep, user: OptionalUserDep) -> JobOfferRead:
    offer = await JobOfferRepository(session).get_visible(offer_id)
    if offer is None:
        raise NotFoundError("Job offer not found")
    read = (await _offer_reads(session, [offer]))[0]
    if user is not None:
        read.has_applied = await JobApplicationRepository(session).get_for(offer.id, user.id) is not None
    return read


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=JobOfferRead,
    summary="Publish Job Offer",
    description="Publish an offer on behalf of a company the user may edit.",
    responses={403: {"description": "No edit permission or plan limit reached"}},
)
async def create_offer(payload: JobOfferCreate, user: CurrentUserDep, session: SessionDep) -> JobOfferRead:
    await check_resource_limit(session, user, ResourceType.JOB_OFFERS)
    await require_editor(session, payload.company_id, user)
    offer = await JobOfferRepository(session).create(
        JobOffer(**column_values(payload.model_dump()), created_by_id=user.id)
    )
    logger.info(f"Job offer {offer.id} published by user {user.id}")
    return (await _offer_reads(session, [offer]))[0]


@router.put(
    "/{offer_id}",
    response_model=JobOfferRead,
    summary="Update Job Offer",
    description="Edit an offer. Allowed for its author and editors of its company.",
)
async def update_offer(
    offer_id: str, payload: JobOfferUpdate, user: CurrentUserDep, session: SessionDep
) -> JobOfferRead:
    offer = await _managed_offer(session, offer_id, user)
    offer = await JobOfferRepository(session).apply_update(
        offer, column_values(payload.model_dump(exclude_unset=True))
    )
    return (await _offer_reads(session, [offer]))[0]


@router.delete(
    "/{offer_id}",
    summary="Delete Job Offer",
    description="Delete an offer together with its applications and related messages.",
)
async def delete_offer(offer_id: str, user: CurrentUserDep, session: SessionDep):
    offer = await _managed_offer(session, offer_id, user)
    await JobOfferRepository(session).delete_with_related(offer)
    logger.info(f"Job offer {offer_id} deleted by user {user.id}")
    return {"success": True, "message": "Job offer deleted"}


@router.post(
    "/{offer_id}/apply",
    status_code=status.HTTP_201_CREATED,
    response_model=JobApplicationRead,
    summary="Apply",
    description="Apply to a visible job offer. One application per user and offer.",
    responses={400: {"description": "Already applied"}, 404: {"description": "Offer not found"}},
)
async def apply(
    offer_id: str, payload: JobApplicationCreate, user: CurrentUserDep, session: SessionDep
) -> JobApplicationRead:
    offer = await JobOfferRepository(session).get_visible(offer_id)
    if offer is None:
        raise NotFoundError("Job offer not found")
    applications = JobApplicationRepository(session)
    if await applications.get_for(offer.id, user.id):
        raise BadRequestError("You have already applied to this job offer")

    application = await applications.create(
        JobApplication(job_offer_id=offer.id, applicant_id=user.id, **payload.model_dump())
    )
    applicant_name = " ".join(filter(None, [user.first_name, user.last_name])) or user.email
    await create_notification(
        session,
        offer.created_by_id,
        NotificationType.JOB_APPLICATION,
        "New job application",
        f"{applicant_name} applied to '{offer.title}'",
        {"job_offer_id": offer.id, "application_id": application.id},
    )
    read = JobApplicationRead.model_validate(application)
    read.applicant = UserSummary.model_validate(user)
    return read


@router.get(
    "/{offer_id}/applications",
    summary="List Applications",
    description="Applications to an offer. Allowed for its author and editors of its company.",
)
async def list_applications(offer_id: str, user: CurrentUserDep, session: SessionDep):
    offer = await _managed_offer(session, offer_id, user)
    applications = await JobApplicationRepository(session).list(filters={"job_offer_id": offer.id})
    applicants = await UserRepository(session).get_many([a.applicant_id for a in applications])
    items = []
    for application in applications:
        read = JobApplicationRead.model_validate(application)
        applicant = applicants.get(application.applicant_id)
        read.applicant = UserSummary.model_validate(applicant) if applicant else None
        items.append(read)
    return {"applications": items}


@router.put(
    "/applications/{application_id}",
    response_model=JobApplicationRead,
    summary="Review Application",
    description="Set an application's status and notes; the applicant is notified.",
)
async def review_application(
    application_id: str, payload: JobApplicationUpdate, user: CurrentUserDep, session: SessionDep
) -> JobApplicationRead:
    applications = JobApplicationRepository(session)
    application = await applications.get_by_id(application_id)
    if application is None:
        raise NotFoundError("Application not found")
    offer = await _managed_offer(session, application.job_offer_id, user)

    changes = column_values(payload.model_dump(exclude_unset=True))
    changes["reviewed_at"] = utc_now()
    application = await applications.apply_update(application, changes)
    await create_notification(
        session,
        application.applicant_id,
        NotificationType.APPLICATION_STATUS,
        "Application status changed",
        f"Your application to '{offer.title}' is now {application.status}",
        {"job_offer_id": offer.id, "application_id": application.id, "status": application.status},
    )
    return JobApplicationRead.model_validate(application)
