"""
Companies API Endpoints.

CRUD over companies plus worker management: invitations (single and bulk),
permission changes, removal, and the invitee's accept/reject actions.

Access levels:
- member: owner or ``ACTIVE`` worker (read access)
- editor: owner or ``ACTIVE`` worker with ``can_edit``
- owner: the user who created the company
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.companies import Company, Worker
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories import CompanyRepository, UserRepository, WorkerRepository
from buildboss.core.errors import BadRequestError, BuildBossError, ConflictError, NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import NotificationType, ResourceType, WorkerStatus
from buildboss.core.models.io import (
    BulkInviteRequest,
    CompanyCreate,
    CompanyListItem,
    CompanyRead,
    CompanyUpdate,
    InviteWorkerRequest,
    UserSummary,
    WorkerPermissions,
    WorkerRead,
    WorkerUpdate,
)
from buildboss.server.services.access import require_editor, require_member, require_owner
from buildboss.server.services.deps import CurrentUserDep, SessionDep
from buildboss.server.services.email import EmailService, get_email_service
from buildboss.server.services.notifications import create_notification
from buildboss.server.services.subscription_limits import check_resource_limit

logger = get_logger(__name__)

router = APIRouter(tags=["companies"])


def _owner_permissions() -> WorkerPermissions:
    return WorkerPermissions(can_view=True, can_edit=True, can_manage_finance=True)


async def _worker_read(session: AsyncSession, worker: Worker) -> WorkerRead:
    read = WorkerRead.model_validate(worker)
    user = await UserRepository(session).get_by_id(worker.user_id)
    read.user = UserSummary.model_validate(user) if user else None
    return read


@router.get(
    "",
    summary="List Companies",
    description="Companies the user owns or actively works for, with the user's role and permissions.",
)
async def list_companies(user: CurrentUserDep, session: SessionDep):
    companies = await CompanyRepository(session).list(filters={"accessible_by": user.id})
    ids = [company.id for company in companies]
    memberships = {}
    for company_id in ids:
        worker = await WorkerRepository(session).get_membership(user.id, company_id)
        if worker is not None:
            memberships[company_id] = worker
    worker_counts = await CompanyRepository(session).worker_counts(ids)

    items = []
    for company in companies:
        base = CompanyRead.model_validate(company).model_dump()
        if company.created_by_id == user.id:
            role, permissions = "OWNER", _owner_permissions()
        else:
            worker = memberships[company.id]
            role = "WORKER"
            permissions = WorkerPermissions(
                can_view=worker.can_view, can_edit=worker.can_edit, can_manage_finance=worker.can_manage_finance
            )
        items.append(
            CompanyListItem(
                **base,
                user_role=role,
                user_permissions=permissions,
                workers_count=worker_counts.get(company.id, 0),
            )
        )
    return {"companies": items}


@router.get(
    "/{company_id}",
    summary="Get Company",
    description="Company details with its workers.",
    responses={404: {"description": "Company not found or not accessible"}},
)
async def get_company(company_id: str, user: CurrentUserDep, session: SessionDep):
    access = await require_member(session, company_id, user)
    workers = await WorkerRepository(session).list_for_company(company_id)
    return {
        "company": CompanyRead.model_validate(access.company),
        "user_role": access.role,
        "workers": [await _worker_read(session, worker) for worker in workers],
    }


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CompanyRead,
    summary="Create Company",
    description="Create a company owned by the signed-in user.",
    responses={400: {"description": "Validation error or duplicate NIP"}, 403: {"description": "Plan limit reached"}},
)
async def create_company(payload: CompanyCreate, user: CurrentUserDep, session: SessionDep) -> CompanyRead:
    await check_resource_limit(session, user, ResourceType.COMPANIES)
    companies = CompanyRepository(session)
    if payload.nip and await companies.get_by_nip(payload.nip):
        raise ConflictError("A company with this NIP already exists")
    company = await companies.create(Company(**payload.model_dump(), created_by_id=user.id))
    logger.info(f"Company {company.id} created by user {user.id}")
    return CompanyRead.model_validate(company)


@router.put(
    "/{company_id}",
    response_model=CompanyRead,
    summary="Update Company",
    description="Edit company details. Requires edit permission.",
    responses={403: {"description": "No edit permission"}, 404: {"description": "Company not found"}},
)
async def update_company(
    company_id: str, payload: CompanyUpdate, user: CurrentUserDep, session: SessionDep
) -> CompanyRead:
    access = await require_editor(session, company_id, user)
    changes = payload.model_dump(exclude_unset=True)
    companies = CompanyRepository(session)
    if changes.get("nip") and changes["nip"] != access.company.nip:
        existing = await companies.get_by_nip(changes["nip"])
        if existing is not None and existing.id != company_id:
            raise ConflictError("A company with this NIP already exists")
    company = await companies.apply_update(access.company, changes)
    return CompanyRead.model_validate(company)


@router.delete(
    "/{company_id}",
    summary="Delete Company",
    description="Delete a company with its workers, projects, tasks and job offers. Owner only.",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Company not found"}},
)
async def delete_company(company_id: str, user: CurrentUserDep, session: SessionDep):
    access = await require_owner(session, company_id, user)
    await CompanyRepository(session).delete_with_related(access.company)
    logger.info(f"Company {company_id} deleted by user {user.id}")
    return {"success": True, "message": "Company deleted"}


@router.get(
    "/{company_id}/workers",
    summary="List Workers",
    description="Workers of a company the user belongs to.",
)
async def list_workers(company_id: str, user: CurrentUserDep, session: SessionDep):
    await require_member(session, company_id, user)
    workers = await WorkerRepository(session).list_for_company(company_id)
    return {"workers": [await _worker_read(session, worker) for worker in workers]}


async def _invite(
    session: AsyncSession,
    company: Company,
    inviter: User,
    invitation: InviteWorkerRequest,
    email_service: EmailService,
) -> Worker:
    invitee = await UserRepository(session).get_by_email(invitation.email)
    if invitee is None:
        raise NotFoundError("No user with this email address exists")
    workers = WorkerRepository(session)
    if invitee.id == company.created_by_id or await workers.get_membership(invitee.id, company.id):
        raise ConflictError("This user is already a worker of the company or has been invited")

    worker = await workers.create(
        Worker(
            user_id=invitee.id,
            company_id=company.id,
            position=invitation.position,
            status=WorkerStatus.INVITED.value,
            can_view=invitation.can_view,
            can_edit=invitation.can_edit,
            can_manage_finance=invitation.can_manage_finance,
        )
    )
    inviter_name = inviter.full_name or inviter.email
    await email_service.send_invitation_email(invitee.email, company.name, inviter_name)
    await create_notification(
        session,
        invitee.id,
        NotificationType.COMPANY_INVITATION,
        "Zaproszenie do firmy",
        f"{inviter_name} zaprasza Cię do firmy {company.name}",
        {"company_id": company.id, "worker_id": worker.id},
    )
    logger.info(f"User {invitee.id} invited to company {company.id}")
    return worker


@router.post(
    "/{company_id}/invite",
    status_code=status.HTTP_201_CREATED,
    summary="Invite Worker",
    description="Invite a registered user by e-mail. Owner only.",
    responses={
        400: {"description": "Invalid e-mail or user already invited"},
        403: {"description": "Not the owner or plan limit reached"},
        404: {"description": "Company or user not found"},
    },
)
async def invite_worker(
    company_id: str,
    payload: InviteWorkerRequest,
    user: CurrentUserDep,
    session: SessionDep,
    email_service: EmailService = Depends(get_email_service),
):
    access = await require_owner(session, company_id, user)
    await check_resource_limit(session, user, ResourceType.WORKERS)
    worker = await _invite(session, access.company, user, payload, email_service)
    return {"success": True, "worker": await _worker_read(session, worker)}


@router.post(
    "/{company_id}/bulk-invite",
    summary="Invite Several Workers",
    description="Process a list of invitations one by one and report each outcome.",
)
async def bulk_invite(
    company_id: str,
    payload: BulkInviteRequest,
    user: CurrentUserDep,
    session: SessionDep,
    email_service: EmailService = Depends(get_email_service),
):
    """
    Invite several users at once.

    A failing invitation (unknown user, duplicate, plan limit) is reported in
    ``errors`` and does not stop the remaining ones.
    """
    access = await require_owner(session, company_id, user)
    succeeded, errors = [], []
    for invitation in payload.invitations:
        try:
            await check_resource_limit(session, user, ResourceType.WORKERS)
            worker = await _invite(session, access.company, user, invitation, email_service)
        except BuildBossError as e:
            errors.append({"email": invitation.email, "error": e.message})
            continue
        succeeded.append({"email": invitation.email, "worker_id": worker.id})
    return {
        "success": succeeded,
        "errors": errors,
        "summary": {"total": len(payload.invitations), "successful": len(succeeded), "failed": len(errors)},
    }


async def _company_worker(session: AsyncSession, company_id: str, worker_id: str) -> Worker:
    worker = await WorkerRepository(session).get_by_id(worker_id)
    if worker is None or worker.company_id != company_id:
        raise NotFoundError("Worker not found")
    return worker


@router.put(
    "/{company_id}/workers/{worker_id}",
    summary="Update Worker",
    description="Change a worker's position, status or permissions. Owner only.",
)
async def update_worker(
    company_id: str, worker_id: str, payload: WorkerUpdate, user: CurrentUserDep, session: SessionDep
):
    await require_owner(session, company_id, user)
    worker = await _company_worker(session, company_id, worker_id)
    changes = payload.model_dump(exclude_unset=True)
    if "status" in changes and changes["status"] is not None:
        changes["status"] = changes["status"].value
        if changes["status"] == WorkerStatus.ACTIVE.value and worker.joined_at is None:
            changes["joined_at"] = utc_now()
    worker = await WorkerRepository(session).apply_update(worker, changes)
    return {"success": True, "worker": await _worker_read(session, worker)}


@router.delete(
    "/{company_id}/workers/{worker_id}",
    summary="Remove Worker",
    description="Remove a worker from the company. Owner only.",
)
async def remove_worker(company_id: str, worker_id: str, user: CurrentUserDep, session: SessionDep):
    await require_owner(session, company_id, user)
    worker = await _company_worker(session, company_id, worker_id)
    await WorkerRepository(session).delete(worker.id)
    return {"success": True, "message": "Worker removed"}


async def _own_invitation(session: AsyncSession, worker_id: str, user: User) -> Worker:
    worker = await WorkerRepository(session).get_by_id(worker_id)
    if worker is None or worker.user_id != user.id:
        raise NotFoundError("Invitation not found")
    if worker.status != WorkerStatus.INVITED.value:
        raise BadRequestError("This invitation has already been answered")
    return worker


@router.post(
    "/invitations/{worker_id}/accept",
    summary="Accept Invitation",
    description="Join the company as an active worker.",
    responses={400: {"description": "Invitation already answered"}, 404: {"description": "Invitation not found"}},
)
async def accept_invitation(worker_id: str, user: CurrentUserDep, session: SessionDep):
    worker = await _own_invitation(session, worker_id, user)
    worker = await WorkerRepository(session).apply_update(
        worker, {"status": WorkerStatus.ACTIVE.value, "joined_at": utc_now()}
    )
    return {"success": True, "worker": WorkerRead.model_validate(worker)}


@router.post(
    "/invitations/{worker_id}/reject",
    summary="Reject Invitation",
    description="Decline a company invitation.",
    responses={400: {"description": "Invitation already answered"}, 404: {"description": "Invitation not found"}},
)
async def reject_invitation(worker_id: str, user: CurrentUserDep, session: SessionDep):
    worker = await _own_invitation(session, worker_id, user)
    worker = await WorkerRepository(session).apply_update(worker, {"status": WorkerStatus.LEFT.value})
    return {"success": True, "worker": WorkerRead.model_validate(worker)}
