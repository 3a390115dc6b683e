"""
User Profile API Endpoints.

Profile read/update for the signed-in user and the e-mail search used when
inviting people to a company or starting a conversation.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from buildboss.core.database.repositories import UserRepository, WorkerRepository
from buildboss.core.models.io import ProfileUpdate, UserRead, UserSearchResult
from buildboss.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter(tags=["users"])

SEARCH_MIN_LENGTH = 3
SEARCH_LIMIT = 10


@router.get(
    "/profile",
    response_model=UserRead,
    summary="Get Profile",
    description="Profile of the signed-in user.",
)
async def get_profile(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.put(
    "/profile",
    response_model=UserRead,
    summary="Update Profile",
    description="Change first name, last name or avatar. Blank values clear the field.",
)
async def update_profile(payload: ProfileUpdate, user: CurrentUserDep, session: SessionDep) -> UserRead:
    changes = payload.model_dump(exclude_unset=True)
    user = await UserRepository(session).apply_update(user, changes)
    return UserRead.model_validate(user)


@router.get(
    "/search",
    summary="Search Users",
    description="Find confirmed users by e-mail fragment, optionally annotated with membership in a company.",
    responses={400: {"description": "Search term shorter than 3 characters"}},
)
async def search_users(
    user: CurrentUserDep,
    session: SessionDep,
    email: str = Query(default="", description="E-mail fragment"),
    company_id: Optional[str] = Query(default=None, description="Annotate results with this company's membership"),
):
    """
    Search users by e-mail.

    The caller is never part of the results and at most 10 users are returned.
    """
    term = email.strip()
    if len(term) < SEARCH_MIN_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Search term must be at least {SEARCH_MIN_LENGTH} characters long",
        )
    found = await UserRepository(session).search_confirmed_by_email(term, exclude_user_id=user.id, limit=SEARCH_LIMIT)
    results = [UserSearchResult.model_validate(candidate) for candidate in found]
    if company_id:
        memberships = await WorkerRepository(session).memberships_in(company_id, [r.id for r in results])
        for result in results:
            worker = memberships.get(result.id)
            result.is_in_company = worker is not None
            result.company_status = worker.status if worker else None
    return {"users": results}
