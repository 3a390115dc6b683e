"""
Request dependencies.

Provides the database session and the authenticated principal (platform user
or plans administrator) to API endpoints.

Bearer token semantics for platform users:
- no token: 401
- a token that cannot be decoded or has expired: 403
- a valid token for an account that no longer exists: 401
"""

from __future__ import annotations

from typing import Annotated, Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database import get_session
from buildboss.core.database.entities.admin import PlansAdmin
from buildboss.core.database.entities.users import User
from buildboss.core.logging_config import get_security_logger
from buildboss.core.models.domain.enums import UserRole
from buildboss.core.security import TokenError, decode_access_token, decode_admin_token

security_logger = get_security_logger()

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]
CredentialsDep = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def get_current_user(credentials: CredentialsDep, session: SessionDep) -> User:
    """Resolve the platform user from the ``Authorization: Bearer`` header."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token is required")
    try:
        user_id = decode_access_token(credentials.credentials)
    except TokenError:
        security_logger.warning("Rejected invalid or expired access token")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")

    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User no longer exists")
    return user


async def get_optional_user(credentials: CredentialsDep, session: SessionDep) -> Optional[User]:
    """Like ``get_current_user`` but yields ``None`` instead of failing."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        user_id = decode_access_token(credentials.credentials)
    except TokenError:
        return None
    return await session.get(User, user_id)


CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]


def require_role(*roles: UserRole) -> Callable:
    """Build a dependency that admits only users holding one of ``roles``."""
    allowed = {role.value for role in roles}

    async def _check_role(user: CurrentUserDep) -> User:
        if user.role not in allowed:
            security_logger.warning(f"User {user.id} with role {user.role} denied, requires one of {sorted(allowed)}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _check_role


async def require_email_confirmed(user: CurrentUserDep) -> User:
    """Admit only users who confirmed their e-mail address."""
    if not user.is_email_confirmed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Email address is not confirmed")
    return user


ConfirmedUserDep = Annotated[User, Depends(require_email_confirmed)]


async def get_current_admin(credentials: CredentialsDep, session: SessionDep) -> PlansAdmin:
    """Resolve the plans administrator from an admin token; every failure is 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin token is required")
    try:
        admin_id = decode_admin_token(credentials.credentials)
    except TokenError:
        security_logger.warning("Rejected invalid admin token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid admin token")

    admin = await session.get(PlansAdmin, admin_id)
    if admin is None or not admin.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin account is not active")
    return admin


CurrentAdminDep = Annotated[PlansAdmin, Depends(get_current_admin)]
