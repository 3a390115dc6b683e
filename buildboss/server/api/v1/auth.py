"""
Authentication API Endpoints.

Registration with e-mail confirmation, password login, Google sign-in and the
``/me`` profile used by the web client after every page load. Access tokens
are stateless JWTs, so logout is only an acknowledgement.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories import CompanyRepository, UserRepository, WorkerRepository
from buildboss.core.logging_config import get_logger, get_security_logger
from buildboss.core.models.domain.enums import UserRole
from buildboss.core.models.io import (
    CompanyRead,
    LoginRequest,
    PlanRead,
    RegisterRequest,
    SubscriptionRead,
    UserRead,
    VerifyPasswordRequest,
    WorkerRead,
)
from buildboss.core.security import (
    create_access_token,
    generate_confirmation_token,
    hash_password,
    verify_password,
)
from buildboss.server.core.config import settings
from buildboss.server.middleware.rate_limit import auth_rate_limit, limiter
from buildboss.server.services.deps import CurrentUserDep, SessionDep
from buildboss.server.services.email import EmailService, get_email_service
from buildboss.server.services.google_oauth import GoogleOAuthClient, GoogleOAuthError, get_google_oauth_client
from buildboss.server.services.subscription_limits import ensure_subscription, get_subscription_with_plan

logger = get_logger(__name__)
security_logger = get_security_logger()

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account with e-mail and password and send the confirmation e-mail.",
    response_description="The new user and an access token.",
    responses={
        400: {"description": "Validation error or e-mail already registered"},
        429: {"description": "Too many attempts"},
    },
)
@limiter.limit(auth_rate_limit)
async def register(
    request: Request,
    payload: RegisterRequest,
    session: SessionDep,
    email_service: EmailService = Depends(get_email_service),
):
    """
    Register a new account.

    The account starts with role ``WORKER`` and an unconfirmed e-mail. The
    response already carries a token so the client can sign the user in.
    """
    users = UserRepository(session)
    if await users.get_by_email(payload.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

    token = generate_confirmation_token()
    user = await users.create(
        User(
            email=payload.email,
            password=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=UserRole.WORKER.value,
            confirmation_token=token,
        )
    )
    email_sent = await email_service.send_confirmation_email(user.email, token, user.first_name)
    logger.info(f"User registered: {user.id}")
    return {
        "success": True,
        "message": "Account created. Check your inbox to confirm the e-mail address.",
        "data": {
            "user": UserRead.model_validate(user),
            "token": create_access_token(user.id),
            "email_sent": email_sent,
        },
    }


@router.post(
    "/login",
    summary="Log In",
    description="Authenticate with e-mail and password.",
    response_description="The user and an access token.",
    responses={401: {"description": "Invalid credentials"}, 429: {"description": "Too many attempts"}},
)
@limiter.limit(auth_rate_limit)
async def login(request: Request, payload: LoginRequest, session: SessionDep):
    """
    Log in with e-mail and password.

    Accounts created through Google sign-in have no password and cannot use
    this endpoint.
    """
    users = UserRepository(session)
    user = await users.get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password):
        security_logger.warning(f"Failed login attempt for {payload.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    user = await users.apply_update(user, {"last_login_at": utc_now()})
    return {"success": True, "data": {"user": UserRead.model_validate(user), "token": create_access_token(user.id)}}


@router.get(
    "/confirm/{token}",
    summary="Confirm E-mail",
    description="Consume an e-mail confirmation token.",
    responses={400: {"description": "Unknown or already used token"}},
)
async def confirm_email(token: str, session: SessionDep):
    users = UserRepository(session)
    user = await users.get_by_confirmation_token(token)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired confirmation token")
    user = await users.apply_update(user, {"is_email_confirmed": True, "confirmation_token": None})
    logger.info(f"E-mail confirmed for user {user.id}")
    return {"success": True, "message": "Email confirmed", "data": {"user": UserRead.model_validate(user)}}


@router.post(
    "/resend-confirmation",
    summary="Resend Confirmation",
    description="Issue a new confirmation token and send it by e-mail.",
    responses={400: {"description": "E-mail already confirmed"}},
)
async def resend_confirmation(
    user: CurrentUserDep,
    session: SessionDep,
    email_service: EmailService = Depends(get_email_service),
):
    if user.is_email_confirmed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already confirmed")
    token = generate_confirmation_token()
    user = await UserRepository(session).apply_update(user, {"confirmation_token": token})
    email_sent = await email_service.send_confirmation_email(user.email, token, user.first_name)
    return {"success": True, "message": "Confirmation email sent", "email_sent": email_sent}


@router.get(
    "/me",
    summary="Current User",
    description="Profile of the signed-in user with subscription, owned companies and memberships.",
    response_description="User profile object.",
)
async def me(user: CurrentUserDep, session: SessionDep):
    """
    Get the signed-in user's profile.

    Users without a subscription are put on the free plan first.
    """
    await ensure_subscription(session, user.id)
    subscription, plan = await get_subscription_with_plan(session, user.id)

    owned = await CompanyRepository(session).list_owned(user.id)
    workers = await WorkerRepository(session).list_for_user(user.id)
    companies = {company.id: company for company in owned}
    for worker in workers:
        if worker.company_id not in companies:
            company = await CompanyRepository(session).get_by_id(worker.company_id)
            if company is not None:
                companies[company.id] = company

    subscription_read = SubscriptionRead.model_validate(subscription)
    subscription_read.plan = PlanRead.model_validate(plan) if plan else None
    memberships = []
    for worker in workers:
        read = WorkerRead.model_validate(worker)
        company = companies.get(worker.company_id)
        read.company = CompanyRead.model_validate(company) if company else None
        memberships.append(read)

    return {
        "success": True,
        "data": {
            "user": UserRead.model_validate(user),
            "subscription": subscription_read,
            "owned_companies": [CompanyRead.model_validate(company) for company in owned],
            "owned_companies_count": len(owned),
            "workers": memberships,
        },
    }


@router.post("/logout", summary="Log Out", description="Acknowledge logout; tokens are stateless.")
async def logout(user: CurrentUserDep):
    logger.debug(f"User {user.id} logged out")
    return {"success": True, "message": "Logged out"}


@router.post(
    "/verify-password",
    summary="Verify Password",
    description="Check the signed-in user's password, e.g. before a sensitive action.",
    responses={400: {"description": "Password missing"}, 401: {"description": "Wrong password"}},
)
async def verify_user_password(payload: VerifyPasswordRequest, user: CurrentUserDep):
    if not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Password is required")
    if not verify_password(payload.password, user.password):
        security_logger.warning(f"Password verification failed for user {user.id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    return {"success": True, "valid": True}


@router.get(
    "/google",
    summary="Google Sign-in",
    description="Redirect to the Google consent screen.",
    responses={307: {"description": "Redirect to Google"}, 503: {"description": "Google sign-in not configured"}},
)
async def google_login(google: Optional[GoogleOAuthClient] = Depends(get_google_oauth_client)):
    if google is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Google sign-in is not configured")
    return RedirectResponse(google.authorization_url())


@router.get(
    "/google/callback",
    summary="Google Sign-in Callback",
    description="Finish Google sign-in and redirect to the web client with a token.",
    responses={307: {"description": "Redirect to the web client"}},
)
async def google_callback(
    session: SessionDep,
    code: Optional[str] = None,
    google: Optional[GoogleOAuthClient] = Depends(get_google_oauth_client),
):
    """
    Complete the Google authorization-code flow.

    The Google account is matched by Google id, then linked by e-mail, and
    otherwise a new confirmed account without password is created.
    """
    client_url = settings.client_url.rstrip("/")
    failure = RedirectResponse(f"{client_url}/login?{urlencode({'error': 'google_auth_failed'})}")
    if google is None or not code:
        return failure
    try:
        profile = await google.fetch_profile(code)
    except GoogleOAuthError as e:
        security_logger.warning(f"Google sign-in failed: {e}")
        return failure

    users = UserRepository(session)
    user = await users.get_by_google_id(profile.google_id)
    if user is None:
        user = await users.get_by_email(profile.email)
        if user is not None:
            user = await users.apply_update(
                user,
                {"google_id": profile.google_id, "is_email_confirmed": True, "avatar": user.avatar or profile.avatar},
            )
        else:
            user = await users.create(
                User(
                    email=profile.email,
                    google_id=profile.google_id,
                    first_name=profile.first_name,
                    last_name=profile.last_name,
                    avatar=profile.avatar,
                    is_email_confirmed=True,
                    role=UserRole.WORKER.value,
                )
            )
            logger.info(f"User created from Google sign-in: {user.id}")
    user = await users.apply_update(user, {"last_login_at": utc_now()})
    token = create_access_token(user.id)
    return RedirectResponse(f"{client_url}/auth/callback?{urlencode({'token': token})}")
