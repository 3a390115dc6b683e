"""
Notifications API Endpoints.

Per-user notification inbox: listing, unread counter, marking read and
clearing.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from buildboss.core.database.repositories import NotificationRepository
from buildboss.core.errors import ForbiddenError, NotFoundError
from buildboss.core.models.io import NotificationRead, NotificationTestCreate, Pagination, offset_for
from buildboss.server.core.config import settings
from buildboss.server.services.deps import CurrentUserDep, SessionDep
from buildboss.server.services.notifications import create_notification

router = APIRouter(tags=["notifications"])


@router.get(
    "",
    summary="List Notifications",
    description="The user's notifications, newest first, with pagination and the unread count.",
)
async def list_notifications(
    user: CurrentUserDep,
    session: SessionDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    unread_only: bool = False,
):
    notifications = NotificationRepository(session)
    filters = {"user_id": user.id, "unread_only": unread_only}
    total = await notifications.count_filtered(filters)
    items = await notifications.list(limit=limit, offset=offset_for(page, limit), filters=filters)
    return {
        "notifications": [NotificationRead.model_validate(item) for item in items],
        "pagination": Pagination.build(page, limit, total),
        "unread_count": await notifications.count_unread(user.id),
    }


@router.get("/unread-count", summary="Unread Notifications")
async def unread_count(user: CurrentUserDep, session: SessionDep):
    return {"count": await NotificationRepository(session).count_unread(user.id)}


@router.put("/mark-all-read", summary="Mark All Read")
async def mark_all_read(user: CurrentUserDep, session: SessionDep):
    count = await NotificationRepository(session).mark_all_read(user.id)
    return {"success": True, "count": count}


@router.delete("/clear-all", summary="Clear Notifications", description="Delete every notification of the user.")
async def clear_all(user: CurrentUserDep, session: SessionDep):
    count = await NotificationRepository(session).clear_all(user.id)
    return {"success": True, "count": count}


@router.put(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Mark Notification Read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_read(notification_id: str, user: CurrentUserDep, session: SessionDep) -> NotificationRead:
    notifications = NotificationRepository(session)
    notification = await notifications.get_for_user(notification_id, user.id)
    if notification is None:
        raise NotFoundError("Notification not found")
    notification = await notifications.apply_update(notification, {"is_read": True})
    return NotificationRead.model_validate(notification)


@router.delete(
    "/{notification_id}",
    summary="Delete Notification",
    responses={404: {"description": "Notification not found"}},
)
async def delete_notification(notification_id: str, user: CurrentUserDep, session: SessionDep):
    notifications = NotificationRepository(session)
    notification = await notifications.get_for_user(notification_id, user.id)
    if notification is None:
        raise NotFoundError("Notification not found")
    await notifications.delete(notification.id)
    return {"success": True, "message": "Notification deleted"}


@router.post(
    "/test",
    status_code=status.HTTP_201_CREATED,
    response_model=NotificationRead,
    summary="Create Test Notification",
    description="Create a notification for the signed-in user. Disabled in production.",
    responses={403: {"description": "Not available in production"}},
)
async def create_test_notification(
    payload: NotificationTestCreate, user: CurrentUserDep, session: SessionDep
) -> NotificationRead:
    if settings.is_production:
        raise ForbiddenError("Test notifications are disabled in production")
    notification = await create_notification(
        session, user.id, payload.type, payload.title, payload.message, payload.data
    )
    return NotificationRead.model_validate(notification)
