"""
Admin Messages API Endpoints.

Plans administrators write messages to platform users; users read them in an
inbox and can reply. ``router`` is the administrator side (admin token) and
``inbox_router`` the user side (user token).
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.admin import AdminMessage, AdminMessageReply, PlansAdmin
from buildboss.core.database.repositories import AdminMessageRepository, UserRepository
from buildboss.core.errors import NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import (
    AdminMessagePriority,
    AdminMessageStatus,
    NotificationType,
    SenderType,
)
from buildboss.core.models.io import (
    AdminMessageCreate,
    AdminMessageRead,
    AdminMessageReplyRead,
    AdminRead,
    Pagination,
    ReplyCreate,
    UserSummary,
    offset_for,
)
from buildboss.server.services.deps import CurrentAdminDep, CurrentUserDep, SessionDep
from buildboss.server.services.notifications import create_notification

logger = get_logger(__name__)

router = APIRouter(tags=["admin-messages"])
inbox_router = APIRouter(tags=["admin-messages"])

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


async def _message_reads(
    session: AsyncSession, messages: List[AdminMessage], with_replies: bool = False
) -> List[AdminMessageRead]:
    """Messages with sender and recipient attached, and optionally their replies."""
    repo = AdminMessageRepository(session)
    recipients = await UserRepository(session).get_many([message.recipient_id for message in messages])
    items = []
    for message in messages:
        read = AdminMessageRead.model_validate(message)
        if message.sender_admin_id:
            sender = await session.get(PlansAdmin, message.sender_admin_id)
            read.sender = AdminRead.model_validate(sender) if sender else None
        recipient = recipients.get(message.recipient_id)
        read.recipient = UserSummary.model_validate(recipient) if recipient else None
        if with_replies:
            read.replies = [AdminMessageReplyRead.model_validate(reply) for reply in await repo.replies(message.id)]
        items.append(read)
    return items


async def _get_message(session: AsyncSession, message_id: str) -> AdminMessage:
    message = await AdminMessageRepository(session).get_by_id(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    return message


@router.get(
    "",
    summary="List Admin Messages",
    description="Messages sent by administrators, newest first, with sender and recipient.",
)
async def list_messages(
    admin: CurrentAdminDep,
    session: SessionDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status_filter: Optional[AdminMessageStatus] = Query(default=None, alias="status"),
    priority: Optional[AdminMessagePriority] = None,
):
    repo = AdminMessageRepository(session)
    filters = {
        "status": status_filter.value if status_filter else None,
        "priority": priority.value if priority else None,
    }
    total = await repo.count_filtered(filters)
    messages = await repo.list(limit=limit, offset=offset_for(page, limit), filters=filters)
    return {"messages": await _message_reads(session, messages), "pagination": Pagination.build(page, limit, total)}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=AdminMessageRead,
    summary="Send Admin Message",
    description="Write to a user; the user is notified.",
    responses={404: {"description": "Recipient not found"}},
)
async def send_message(payload: AdminMessageCreate, admin: CurrentAdminDep, session: SessionDep) -> AdminMessageRead:
    recipient = await UserRepository(session).get_by_id(payload.recipient_id)
    if recipient is None:
        raise NotFoundError("Recipient not found")
    message = await AdminMessageRepository(session).create(
        AdminMessage(
            recipient_id=recipient.id,
            subject=payload.subject,
            content=payload.content,
            priority=payload.priority.value,
            status=AdminMessageStatus.UNREAD.value,
            sender_type=SenderType.ADMIN.value,
            sender_admin_id=admin.id,
        )
    )
    await create_notification(
        session,
        recipient.id,
        NotificationType.ADMIN_MESSAGE,
        "Message from the administrator",
        message.subject,
        {"admin_message_id": message.id, "priority": message.priority},
    )
    logger.info(f"Admin {admin.id} sent message {message.id} to user {recipient.id}")
    return (await _message_reads(session, [message]))[0]


@router.get(
    "/search-users",
    summary="Search Recipients",
    description="Users matching e-mail, name or the name of a company they own.",
)
async def search_users(admin: CurrentAdminDep, session: SessionDep, query: str = ""):
    term = query.strip()
    if len(term) < SEARCH_MIN_LENGTH:
        return {"users": []}
    users = await UserRepository(session).search(term, limit=SEARCH_LIMIT, include_company_names=True)
    return {"users": [UserSummary.model_validate(user) for user in users]}


@router.get("/stats/overview", summary="Message Statistics")
async def stats_overview(admin: CurrentAdminDep, session: SessionDep):
    day_start: datetime = utc_now().replace(hour=0, minute=0, second=0, microsecond=0)
    return await AdminMessageRepository(session).stats(day_start)


@router.get(
    "/{message_id}",
    response_model=AdminMessageRead,
    summary="Get Admin Message",
    description="A message with its replies, oldest first.",
    responses={404: {"description": "Message not found"}},
)
async def get_message(message_id: str, admin: CurrentAdminDep, session: SessionDep) -> AdminMessageRead:
    message = await _get_message(session, message_id)
    return (await _message_reads(session, [message], with_replies=True))[0]


@router.post(
    "/{message_id}/reply",
    status_code=status.HTTP_201_CREATED,
    response_model=AdminMessageReplyRead,
    summary="Reply as Administrator",
    responses={404: {"description": "Message not found"}},
)
async def admin_reply(
    message_id: str, payload: ReplyCreate, admin: CurrentAdminDep, session: SessionDep
) -> AdminMessageReplyRead:
    message = await _get_message(session, message_id)
    reply = await AdminMessageRepository(session).add_reply(
        AdminMessageReply(
            message_id=message.id,
            content=payload.content,
            sender_type=SenderType.ADMIN.value,
            sender_admin_id=admin.id,
        )
    )
    await create_notification(
        session,
        message.recipient_id,
        NotificationType.ADMIN_MESSAGE_REPLY,
        "New reply from the administrator",
        message.subject,
        {"admin_message_id": message.id, "reply_id": reply.id},
    )
    return AdminMessageReplyRead.model_validate(reply)


async def _recipient_message(session: AsyncSession, message_id: str, user_id: str) -> AdminMessage:
    message = await AdminMessageRepository(session).get_by_id(message_id)
    if message is None or message.recipient_id != user_id:
        raise NotFoundError("Message not found")
    return message


@inbox_router.get("", summary="Admin Message Inbox", description="Messages administrators sent to the user.")
async def inbox(user: CurrentUserDep, session: SessionDep):
    repo = AdminMessageRepository(session)
    messages = await repo.list(filters={"recipient_id": user.id})
    return {
        "messages": await _message_reads(session, messages),
        "unread_count": await repo.count_filtered({"recipient_id": user.id, "status": AdminMessageStatus.UNREAD.value}),
    }


@inbox_router.get(
    "/{message_id}",
    response_model=AdminMessageRead,
    summary="Read Admin Message",
    description="Open a message addressed to the user and mark it read.",
    responses={404: {"description": "Message not found"}},
)
async def read_inbox_message(message_id: str, user: CurrentUserDep, session: SessionDep) -> AdminMessageRead:
    message = await _recipient_message(session, message_id, user.id)
    if message.status == AdminMessageStatus.UNREAD.value:
        message = await AdminMessageRepository(session).apply_update(message, {"status": AdminMessageStatus.READ.value})
    return (await _message_reads(session, [message], with_replies=True))[0]


@inbox_router.post(
    "/{message_id}/reply",
    status_code=status.HTTP_201_CREATED,
    response_model=AdminMessageReplyRead,
    summary="Reply to Administrator",
    responses={404: {"description": "Message not found"}},
)
async def user_reply(
    message_id: str, payload: ReplyCreate, user: CurrentUserDep, session: SessionDep
) -> AdminMessageReplyRead:
    message = await _recipient_message(session, message_id, user.id)
    reply = await AdminMessageRepository(session).add_reply(
        AdminMessageReply(
            message_id=message.id,
            content=payload.content,
            sender_type=SenderType.USER.value,
            sender_user_id=user.id,
        )
    )
    logger.info(f"User {user.id} replied to admin message {message.id}")
    return AdminMessageReplyRead.model_validate(reply)
