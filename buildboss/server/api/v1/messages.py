"""
Direct Messages API Endpoints.

Two users exchange messages either directly or in the context of a job offer
or a work request. A conversation is identified by the partner together with
that context.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from fastapi import APIRouter, status

from buildboss.core.database.entities.messages import Message
from buildboss.core.database.repositories import (
    JobOfferRepository,
    MessageRepository,
    UserRepository,
    WorkRequestRepository,
)
from buildboss.core.errors import BadRequestError, ForbiddenError, NotFoundError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import NotificationType
from buildboss.core.models.io import (
    Conversation,
    ConversationList,
    MessageCreate,
    MessageRead,
    ThreadReadRequest,
    UserSummary,
)
from buildboss.server.services.deps import CurrentUserDep, SessionDep
from buildboss.server.services.notifications import create_notification

logger = get_logger(__name__)

router = APIRouter(tags=["messages"])


def _context(message: Message) -> str:
    if message.job_offer_id:
        return "job_offer"
    if message.work_request_id:
        return "work_request"
    return "direct"


@router.get(
    "/conversations",
    response_model=ConversationList,
    summary="List Conversations",
    description="The user's conversations with the last message and unread count, most recent first.",
)
async def list_conversations(user: CurrentUserDep, session: SessionDep) -> ConversationList:
    """
    Group the user's messages into conversations.

    Messages come newest first, so the first message seen for a key is the
    conversation's last message.
    """
    messages = await MessageRepository(session).list_for_user(user.id)
    grouped: Dict[Tuple[str, Optional[str], Optional[str]], Conversation] = {}
    for message in messages:
        partner_id = message.receiver_id if message.sender_id == user.id else message.sender_id
        key = (partner_id, message.job_offer_id, message.work_request_id)
        conversation = grouped.get(key)
        if conversation is None:
            conversation = Conversation(
                partner_id=partner_id,
                job_offer_id=message.job_offer_id,
                work_request_id=message.work_request_id,
                context=_context(message),
                last_message=MessageRead.model_validate(message),
                unread_count=0,
            )
            grouped[key] = conversation
        if message.receiver_id == user.id and not message.is_read:
            conversation.unread_count += 1

    partners = await UserRepository(session).get_many(list({key[0] for key in grouped}))
    conversations = list(grouped.values())
    for conversation in conversations:
        partner = partners.get(conversation.partner_id)
        conversation.partner = UserSummary.model_validate(partner) if partner else None
    conversations.sort(key=lambda c: c.last_message.created_at, reverse=True)
    return ConversationList(conversations=conversations)


@router.get(
    "/thread",
    summary="Get Thread",
    description="Messages exchanged with a partner in one context, oldest first. Marks incoming messages read.",
)
async def get_thread(
    partner_id: str,
    user: CurrentUserDep,
    session: SessionDep,
    job_offer_id: Optional[str] = None,
    work_request_id: Optional[str] = None,
):
    messages_repo = MessageRepository(session)
    marked = await messages_repo.mark_thread_read(user.id, partner_id, job_offer_id, work_request_id)
    messages = await messages_repo.thread(user.id, partner_id, job_offer_id, work_request_id)
    partner = await UserRepository(session).get_by_id(partner_id)
    return {
        "messages": [MessageRead.model_validate(message) for message in messages],
        "partner": UserSummary.model_validate(partner) if partner else None,
        "marked_read": marked,
    }


@router.get("/unread-count", summary="Unread Messages", description="Number of unread incoming messages.")
async def unread_count(user: CurrentUserDep, session: SessionDep):
    return {"count": await MessageRepository(session).count_unread(user.id)}


@router.put(
    "/thread/read",
    summary="Mark Thread Read",
    description="Mark every incoming message of one conversation as read.",
)
async def mark_thread_read(payload: ThreadReadRequest, user: CurrentUserDep, session: SessionDep):
    count = await MessageRepository(session).mark_thread_read(
        user.id, payload.partner_id, payload.job_offer_id, payload.work_request_id
    )
    return {"success": True, "count": count}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageRead,
    summary="Send Message",
    description="Send a direct message, optionally about a job offer or a work request.",
    responses={
        400: {"description": "Message to yourself"},
        404: {"description": "Receiver, job offer or work request not found"},
    },
)
async def send_message(payload: MessageCreate, user: CurrentUserDep, session: SessionDep) -> MessageRead:
    if payload.receiver_id == user.id:
        raise BadRequestError("You cannot send a message to yourself")
    if await UserRepository(session).get_by_id(payload.receiver_id) is None:
        raise NotFoundError("Receiver not found")
    if payload.job_offer_id and await JobOfferRepository(session).get_by_id(payload.job_offer_id) is None:
        raise NotFoundError("Job offer not found")
    if payload.work_request_id and await WorkRequestRepository(session).get_by_id(payload.work_request_id) is None:
        raise NotFoundError("Work request not found")

    message = await MessageRepository(session).create(Message(sender_id=user.id, **payload.model_dump()))
    sender_name = " ".join(filter(None, [user.first_name, user.last_name])) or user.email
    await create_notification(
        session,
        message.receiver_id,
        NotificationType.MESSAGE_RECEIVED,
        "New message",
        f"New message from {sender_name}",
        {
            "message_id": message.id,
            "sender_id": user.id,
            "job_offer_id": message.job_offer_id,
            "work_request_id": message.work_request_id,
        },
    )
    logger.debug(f"Message {message.id} sent from {user.id} to {message.receiver_id}")
    return MessageRead.model_validate(message)


@router.put(
    "/{message_id}/read",
    response_model=MessageRead,
    summary="Mark Message Read",
    responses={403: {"description": "Not the receiver"}, 404: {"description": "Message not found"}},
)
async def mark_read(message_id: str, user: CurrentUserDep, session: SessionDep) -> MessageRead:
    messages_repo = MessageRepository(session)
    message = await messages_repo.get_by_id(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    if message.receiver_id != user.id:
        raise ForbiddenError("Only the receiver can mark a message as read")
    message = await messages_repo.apply_update(message, {"is_read": True})
    return MessageRead.model_validate(message)


@router.delete(
    "/{message_id}",
    summary="Delete Message",
    responses={403: {"description": "Not the sender"}, 404: {"description": "Message not found"}},
)
async def delete_message(message_id: str, user: CurrentUserDep, session: SessionDep):
    messages_repo = MessageRepository(session)
    message = await messages_repo.get_by_id(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    if message.sender_id != user.id:
        raise ForbiddenError("Only the sender can delete a message")
    await messages_repo.delete(message.id)
    return {"success": True, "message": "Message deleted"}
