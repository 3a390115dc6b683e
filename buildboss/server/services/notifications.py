"""
Notification service.

Notifications are persisted per user and fetched by the client; there is no
push channel.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.entities.messages import Notification
from buildboss.core.database.repositories import NotificationRepository
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import NotificationType

logger = get_logger(__name__)


async def create_notification(
    session: AsyncSession,
    user_id: str,
    type: NotificationType,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Notification:
    """
    Persist a notification for a user.

    Args:
        session: Database session
        user_id: Recipient
        type: Notification type
        title: Short headline
        message: Body text
        data: Optional JSON payload with ids the client links to

    Returns:
        The stored notification
    """
    notification = await NotificationRepository(session).create(
        Notification(user_id=user_id, type=type.value, title=title, message=message, data=data)
    )
    logger.debug(f"Notification {notification.type} created for user {user_id}")
    return notification
