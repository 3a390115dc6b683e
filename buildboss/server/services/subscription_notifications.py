"""
Subscription lifecycle notifications.

Run once a day (``buildboss notify-subscriptions``) to tell users that their
trial is about to end, that it has just expired, or that a payment failed.
Each user receives at most one notification of a given type per UTC day, so
repeated runs on the same day are harmless.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.subscriptions import Subscription
from buildboss.core.database.repositories import NotificationRepository, PlanRepository, SubscriptionRepository
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import NotificationType

from .notifications import create_notification

logger = get_logger(__name__)

TRIAL_ENDING_WINDOW = timedelta(days=3)
TRIAL_EXPIRED_WINDOW = timedelta(days=1)
PAST_DUE_WINDOW = timedelta(days=3)


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def _notify_each(
    session: AsyncSession,
    subscriptions: List[Subscription],
    type: NotificationType,
    now: datetime,
    build,
) -> int:
    """Create one notification per subscription unless the user already got one today."""
    notifications = NotificationRepository(session)
    plans = await PlanRepository(session).get_many([subscription.plan_id for subscription in subscriptions])
    since = _start_of_day(now)
    sent = 0
    for subscription in subscriptions:
        if await notifications.exists_since(subscription.user_id, type.value, since):
            continue
        plan = plans.get(subscription.plan_id)
        data = {
            "subscription_id": subscription.id,
            "plan_id": subscription.plan_id,
            "plan_name": plan.display_name if plan else None,
        }
        title, message = build(subscription, data)
        await create_notification(session, subscription.user_id, type, title, message, data)
        sent += 1
    return sent


async def notify_trials_ending(session: AsyncSession, now: Optional[datetime] = None) -> int:
    """Warn users whose trial ends within the next three days."""
    now = now or utc_now()
    subscriptions = await SubscriptionRepository(session).list_trials_ending_between(now, now + TRIAL_ENDING_WINDOW)

    def build(subscription: Subscription, data: Dict[str, object]):
        days_left = max(1, math.ceil((subscription.trial_end_date - now).total_seconds() / 86400))
        data["days_left"] = days_left
        unit = "day" if days_left == 1 else "days"
        return (
            "Your trial ends soon",
            f"Your trial ends in {days_left} {unit}. Choose a paid plan to keep using BuildBoss.",
        )

    sent = await _notify_each(session, subscriptions, NotificationType.SUBSCRIPTION_TRIAL_ENDING, now, build)
    logger.info(f"Checked {len(subscriptions)} trials ending soon, notified {sent}")
    return sent


async def notify_trials_expired(session: AsyncSession, now: Optional[datetime] = None) -> int:
    """Tell users whose trial ended during the last day."""
    now = now or utc_now()
    subscriptions = [
        subscription
        for subscription in await SubscriptionRepository(session).list_trials_ending_between(
            now - TRIAL_EXPIRED_WINDOW, now
        )
        if subscription.trial_end_date < now
    ]

    def build(subscription: Subscription, data: Dict[str, object]):
        return (
            "Your trial has expired",
            "Your trial has expired. Choose a paid plan to regain access to all BuildBoss features.",
        )

    sent = await _notify_each(session, subscriptions, NotificationType.SUBSCRIPTION_EXPIRED, now, build)
    logger.info(f"Checked {len(subscriptions)} expired trials, notified {sent}")
    return sent


async def notify_payments_failed(session: AsyncSession, now: Optional[datetime] = None) -> int:
    """Remind users whose subscription went past due in the last three days."""
    now = now or utc_now()
    subscriptions = await SubscriptionRepository(session).list_past_due_since(now - PAST_DUE_WINDOW)

    def build(subscription: Subscription, data: Dict[str, object]):
        return (
            "Payment failed",
            "We could not collect the payment for your subscription. Check your payment details and try again.",
        )

    sent = await _notify_each(session, subscriptions, NotificationType.PAYMENT_FAILED, now, build)
    logger.info(f"Checked {len(subscriptions)} past due subscriptions, notified {sent}")
    return sent


async def send_subscription_notifications(session: AsyncSession, now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Run every lifecycle check once.

    Returns:
        Number of notifications created per notification type
    """
    now = now or utc_now()
    return {
        NotificationType.SUBSCRIPTION_TRIAL_ENDING.value: await notify_trials_ending(session, now),
        NotificationType.SUBSCRIPTION_EXPIRED.value: await notify_trials_expired(session, now),
        NotificationType.PAYMENT_FAILED.value: await notify_payments_failed(session, now),
    }
