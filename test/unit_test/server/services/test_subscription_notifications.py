"""Unit tests for the daily subscription lifecycle notifications."""

from datetime import timedelta

import pytest

from buildboss.core.database.base import utc_now
from buildboss.core.database.repositories import NotificationRepository, SubscriptionRepository
from buildboss.server.services.subscription_notifications import (
    notify_payments_failed,
    notify_trials_ending,
    notify_trials_expired,
    send_subscription_notifications,
)


async def _set_subscription(session, user, **changes):
    repo = SubscriptionRepository(session)
    subscription = await repo.get_for_user(user.id)
    return await repo.apply_update(subscription, changes)


async def _notifications(session, user):
    return await NotificationRepository(session).list(filters={"user_id": user.id})


class TestTrialsEnding:
    @pytest.mark.asyncio
    async def test_notifies_trials_ending_within_three_days(self, session, make_user, plans):
        now = utc_now()
        soon = await make_user("soon@example.com")
        later = await make_user("later@example.com")
        await _set_subscription(session, soon, status="TRIAL", trial_end_date=now + timedelta(days=2, hours=1))
        await _set_subscription(session, later, status="TRIAL", trial_end_date=now + timedelta(days=5))

        assert await notify_trials_ending(session, now) == 1

        (notification,) = await _notifications(session, soon)
        assert notification.type == "SUBSCRIPTION_TRIAL_ENDING"
        assert notification.message.startswith("Your trial ends in 3 days")
        assert notification.data["days_left"] == 3
        assert notification.data["plan_name"] == plans["free"].display_name
        assert await _notifications(session, later) == []

    @pytest.mark.asyncio
    async def test_singular_day(self, session, make_user, plans):
        now = utc_now()
        user = await make_user("tomorrow@example.com")
        await _set_subscription(session, user, status="TRIAL", trial_end_date=now + timedelta(hours=5))

        await notify_trials_ending(session, now)

        (notification,) = await _notifications(session, user)
        assert "in 1 day." in notification.message

    @pytest.mark.asyncio
    async def test_once_per_day(self, session, make_user, plans):
        now = utc_now()
        user = await make_user("trial@example.com")
        await _set_subscription(session, user, status="TRIAL", trial_end_date=now + timedelta(days=1))

        assert await notify_trials_ending(session, now) == 1
        assert await notify_trials_ending(session, now) == 0
        assert len(await _notifications(session, user)) == 1

    @pytest.mark.asyncio
    async def test_active_subscriptions_ignored(self, session, make_user, plans):
        now = utc_now()
        user = await make_user("active@example.com")
        await _set_subscription(session, user, status="ACTIVE", trial_end_date=now + timedelta(days=1))

        assert await notify_trials_ending(session, now) == 0


class TestTrialsExpired:
    @pytest.mark.asyncio
    async def test_notifies_trials_expired_during_last_day(self, session, make_user, plans):
        now = utc_now()
        recent = await make_user("recent@example.com")
        old = await make_user("old@example.com")
        await _set_subscription(session, recent, status="TRIAL", trial_end_date=now - timedelta(hours=3))
        await _set_subscription(session, old, status="TRIAL", trial_end_date=now - timedelta(days=4))

        assert await notify_trials_expired(session, now) == 1

        (notification,) = await _notifications(session, recent)
        assert notification.type == "SUBSCRIPTION_EXPIRED"
        assert await _notifications(session, old) == []


class TestPaymentsFailed:
    @pytest.mark.asyncio
    async def test_notifies_recent_past_due(self, session, make_user, plans):
        now = utc_now()
        recent = await make_user("pastdue@example.com")
        stale = await make_user("stale@example.com")
        await _set_subscription(session, recent, status="PAST_DUE")
        await _set_subscription(session, stale, status="PAST_DUE", updated_at=now - timedelta(days=10))

        assert await notify_payments_failed(session, now) == 1

        (notification,) = await _notifications(session, recent)
        assert notification.type == "PAYMENT_FAILED"
        assert await _notifications(session, stale) == []


class TestSendAll:
    @pytest.mark.asyncio
    async def test_counts_per_type(self, session, make_user, plans):
        now = utc_now()
        ending = await make_user("ending@example.com")
        await _set_subscription(session, ending, status="TRIAL", trial_end_date=now + timedelta(days=1))
        await make_user("free@example.com")

        assert await send_subscription_notifications(session, now) == {
            "SUBSCRIPTION_TRIAL_ENDING": 1,
            "SUBSCRIPTION_EXPIRED": 0,
            "PAYMENT_FAILED": 0,
        }
