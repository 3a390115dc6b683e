"""Unit tests for message and notification repositories."""

from __future__ import annotations

import pytest

from buildboss.core.database.entities.jobs import JobOffer
from buildboss.core.database.entities.messages import Message, Notification
from buildboss.core.database.entities.users import User
from buildboss.core.database.repositories.messages import MessageRepository, NotificationRepository


@pytest.fixture
async def partner(in_memory_session) -> User:
    user = User(email="partner@example.com")
    in_memory_session.add(user)
    await in_memory_session.commit()
    return user


class TestMessageThreads:
    """Conversations are scoped by partner and by the offer or request they concern."""

    @pytest.fixture
    async def offer(self, in_memory_session, sample_user, sample_company) -> JobOffer:
        offer = JobOffer(
            title="Murarz", description="x", category="CONSTRUCTION", voivodeship="MAZOWIECKIE", city="Warszawa",
            company_id=sample_company.id, created_by_id=sample_user.id,
        )
        in_memory_session.add(offer)
        await in_memory_session.commit()
        return offer

    @pytest.fixture
    async def messages(self, in_memory_session, sample_user, partner, offer):
        rows = [
            Message(content="Dzień dobry", sender_id=partner.id, receiver_id=sample_user.id),
            Message(content="Witam", sender_id=sample_user.id, receiver_id=partner.id),
            Message(content="W sprawie oferty", sender_id=partner.id, receiver_id=sample_user.id, job_offer_id=offer.id),
        ]
        in_memory_session.add_all(rows)
        await in_memory_session.commit()
        return rows

    async def test_thread_without_context(self, in_memory_session, sample_user, partner, messages):
        thread = await MessageRepository(in_memory_session).thread(sample_user.id, partner.id)
        assert {m.content for m in thread} == {"Dzień dobry", "Witam"}

    async def test_thread_with_offer(self, in_memory_session, sample_user, partner, offer, messages):
        thread = await MessageRepository(in_memory_session).thread(sample_user.id, partner.id, job_offer_id=offer.id)
        assert [m.content for m in thread] == ["W sprawie oferty"]

    async def test_mark_thread_read_only_incoming(self, in_memory_session, sample_user, partner, messages):
        repository = MessageRepository(in_memory_session)
        assert await repository.count_unread(sample_user.id) == 2
        assert await repository.mark_thread_read(sample_user.id, partner.id) == 1
        assert await repository.count_unread(sample_user.id) == 1
        assert await repository.count_unread(partner.id) == 1

    async def test_list_for_user(self, in_memory_session, sample_user, partner, messages):
        assert len(await MessageRepository(in_memory_session).list_for_user(partner.id)) == 3


class TestNotificationRepository:
    @pytest.fixture
    async def notifications(self, in_memory_session, sample_user, partner):
        rows = [
            Notification(user_id=sample_user.id, type="TASK_ASSIGNED", title="Nowe zadanie", message="x"),
            Notification(user_id=sample_user.id, type="SYSTEM", title="Info", message="y", is_read=True),
            Notification(user_id=partner.id, type="SYSTEM", title="Info", message="z"),
        ]
        in_memory_session.add_all(rows)
        await in_memory_session.commit()
        return rows

    async def test_filters(self, in_memory_session, sample_user, notifications):
        repository = NotificationRepository(in_memory_session)
        assert await repository.count_filtered({"user_id": sample_user.id}) == 2
        unread = await repository.list(filters={"user_id": sample_user.id, "unread_only": True})
        assert [n.title for n in unread] == ["Nowe zadanie"]

    async def test_get_for_user_checks_owner(self, in_memory_session, sample_user, partner, notifications):
        repository = NotificationRepository(in_memory_session)
        assert await repository.get_for_user(notifications[0].id, sample_user.id) is not None
        assert await repository.get_for_user(notifications[0].id, partner.id) is None

    async def test_mark_all_read_and_clear(self, in_memory_session, sample_user, partner, notifications):
        repository = NotificationRepository(in_memory_session)
        assert await repository.mark_all_read(sample_user.id) == 1
        assert await repository.count_unread(sample_user.id) == 0
        assert await repository.count_unread(partner.id) == 1
        assert await repository.clear_all(sample_user.id) == 2
        assert await repository.count() == 1
