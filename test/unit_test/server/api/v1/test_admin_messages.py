"""Tests for administrator messages and the user inbox."""

import pytest
from httpx import AsyncClient

from buildboss.core.database.repositories import NotificationRepository

API = "/api/v1/admin/messages"
INBOX = "/api/v1/admin-messages"


async def _send(client, admin_headers, recipient, **overrides):
    payload = {"recipient_id": recipient.id, "subject": "Faktura", "content": "Prosimy o kontakt"}
    payload.update(overrides)
    response = await client.post(API, json=payload, headers=admin_headers)
    assert response.status_code == 201
    return response.json()


class TestAdminSide:
    """Administrator sending, listing and replying."""

    @pytest.mark.asyncio
    async def test_send_notifies_recipient(self, client: AsyncClient, session, owner, admin, admin_headers):
        message = await _send(client, admin_headers, owner, priority="HIGH")
        assert message["status"] == "UNREAD"
        assert message["sender_type"] == "ADMIN"
        assert message["sender"]["email"] == admin.email
        assert message["recipient"]["email"] == owner.email

        notifications = await NotificationRepository(session).list(filters={"user_id": owner.id})
        assert [item.type for item in notifications] == ["ADMIN_MESSAGE"]

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, client: AsyncClient, admin_headers):
        response = await client.post(
            API, json={"recipient_id": "missing", "subject": "A", "content": "B"}, headers=admin_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_filters_and_stats(self, client: AsyncClient, owner, worker_user, admin_headers):
        await _send(client, admin_headers, owner, priority="HIGH")
        await _send(client, admin_headers, worker_user)

        listing = await client.get(API, headers=admin_headers)
        assert listing.json()["pagination"]["total"] == 2
        high = await client.get(f"{API}?priority=HIGH", headers=admin_headers)
        assert [item["recipient_id"] for item in high.json()["messages"]] == [owner.id]

        stats = await client.get(f"{API}/stats/overview", headers=admin_headers)
        assert stats.json() == {"total": 2, "unread": 2, "high_priority": 1, "today": 2}

    @pytest.mark.asyncio
    async def test_search_users(self, client: AsyncClient, owner, company, admin_headers):
        short = await client.get(f"{API}/search-users?query=B", headers=admin_headers)
        assert short.json() == {"users": []}
        by_company = await client.get(f"{API}/search-users?query=Bude", headers=admin_headers)
        assert [user["email"] for user in by_company.json()["users"]] == [owner.email]

    @pytest.mark.asyncio
    async def test_reply_and_thread(self, client: AsyncClient, session, owner, admin_headers):
        message = await _send(client, admin_headers, owner)
        reply = await client.post(f"{API}/{message['id']}/reply", json={"content": "Przypominamy"}, headers=admin_headers)
        assert reply.status_code == 201
        assert reply.json()["sender_type"] == "ADMIN"

        detail = await client.get(f"{API}/{message['id']}", headers=admin_headers)
        assert [item["content"] for item in detail.json()["replies"]] == ["Przypominamy"]
        notifications = await NotificationRepository(session).list(filters={"user_id": owner.id})
        assert "ADMIN_MESSAGE_REPLY" in [item.type for item in notifications]
        assert (await client.get(f"{API}/missing", headers=admin_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_user_token_rejected(self, client: AsyncClient, owner, headers):
        assert (await client.get(API, headers=headers(owner))).status_code == 401


class TestInbox:
    """User side of administrator messages."""

    @pytest.mark.asyncio
    async def test_inbox_and_read(self, client: AsyncClient, owner, admin_headers, headers):
        message = await _send(client, admin_headers, owner)
        inbox = await client.get(INBOX, headers=headers(owner))
        assert inbox.json()["unread_count"] == 1
        assert [item["id"] for item in inbox.json()["messages"]] == [message["id"]]

        opened = await client.get(f"{INBOX}/{message['id']}", headers=headers(owner))
        assert opened.json()["status"] == "READ"
        assert opened.json()["replies"] == []
        assert (await client.get(INBOX, headers=headers(owner))).json()["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_other_users_message_is_404(self, client: AsyncClient, owner, outsider, admin_headers, headers):
        message = await _send(client, admin_headers, owner)
        assert (await client.get(f"{INBOX}/{message['id']}", headers=headers(outsider))).status_code == 404
        reply = await client.post(
            f"{INBOX}/{message['id']}/reply", json={"content": "Hej"}, headers=headers(outsider)
        )
        assert reply.status_code == 404

    @pytest.mark.asyncio
    async def test_user_reply(self, client: AsyncClient, owner, admin_headers, headers):
        message = await _send(client, admin_headers, owner)
        reply = await client.post(f"{INBOX}/{message['id']}/reply", json={"content": "Dziękuję"}, headers=headers(owner))
        assert reply.status_code == 201
        assert reply.json()["sender_type"] == "USER"
        assert reply.json()["sender_user_id"] == owner.id

        detail = await client.get(f"{API}/{message['id']}", headers=admin_headers)
        assert [item["sender_type"] for item in detail.json()["replies"]] == ["USER"]
