"""Tests for user management by administrators."""

import pytest
from httpx import AsyncClient

from buildboss.core.database.repositories import CompanyRepository, SubscriptionRepository, UserRepository

API = "/api/v1/admin/users"


class TestListUsers:
    """GET /admin/users and /admin/users/stats/overview"""

    @pytest.mark.asyncio
    async def test_list_with_counts(
        self, client: AsyncClient, owner, company, worker_user, make_worker, admin_headers
    ):
        await make_worker(company, worker_user)
        response = await client.get(API, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["pagination"]["total"] == 2
        counts = {item["user"]["email"]: item["counts"] for item in data["users"]}
        assert counts[owner.email] == {"owned_companies": 1, "worker_memberships": 0, "created_tasks": 0}
        assert counts[worker_user.email]["worker_memberships"] == 1

    @pytest.mark.asyncio
    async def test_filters(self, client: AsyncClient, owner, worker_user, make_user, admin_headers):
        await make_user("pending@example.com", confirmed=False)
        bosses = await client.get(f"{API}?role=BOSS", headers=admin_headers)
        assert [item["user"]["email"] for item in bosses.json()["users"]] == [owner.email]
        unconfirmed = await client.get(f"{API}?status=unconfirmed", headers=admin_headers)
        assert [item["user"]["email"] for item in unconfirmed.json()["users"]] == ["pending@example.com"]
        searched = await client.get(f"{API}?search=Piotr", headers=admin_headers)
        assert [item["user"]["email"] for item in searched.json()["users"]] == [worker_user.email]

    @pytest.mark.asyncio
    async def test_stats_overview(self, client: AsyncClient, owner, worker_user, plans, admin_headers):
        response = await client.get(f"{API}/stats/overview", headers=admin_headers)
        data = response.json()
        assert data["total_users"] == 2
        assert data["new_users_this_month"] == 2
        assert data["premium_users"] == 0
        assert data["users_by_role"] == {"BOSS": 1, "WORKER": 1}
        assert data["users_by_plan"] == {"free": 2}

    @pytest.mark.asyncio
    async def test_requires_admin(self, client: AsyncClient, owner, headers):
        assert (await client.get(API, headers=headers(owner))).status_code == 401


class TestManageUser:
    """GET/PUT/PATCH/DELETE /admin/users/{id}"""

    @pytest.mark.asyncio
    async def test_detail(self, client: AsyncClient, owner, company, admin_headers):
        response = await client.get(f"{API}/{owner.id}", headers=admin_headers)
        data = response.json()
        assert data["user"]["email"] == owner.email
        assert data["subscription"]["plan"]["name"] == "free"
        assert [item["id"] for item in data["companies"]] == [company.id]
        assert (await client.get(f"{API}/missing", headers=admin_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_confirm_email_clears_token(self, client: AsyncClient, session, make_user, admin_headers):
        user = await make_user("pending@example.com", confirmed=False)
        user.confirmation_token = "token-123"
        session.add(user)
        await session.commit()

        response = await client.put(
            f"{API}/{user.id}", json={"is_email_confirmed": True, "role": "BOSS"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["is_email_confirmed"] is True
        assert response.json()["role"] == "BOSS"
        assert (await UserRepository(session).get_by_id(user.id)).confirmation_token is None

    @pytest.mark.asyncio
    async def test_null_role_rejected(self, client: AsyncClient, session, make_user, admin_headers):
        user = await make_user("nullrole@example.com")
        for field in ("role", "is_email_confirmed"):
            response = await client.put(f"{API}/{user.id}", json={field: None}, headers=admin_headers)
            assert response.status_code == 400, field
            assert response.json()["errors"][0]["field"] == field
        assert (await UserRepository(session).get_by_id(user.id)).role == "WORKER"

    @pytest.mark.asyncio
    async def test_set_plan(self, client: AsyncClient, owner, plans, admin_headers):
        response = await client.patch(
            f"{API}/{owner.id}/subscription", json={"plan_id": plans["pro"].id}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["plan"]["name"] == "pro"
        assert response.json()["status"] == "ACTIVE"

        stats = (await client.get(f"{API}/stats/overview", headers=admin_headers)).json()
        assert stats["premium_users"] == 1

    @pytest.mark.asyncio
    async def test_set_plan_creates_subscription(self, client: AsyncClient, plans, make_user, admin_headers):
        user = await make_user("bare@example.com", with_subscription=False)
        response = await client.patch(
            f"{API}/{user.id}/subscription",
            json={"plan_id": plans["basic"].id, "status": "TRIAL"},
            headers=admin_headers,
        )
        assert response.json()["status"] == "TRIAL"
        assert response.json()["user_id"] == user.id

    @pytest.mark.asyncio
    async def test_delete_removes_related_data(self, client: AsyncClient, session, owner, company, admin_headers):
        response = await client.delete(f"{API}/{owner.id}", headers=admin_headers)
        assert response.status_code == 200
        assert await UserRepository(session).get_by_id(owner.id) is None
        assert await CompanyRepository(session).get_by_id(company.id) is None
        assert await SubscriptionRepository(session).get_for_user(owner.id) is None
