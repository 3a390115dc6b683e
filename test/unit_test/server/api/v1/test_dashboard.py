"""Tests for dashboard statistics and invitations."""

import pytest
from httpx import AsyncClient

from buildboss.core.models.domain.enums import WorkerStatus


class TestDashboard:
    """GET /dashboard/*"""

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, owner, company, make_user, make_company, make_worker, headers):
        second_boss = await make_user("boss2@example.com")
        third_boss = await make_user("boss3@example.com")
        await make_worker(await make_company(second_boss, "Murex"), owner)
        await make_worker(await make_company(third_boss, "Dachpol"), owner, status=WorkerStatus.INVITED)

        response = await client.get("/api/v1/dashboard/stats", headers=headers(owner))
        assert response.status_code == 200
        assert response.json() == {
            "companies": {"total": 2, "as_owner": 1, "as_worker": 1},
            "pending_invitations": 1,
        }

    @pytest.mark.asyncio
    async def test_invitations_include_company(
        self, client: AsyncClient, company, worker_user, make_worker, headers
    ):
        await make_worker(company, worker_user, status=WorkerStatus.INVITED)
        response = await client.get("/api/v1/dashboard/invitations", headers=headers(worker_user))
        invitations = response.json()["invitations"]
        assert len(invitations) == 1
        assert invitations[0]["company"]["name"] == company.name

    @pytest.mark.asyncio
    async def test_recent_activity(self, client: AsyncClient, owner, company, headers):
        response = await client.get("/api/v1/dashboard/recent-activity", headers=headers(owner))
        data = response.json()
        assert [item["id"] for item in data["recent_companies"]] == [company.id]
        assert data["recent_invitations"] == []

    @pytest.mark.asyncio
    async def test_company_stats(
        self, client: AsyncClient, owner, company, outsider, make_user, make_worker, headers
    ):
        statuses = [WorkerStatus.ACTIVE, WorkerStatus.ACTIVE, WorkerStatus.INVITED, WorkerStatus.LEFT, WorkerStatus.INACTIVE]
        for index, status in enumerate(statuses):
            await make_worker(company, await make_user(f"crew{index}@example.com"), status=status)

        response = await client.get(f"/api/v1/dashboard/company-stats/{company.id}", headers=headers(owner))
        assert response.json()["workers"] == {"total": 5, "active": 2, "invited": 1, "inactive": 2}

        hidden = await client.get(f"/api/v1/dashboard/company-stats/{company.id}", headers=headers(outsider))
        assert hidden.status_code == 404
