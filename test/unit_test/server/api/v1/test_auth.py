"""
Tests for the authentication endpoints: registration, login, e-mail
confirmation, the ``/me`` profile and Google sign-in.
"""

import pytest
from httpx import AsyncClient

from buildboss.core.database.repositories import SubscriptionRepository, UserRepository
from buildboss.core.security import create_access_token

PASSWORD = "Secret123"


class TestRegister:
    """POST /auth/register"""

    @pytest.mark.asyncio
    async def test_register_creates_unconfirmed_worker(self, client: AsyncClient, session, email_service):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "New.User@Example.com", "password": PASSWORD, "first_name": "Jan"},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["email"] == "new.user@example.com"
        assert data["user"]["role"] == "WORKER"
        assert data["user"]["is_email_confirmed"] is False
        assert data["token"]
        assert "password" not in data["user"]

        assert len(email_service.sent) == 1
        user = await UserRepository(session).get_by_email("new.user@example.com")
        assert user.confirmation_token in email_service.sent[0]["text"]

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, owner):
        response = await client.post("/api/v1/auth/register", json={"email": owner.email, "password": PASSWORD})
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["Short1", "alllowercase1", "NoDigitsHere"])
    async def test_register_rejects_weak_password(self, client: AsyncClient, password: str):
        response = await client.post("/api/v1/auth/register", json={"email": "weak@example.com", "password": password})
        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation error"
        assert body["errors"][0]["field"] == "password"

    @pytest.mark.asyncio
    async def test_register_rejects_invalid_email(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/register", json={"email": "not-an-email", "password": PASSWORD})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"


class TestLogin:
    """POST /auth/login"""

    @pytest.mark.asyncio
    async def test_login_success_updates_last_login(self, client: AsyncClient, owner):
        response = await client.post("/api/v1/auth/login", json={"email": owner.email, "password": PASSWORD})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == owner.id
        assert data["user"]["last_login_at"] is not None
        assert data["token"]

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, owner):
        response = await client.post("/api/v1/auth/login", json={"email": owner.email, "password": "Wrong1234"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
        assert response.status_code == 401


class TestRateLimit:
    """Throttling of /auth/login and /auth/register per client address."""

    @pytest.fixture
    def throttled(self, monkeypatch):
        from buildboss.server.core.config import settings
        from buildboss.server.middleware.rate_limit import limiter

        monkeypatch.setattr(settings, "auth_rate_limit", "3 per 15 minutes")
        monkeypatch.setattr(limiter, "enabled", True)
        limiter.reset()
        yield
        limiter.reset()

    @pytest.mark.asyncio
    async def test_login_blocked_after_limit(self, client: AsyncClient, owner, throttled):
        credentials = {"email": owner.email, "password": "Wrong1234"}
        for _ in range(3):
            assert (await client.post("/api/v1/auth/login", json=credentials)).status_code == 401

        blocked = await client.post("/api/v1/auth/login", json={"email": owner.email, "password": PASSWORD})
        assert blocked.status_code == 429
        assert blocked.json()["error_type"] == "RateLimitExceeded"

    @pytest.mark.asyncio
    async def test_register_blocked_after_limit(self, client: AsyncClient, throttled):
        for index in range(3):
            response = await client.post(
                "/api/v1/auth/register", json={"email": f"user{index}@example.com", "password": PASSWORD}
            )
            assert response.status_code == 201
        blocked = await client.post("/api/v1/auth/register", json={"email": "user9@example.com", "password": PASSWORD})
        assert blocked.status_code == 429

    @pytest.mark.asyncio
    async def test_other_endpoints_not_throttled(self, client: AsyncClient, owner, headers, throttled):
        for _ in range(5):
            assert (await client.get("/api/v1/auth/me", headers=headers(owner))).status_code == 200

    @pytest.mark.asyncio
    async def test_disabled_limiter_never_blocks(self, client: AsyncClient, owner, monkeypatch):
        from buildboss.server.core.config import settings

        monkeypatch.setattr(settings, "auth_rate_limit", "1 per 15 minutes")
        credentials = {"email": owner.email, "password": "Wrong1234"}
        for _ in range(3):
            assert (await client.post("/api/v1/auth/login", json=credentials)).status_code == 401


class TestConfirmEmail:
    """GET /auth/confirm/{token} and POST /auth/resend-confirmation"""

    @pytest.mark.asyncio
    async def test_confirm_consumes_token(self, client: AsyncClient, session, make_user):
        user = await make_user("pending@example.com", confirmed=False)
        await UserRepository(session).apply_update(user, {"confirmation_token": "abc123"})

        response = await client.get("/api/v1/auth/confirm/abc123")
        assert response.status_code == 200
        assert response.json()["data"]["user"]["is_email_confirmed"] is True

        again = await client.get("/api/v1/auth/confirm/abc123")
        assert again.status_code == 400

    @pytest.mark.asyncio
    async def test_resend_for_confirmed_user(self, client: AsyncClient, owner, headers):
        response = await client.post("/api/v1/auth/resend-confirmation", headers=headers(owner))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_resend_issues_new_token(self, client: AsyncClient, session, make_user, headers, email_service):
        user = await make_user("pending@example.com", confirmed=False)
        response = await client.post("/api/v1/auth/resend-confirmation", headers=headers(user))
        assert response.status_code == 200
        await session.refresh(user)
        assert user.confirmation_token
        assert email_service.sent[-1]["to"] == "pending@example.com"


class TestMe:
    """GET /auth/me and token handling"""

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_with_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_me_for_deleted_user(self, client: AsyncClient):
        token = create_access_token("0" * 32)
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_provisions_free_plan(self, client: AsyncClient, session, make_user, headers):
        user = await make_user("fresh@example.com", with_subscription=False)
        response = await client.get("/api/v1/auth/me", headers=headers(user))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subscription"]["status"] == "ACTIVE"
        assert data["subscription"]["plan"]["name"] == "free"
        assert await SubscriptionRepository(session).get_for_user(user.id) is not None

    @pytest.mark.asyncio
    async def test_me_lists_owned_companies_and_memberships(
        self, client: AsyncClient, owner, company, worker_user, make_worker, headers
    ):
        await make_worker(company, worker_user)

        owner_me = (await client.get("/api/v1/auth/me", headers=headers(owner))).json()["data"]
        assert owner_me["owned_companies_count"] == 1
        assert owner_me["owned_companies"][0]["id"] == company.id

        worker_me = (await client.get("/api/v1/auth/me", headers=headers(worker_user))).json()["data"]
        assert worker_me["owned_companies_count"] == 0
        assert worker_me["workers"][0]["company"]["name"] == company.name


class TestPasswordAndLogout:
    """POST /auth/verify-password and POST /auth/logout"""

    @pytest.mark.asyncio
    async def test_verify_password(self, client: AsyncClient, owner, headers):
        url = "/api/v1/auth/verify-password"
        ok = await client.post(url, json={"password": PASSWORD}, headers=headers(owner))
        assert ok.status_code == 200
        assert ok.json()["valid"] is True

        wrong = await client.post(url, json={"password": "nope"}, headers=headers(owner))
        assert wrong.status_code == 401

        missing = await client.post(url, json={}, headers=headers(owner))
        assert missing.status_code == 400

    @pytest.mark.asyncio
    async def test_logout(self, client: AsyncClient, owner, headers):
        response = await client.post("/api/v1/auth/logout", headers=headers(owner))
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestGoogleSignIn:
    """GET /auth/google and /auth/google/callback"""

    @pytest.mark.asyncio
    async def test_google_redirects_to_consent_screen(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/google", follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"].startswith("https://accounts.google.com/")

    @pytest.mark.asyncio
    async def test_google_not_configured(self, client: AsyncClient):
        from buildboss.server.main import app
        from buildboss.server.services.google_oauth import get_google_oauth_client

        app.dependency_overrides[get_google_oauth_client] = lambda: None
        response = await client.get("/api/v1/auth/google", follow_redirects=False)
        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_callback_creates_confirmed_user(self, client: AsyncClient, session):
        response = await client.get("/api/v1/auth/google/callback?code=good-code", follow_redirects=False)
        assert response.status_code == 307
        assert "/auth/callback?token=" in response.headers["location"]

        user = await UserRepository(session).get_by_email("google.user@example.com")
        assert user.google_id == "google-123"
        assert user.is_email_confirmed is True
        assert user.password is None

    @pytest.mark.asyncio
    async def test_callback_links_existing_account(self, client: AsyncClient, session, make_user):
        existing = await make_user("google.user@example.com", confirmed=False)
        await client.get("/api/v1/auth/google/callback?code=good-code", follow_redirects=False)
        await session.refresh(existing)
        assert existing.google_id == "google-123"
        assert existing.is_email_confirmed is True

    @pytest.mark.asyncio
    async def test_callback_failure_redirects_to_login(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/google/callback?code=bad-code", follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"].endswith("/login?error=google_auth_failed")
