"""Unit tests for the ``buildboss`` command-line entry point."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from buildboss.core.database.base import utc_now
from buildboss.core.database.repositories import (
    NotificationRepository,
    PlanRepository,
    PlansAdminRepository,
    SubscriptionRepository,
)
from buildboss.core.security import verify_password
from buildboss.server import cli

CLI_MODULE = "buildboss.server.cli"


@pytest.fixture
def cli_database(test_engine):
    """Run CLI coroutines against the per-test database."""
    maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    with patch(f"{CLI_MODULE}.async_session_maker", maker), patch(f"{CLI_MODULE}.init_db", new=AsyncMock()):
        yield maker


class TestCreateAdmin:
    @pytest.mark.asyncio
    async def test_creates_account(self, cli_database):
        assert await cli.create_admin("Admin@BuildBoss.pl", "AdminSecret1", "Ala") is True
        async with cli_database() as session:
            admin = await PlansAdminRepository(session).get_by_email("admin@buildboss.pl")
        assert admin.first_name == "Ala"
        assert verify_password("AdminSecret1", admin.password)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, cli_database):
        await cli.create_admin("admin@buildboss.pl", "AdminSecret1")
        assert await cli.create_admin("admin@buildboss.pl", "AdminSecret2") is False


class TestSeedPlans:
    @pytest.mark.asyncio
    async def test_idempotent(self, cli_database):
        assert await cli.seed_plans() == 4
        assert await cli.seed_plans() == 4
        async with cli_database() as session:
            assert await PlanRepository(session).count() == 4


class TestNotifySubscriptions:
    @pytest.mark.asyncio
    async def test_sends_trial_ending_once_per_day(self, cli_database, session, make_user, plans):
        user = await make_user("trial@example.com")
        repo = SubscriptionRepository(session)
        subscription = await repo.get_for_user(user.id)
        await repo.apply_update(subscription, {"status": "TRIAL", "trial_end_date": utc_now() + timedelta(days=2)})

        first = await cli.notify_subscriptions()
        second = await cli.notify_subscriptions()

        assert first["SUBSCRIPTION_TRIAL_ENDING"] == 1
        assert second["SUBSCRIPTION_TRIAL_ENDING"] == 0
        async with cli_database() as check:
            notifications = await NotificationRepository(check).list(filters={"user_id": user.id})
        assert [notification.type for notification in notifications] == ["SUBSCRIPTION_TRIAL_ENDING"]


class TestMain:
    """Argument parsing and exit codes."""

    def test_weak_password_rejected(self):
        with patch(f"{CLI_MODULE}.create_admin", new=AsyncMock()) as mock_create, patch(f"{CLI_MODULE}.setup_logging"):
            code = cli.main(["create-admin", "--email", "a@example.com", "--password", "weak"])
        assert code == 2
        mock_create.assert_not_called()

    @pytest.mark.parametrize("created,expected", [(True, 0), (False, 1)])
    def test_create_admin_exit_code(self, created, expected):
        with patch(f"{CLI_MODULE}.create_admin", new=AsyncMock(return_value=created)) as mock_create, patch(
            f"{CLI_MODULE}.setup_logging"
        ):
            code = cli.main(
                ["create-admin", "--email", "a@example.com", "--password", "Strong123", "--first-name", "Ala"]
            )
        assert code == expected
        mock_create.assert_awaited_once_with("a@example.com", "Strong123", "Ala", None)

    def test_init_plans(self):
        with patch(f"{CLI_MODULE}.seed_plans", new=AsyncMock(return_value=4)) as mock_seed, patch(
            f"{CLI_MODULE}.setup_logging"
        ):
            assert cli.main(["init-plans"]) == 0
        mock_seed.assert_awaited_once()

    def test_serve(self):
        with patch("uvicorn.run") as mock_run, patch(f"{CLI_MODULE}.setup_logging"):
            assert cli.main(["serve", "--port", "8081"]) == 0
        assert mock_run.call_args[0][0] == "buildboss.server.main:app"
        assert mock_run.call_args[1]["port"] == 8081
        assert mock_run.call_args[1]["reload"] is False

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_notify_subscriptions(self):
        with patch(f"{CLI_MODULE}.notify_subscriptions", new=AsyncMock(return_value={})) as mock_notify, patch(
            f"{CLI_MODULE}.setup_logging"
        ):
            assert cli.main(["notify-subscriptions"]) == 0
        mock_notify.assert_awaited_once()
