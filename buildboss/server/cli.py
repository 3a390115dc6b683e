"""
Command-line entry point for operating a BuildBoss deployment.

Usage:
    buildboss serve [--host HOST] [--port PORT] [--reload]
    buildboss create-admin --email EMAIL --password PASSWORD [--first-name NAME] [--last-name NAME]
    buildboss init-plans
    buildboss notify-subscriptions
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Dict, List, Optional

from buildboss.core.database import async_session_maker, init_db
from buildboss.core.database.entities.admin import PlansAdmin
from buildboss.core.database.repositories import PlansAdminRepository
from buildboss.core.logging_config import get_logger, setup_logging
from buildboss.core.security import hash_password, password_policy_error
from buildboss.server.core.config import settings
from buildboss.server.services.plans import initialize_plans
from buildboss.server.services.subscription_notifications import send_subscription_notifications

logger = get_logger(__name__)


async def create_admin(
    email: str, password: str, first_name: Optional[str] = None, last_name: Optional[str] = None
) -> bool:
    """
    Create a plans administrator account.

    Returns:
        False when an administrator with the e-mail already exists
    """
    await init_db()
    async with async_session_maker() as session:
        repo = PlansAdminRepository(session)
        if await repo.get_by_email(email.lower()) is not None:
            logger.warning(f"Plans administrator {email} already exists")
            return False
        admin = await repo.create(
            PlansAdmin(
                email=email.lower(),
                password=hash_password(password),
                first_name=first_name,
                last_name=last_name,
            )
        )
        logger.info(f"Created plans administrator {admin.email} ({admin.id})")
        return True


async def seed_plans() -> int:
    """Create the default plan catalogue when it is empty; returns the plan count."""
    await init_db()
    async with async_session_maker() as session:
        created, count = await initialize_plans(session)
    logger.info(f"{'Created' if created else 'Found'} {count} subscription plans")
    return count


async def notify_subscriptions() -> Dict[str, int]:
    """Send the daily trial and payment notifications; returns counts per type."""
    await init_db()
    async with async_session_maker() as session:
        sent = await send_subscription_notifications(session)
    logger.info(f"Subscription notifications sent: {sent}")
    return sent


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buildboss", description="BuildBoss server administration")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default=settings.server_host)
    serve.add_argument("--port", type=int, default=settings.server_port)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    admin = commands.add_parser("create-admin", help="Create a plans administrator")
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)
    admin.add_argument("--first-name")
    admin.add_argument("--last-name")

    commands.add_parser("init-plans", help="Create the default subscription plans")
    commands.add_parser(
        "notify-subscriptions", help="Notify users about ending trials, expired trials and failed payments"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging()

    if args.command == "serve":
        import uvicorn

        uvicorn.run("buildboss.server.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == "create-admin":
        policy_error = password_policy_error(args.password)
        if policy_error:
            logger.error(policy_error)
            return 2
        created = asyncio.run(create_admin(args.email, args.password, args.first_name, args.last_name))
        return 0 if created else 1

    if args.command == "notify-subscriptions":
        asyncio.run(notify_subscriptions())
        return 0

    asyncio.run(seed_plans())
    return 0


if __name__ == "__main__":
    sys.exit(main())
