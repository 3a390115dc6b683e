"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request monitoring), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from buildboss.core.database import init_db
from buildboss.core.logging_config import get_logger, setup_logging
from buildboss.core.monitoring import initialize_logfire

from .api.v1 import (
    admin_messages,
    admin_users,
    auth,
    companies,
    dashboard,
    health,
    jobs,
    messages,
    notifications,
    plans_admin,
    projects,
    requests,
    subscriptions,
    tasks,
    users,
    webhooks,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware, limiter, rate_limit_exceeded_handler

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the local schema when running on SQLite and logs startup and
    shutdown. A failing database does not stop the server from starting so the
    health endpoints can report it.
    """
    try:
        logger.info("Starting up BuildBoss Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down BuildBoss Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    BuildBoss Server API

    Back end of the BuildBoss construction management platform: companies and
    their workers, projects and tasks, the job and work-request marketplace,
    messaging, notifications and Stripe-backed subscriptions, plus the plans
    administration panel.
    """,
    version=settings.app_version,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

app.add_middleware(LogfireMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

API = constant.API_V1_STR

app.include_router(health.router, prefix=API, tags=["health"])
app.include_router(auth.router, prefix=f"{API}/auth")
app.include_router(users.router, prefix=f"{API}/users")
app.include_router(dashboard.router, prefix=f"{API}/dashboard")
app.include_router(companies.router, prefix=f"{API}/companies")
app.include_router(projects.router, prefix=f"{API}/projects")
app.include_router(tasks.router, prefix=f"{API}/tasks")
app.include_router(jobs.router, prefix=f"{API}/jobs")
app.include_router(requests.router, prefix=f"{API}/requests")
app.include_router(messages.router, prefix=f"{API}/messages")
app.include_router(notifications.router, prefix=f"{API}/notifications")
app.include_router(subscriptions.router, prefix=f"{API}/subscriptions")
app.include_router(webhooks.router, prefix=f"{API}/webhooks")
app.include_router(plans_admin.router, prefix=f"{API}/plans-admin")
app.include_router(admin_users.router, prefix=f"{API}/admin/users")
app.include_router(admin_messages.router, prefix=f"{API}/admin/messages")
app.include_router(admin_messages.inbox_router, prefix=f"{API}/admin-messages")
