"""
Engine and session factory helpers for the BuildBoss database.

Functions:
- create_engine: async engine for PostgreSQL (asyncpg) or SQLite (aiosqlite)
- create_sessionmaker: session factory whose objects survive commits
- create_all: schema from the entity metadata, for SQLite development databases and tests
"""

from __future__ import annotations

import re

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

_POSTGRES_SCHEME = re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://")


def normalize_url(db_url: str) -> str:
    """Point PostgreSQL URLs at the asyncpg driver and bare SQLite URLs at aiosqlite."""
    if _POSTGRES_SCHEME.match(db_url):
        return _POSTGRES_SCHEME.sub("postgresql+asyncpg://", db_url, count=1)
    if db_url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + db_url[len("sqlite://") :]
    return db_url


def create_engine(db_url: str) -> AsyncEngine:
    """Create the async engine for ``db_url``.

    Hosted databases get connection health checks. SQLite connections may be
    shared across the event loop's threads, and an in-memory database keeps a
    single connection so every session sees the same tables.

    Args:
        db_url: ``DATABASE_URL`` as configured (``postgres://``, ``postgresql://``
            and ``sqlite://`` forms are accepted)

    Returns:
        Configured AsyncEngine instance
    """
    url = normalize_url(db_url)
    if not url.startswith("sqlite"):
        return create_async_engine(url, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
        kwargs["poolclass"] = StaticPool
    return create_async_engine(url, **kwargs)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by request handlers, the CLI and tests."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every BuildBoss table that does not exist yet.

    PostgreSQL deployments are migrated with Alembic instead.
    """
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
