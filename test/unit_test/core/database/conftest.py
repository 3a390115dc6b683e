"""Test configuration for database unit tests.

This module provides common fixtures for testing the database layer
against an in-memory SQLite database.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.entities.companies import Company
from buildboss.core.database.entities.users import User
from buildboss.core.database.utils import create_all, create_engine, create_sessionmaker


@pytest_asyncio.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine with every table."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_all(engine)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def sample_user(in_memory_session) -> User:
    user = User(email="boss@example.com", first_name="Jan", last_name="Kowalski", role="BOSS", is_email_confirmed=True)
    in_memory_session.add(user)
    await in_memory_session.commit()
    return user


@pytest_asyncio.fixture(scope="function")
async def sample_company(in_memory_session, sample_user) -> Company:
    company = Company(name="Budex", nip="1234567890", address="Warszawa", created_by_id=sample_user.id)
    in_memory_session.add(company)
    await in_memory_session.commit()
    return company
