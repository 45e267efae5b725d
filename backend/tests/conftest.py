"""Common test fixtures and configuration for pytest.

This module contains fixtures that can be used across all types of tests:
- Unit tests
- Integration tests (against an in-memory sqlite database)
"""
import base64
import os
from typing import AsyncGenerator

# Settings are read at import time, so the environment must be prepared first
os.environ.setdefault("FIRST_SUPERUSER", "admin@example.com")
os.environ.setdefault("EMAIL_ENCRYPTION_KEY", base64.b64encode(os.urandom(32)).decode())
os.environ.setdefault("LOCAL_DEVELOPMENT", "true")
os.environ.setdefault("AUTH_ENABLED", "false")
os.environ.setdefault("POSTGRES_PASSWORD", "memberhub1234!")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import memberhub.models  # noqa: E402,F401
from memberhub.core.email_encryption import EmailEncryption  # noqa: E402
from memberhub.models._base import Base  # noqa: E402

# Import all fixtures so they are automatically available for all tests
from tests.fixtures.common import (  # noqa: E402,F401
    admin_context,
    email_encryption_key,
    invitation_service,
    organization_service,
    seeded_organization,
    unauthenticated_context,
    user_service,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# Mock DB Session for Unit Tests
@pytest.fixture
async def mock_db_session():
    """Provide a mock DB session for unit tests."""
    from unittest.mock import AsyncMock

    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.info = {}
    yield mock_session


@pytest.fixture
def email_encryption(email_encryption_key):
    """Provide an email codec with a random key, wiped after the test."""
    codec = EmailEncryption(email_encryption_key)
    yield codec
    codec.close()


# Test Database Connection for Integration Tests
@pytest.fixture(scope="function")
async def db_engine():
    """Create a fresh in-memory database for each test function."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new database session for integration tests.

    Each test gets a fresh session with complete cleanup.
    """
    async with AsyncSession(db_engine, expire_on_commit=False) as session:
        yield session
