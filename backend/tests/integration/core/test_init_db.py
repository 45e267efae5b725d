"""Integration tests for database initialization."""

import pytest
from sqlalchemy import func, select

from memberhub import crud
from memberhub.core.config import settings
from memberhub.db.init_db import init_db
from memberhub.models.user import User

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_init_db_creates_first_superuser_once(db_session, email_encryption):
    """Running init_db twice leaves exactly one superuser."""
    await init_db(db_session, email_encryption=email_encryption)
    await init_db(db_session, email_encryption=email_encryption)

    superuser = await crud.user.get_by_email(
        db_session, email=settings.FIRST_SUPERUSER, email_encryption=email_encryption
    )
    assert superuser.username == settings.FIRST_SUPERUSER_USERNAME
    assert superuser.email_verified
    assert await db_session.scalar(select(func.count()).select_from(User)) == 1
