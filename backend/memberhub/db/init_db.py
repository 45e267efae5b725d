"""Initialize the database with the first superuser."""

from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import crud, schemas
from memberhub.core.config import settings
from memberhub.core.email_encryption import EmailEncryption
from memberhub.core.logging import logger


async def init_db(db: AsyncSession, *, email_encryption: EmailEncryption) -> None:
    """Create the first superuser if it does not exist yet.

    With AUTH_ENABLED=False every request runs as this user.

    Args:
    ----
        db (AsyncSession): The database session.
        email_encryption (EmailEncryption): Codec for the user's email.
    """
    user = await crud.user.get_by_email(
        db, email=settings.FIRST_SUPERUSER, email_encryption=email_encryption
    )
    if user is not None:
        return

    logger.info("First superuser not found, creating...")
    await crud.user.create(
        db,
        obj_in=schemas.UserCreate(
            email=settings.FIRST_SUPERUSER,
            username=settings.FIRST_SUPERUSER_USERNAME,
            email_verified=True,
        ),
        email_encryption=email_encryption,
    )
