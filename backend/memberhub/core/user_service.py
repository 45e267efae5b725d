"""User service."""

from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import crud, schemas
from memberhub.core.email_encryption import EmailEncryption
from memberhub.core.exceptions import InvalidArgumentException
from memberhub.core.logging import logger


class UserService:
    """Registers users coming from the identity provider."""

    def __init__(self, email_encryption: EmailEncryption):
        """Initialize the service with the email codec."""
        self._email_encryption = email_encryption

    async def sign_up_via_third_party(
        self,
        db: AsyncSession,
        *,
        email: str,
        username: str | None,
        email_verified: bool,
    ) -> schemas.User:
        """Return the user with ``email``, creating it on first sign in.

        Args:
        ----
            db (AsyncSession): The database session.
            email (str): Email from the identity provider's claims.
            username (str | None): Display name; the local part of the email if empty.
            email_verified (bool): Whether the provider verified the email.

        Returns:
        -------
            schemas.User: The existing or newly created user.

        """
        if not email:
            raise InvalidArgumentException("Identity provider did not supply an email")

        existing = await crud.user.get_by_email(
            db, email=email, email_encryption=self._email_encryption
        )
        if existing is not None:
            return existing

        user = await crud.user.create(
            db,
            obj_in=schemas.UserCreate(
                email=email,
                username=(username or "").strip() or email.split("@")[0],
                email_verified=email_verified,
            ),
            email_encryption=self._email_encryption,
        )
        logger.with_context(user_id=user.id).info("Signed up new user via identity provider")
        return user
