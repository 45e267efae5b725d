"""The CRUD operations for the User model."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.core.email_encryption import EmailEncryption
from memberhub.core.exceptions import DecryptionFailure
from memberhub.core.logging import logger
from memberhub.crud._base import CRUDBase
from memberhub.db.unit_of_work import UnitOfWork
from memberhub.models.user import User


class CRUDUser(CRUDBase[User]):
    """CRUD operations for the User model.

    Lookups by email go through the keyed hash; the stored ciphertext is decrypted
    when a row is turned into a ``schemas.User``.
    """

    def _to_schema(self, db_obj: User, email_encryption: EmailEncryption) -> schemas.User:
        try:
            email = email_encryption.decrypt_email(
                db_obj.email_encrypted, db_obj.encryption_version
            )
        except DecryptionFailure:
            logger.with_context(
                security_event="email_decryption_failure", user_id=db_obj.id
            ).error(f"Stored email of user {db_obj.id} failed to decrypt")
            raise

        return schemas.User(
            id=db_obj.id,
            email=email,
            username=db_obj.username,
            email_verified=db_obj.email_verified,
            encryption_version=db_obj.encryption_version,
            created_at=db_obj.created_at,
            modified_at=db_obj.modified_at,
            deleted_at=db_obj.deleted_at,
        )

    async def get(
        self, db: AsyncSession, id: int, *, email_encryption: EmailEncryption
    ) -> Optional[schemas.User]:
        """Get a user by id.

        Args:
            db (AsyncSession): The database session.
            id (int): The id of the user.
            email_encryption (EmailEncryption): Codec used to decrypt the email.

        Returns:
            Optional[schemas.User]: The user, or None if missing or soft deleted.
        """
        db_obj = await self._get_row(db, id)
        if db_obj is None:
            return None
        return self._to_schema(db_obj, email_encryption)

    async def get_by_email(
        self, db: AsyncSession, *, email: str, email_encryption: EmailEncryption
    ) -> Optional[schemas.User]:
        """Get a user by email, matching on the email hash.

        Args:
            db (AsyncSession): The database session.
            email (str): The email of the user, normalized before hashing.
            email_encryption (EmailEncryption): Codec used to hash and decrypt the email.

        Returns:
            Optional[schemas.User]: The user with the given email.
        """
        stmt = select(User).where(
            User.email_hash == email_encryption.hash_email(email),
            User.deleted_at.is_(None),
        )
        result = await db.execute(stmt)
        db_obj = result.scalar_one_or_none()
        if db_obj is None:
            return None
        return self._to_schema(db_obj, email_encryption)

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: schemas.UserCreate,
        email_encryption: EmailEncryption,
        uow: Optional[UnitOfWork] = None,
    ) -> schemas.User:
        """Create a new user, storing only the hash and ciphertext of the email.

        Args:
            db (AsyncSession): The database session.
            obj_in (schemas.UserCreate): The user to create.
            email_encryption (EmailEncryption): Codec used to hash and encrypt the email.
            uow (Optional[UnitOfWork]): The unit of work to use for the transaction.

        Returns:
            schemas.User: The created user.
        """
        processed = email_encryption.process_email(obj_in.email)
        db_obj = User(
            email_hash=processed.hash,
            email_encrypted=processed.encrypted_data,
            encryption_version=processed.version,
            email_verified=obj_in.email_verified,
            username=obj_in.username,
        )
        db_obj = await self._save(db, db_obj, uow)
        return self._to_schema(db_obj, email_encryption)


user = CRUDUser(User)
