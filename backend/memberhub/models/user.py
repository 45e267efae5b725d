"""User model."""

from sqlalchemy import Boolean, Index, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from memberhub.models._base import ACTIVE_ROWS, Base, SoftDeleteMixin


class User(Base, SoftDeleteMixin):
    """User model.

    The email is only stored as a keyed hash (for lookups) and as ciphertext.
    """

    __tablename__ = "user"

    email_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    email_encrypted: Mapped[str] = mapped_column(Text, nullable=False)
    encryption_version: Mapped[int] = mapped_column(SmallInteger, default=1, nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    username: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (
        Index(
            "uq_user_email_hash_active",
            "email_hash",
            unique=True,
            postgresql_where=ACTIVE_ROWS,
            sqlite_where=ACTIVE_ROWS,
        ),
    )
