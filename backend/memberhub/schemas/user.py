"""User schema module."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    """Base schema for User."""

    username: str = Field(..., min_length=1, max_length=255)
    email_verified: bool = False


class UserCreate(UserBase):
    """Schema for creating a User object.

    The email is hashed and encrypted by the repository; it is never stored as is.
    """

    email: EmailStr


class User(UserBase):
    """User entity with its decrypted email."""

    model_config = {"from_attributes": True}

    id: int
    email: str
    encryption_version: int = 1
    created_at: datetime
    modified_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_email_verified(self) -> bool:
        """Whether the identity provider verified the email."""
        return self.email_verified

    @property
    def is_deleted(self) -> bool:
        """Whether the user has been soft deleted."""
        return self.deleted_at is not None
