"""Base models for the application."""

from sqlalchemy import BigInteger, Column, DateTime, Integer, text
from sqlalchemy.ext.declarative import declared_attr
from sqlalchemy.orm import DeclarativeBase

from memberhub.core.datetime_utils import utc_now_naive

# sqlite only autoincrements INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer, "sqlite")

ACTIVE_ROWS = text("deleted_at IS NULL")


class Base(DeclarativeBase):
    """Base class for all models."""

    id = Column(IdType, primary_key=True, autoincrement=True, nullable=False)
    created_at = Column(DateTime, default=utc_now_naive, nullable=False)
    modified_at = Column(DateTime, default=utc_now_naive, onupdate=utc_now_naive, nullable=False)


class SoftDeleteMixin:
    """Mixin for rows that are soft deleted through a deletion timestamp."""

    @declared_attr
    def deleted_at(cls):
        return Column(DateTime, nullable=True)

    @property
    def is_deleted(self) -> bool:
        """Whether the row has been soft deleted."""
        return self.deleted_at is not None
