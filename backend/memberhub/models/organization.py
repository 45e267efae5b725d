"""Organization models."""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from memberhub.models._base import Base, IdType, SoftDeleteMixin


class Organization(Base, SoftDeleteMixin):
    """Organization model."""

    __tablename__ = "organization"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by: Mapped[int] = mapped_column(IdType, ForeignKey("user.id"), nullable=False)
