"""Organization member join model."""

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from memberhub.models._base import ACTIVE_ROWS, Base, IdType, SoftDeleteMixin


class OrganizationMember(Base, SoftDeleteMixin):
    """Standing membership of a user in an organization."""

    __tablename__ = "organization_member"

    organization_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("organization.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(IdType, ForeignKey("user.id"), nullable=False)

    __table_args__ = (
        Index(
            "uq_organization_member_org_user_active",
            "organization_id",
            "user_id",
            unique=True,
            postgresql_where=ACTIVE_ROWS,
            sqlite_where=ACTIVE_ROWS,
        ),
    )
