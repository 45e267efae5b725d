"""Organization admin join model."""

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from memberhub.models._base import Base, IdType, SoftDeleteMixin


class OrganizationAdmin(Base, SoftDeleteMixin):
    """Grants a user invitation and membership management rights over an organization.

    The (organization_id, user_id) pair is unconditionally unique because invitations
    reference it through a composite foreign key.
    """

    __tablename__ = "organization_admin"

    organization_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("organization.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(IdType, ForeignKey("user.id"), nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_admin_org_user"),
    )
