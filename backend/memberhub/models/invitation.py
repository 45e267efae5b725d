"""Invitation model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, ForeignKeyConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from memberhub.core.shared_models import InvitationStatus
from memberhub.models._base import ACTIVE_ROWS, Base, IdType, SoftDeleteMixin


class Invitation(Base, SoftDeleteMixin):
    """Invitation of an existing user into an organization.

    ``created_by`` must be an admin of ``organization_id``, which the composite foreign
    key onto ``organization_admin`` enforces. At most one active invitation exists per
    (organization_id, intended_for) pair.
    """

    __tablename__ = "invitation"

    organization_id: Mapped[int] = mapped_column(
        IdType, ForeignKey("organization.id", ondelete="CASCADE"), nullable=False
    )
    created_by: Mapped[int] = mapped_column(IdType, nullable=False)
    intended_for: Mapped[int] = mapped_column(IdType, ForeignKey("user.id"), nullable=False)
    status: Mapped[str] = mapped_column(
        String(50), default=InvitationStatus.PENDING.value, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        ForeignKeyConstraint(
            ["organization_id", "created_by"],
            ["organization_admin.organization_id", "organization_admin.user_id"],
            name="fk_invitation_created_by_admin",
        ),
        Index(
            "uq_invitation_org_intended_for_active",
            "organization_id",
            "intended_for",
            unique=True,
            postgresql_where=ACTIVE_ROWS,
            sqlite_where=ACTIVE_ROWS,
        ),
    )
