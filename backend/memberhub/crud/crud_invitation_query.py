"""Read-side queries over invitations joined with organizations and users."""

from typing import Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from memberhub import schemas
from memberhub.core.email_encryption import EmailEncryption
from memberhub.models.invitation import Invitation
from memberhub.models.organization import Organization
from memberhub.models.user import User

Inviter = aliased(User, name="inviter")
Invitee = aliased(User, name="invitee")


class CRUDInvitationQuery:
    """Queries returning invitations and ``InvitationView`` read models.

    Soft-deleted rows are excluded on every joined table: an invitation whose
    organization, inviter or invitee has been deleted is not visible.
    """

    @staticmethod
    def _join_active(stmt: Select) -> Select:
        return (
            stmt.join(Organization, Organization.id == Invitation.organization_id)
            .join(Inviter, Inviter.id == Invitation.created_by)
            .join(Invitee, Invitee.id == Invitation.intended_for)
            .where(
                Invitation.deleted_at.is_(None),
                Organization.deleted_at.is_(None),
                Inviter.deleted_at.is_(None),
                Invitee.deleted_at.is_(None),
            )
        )

    def _view_query(self) -> Select:
        return self._join_active(
            select(
                Invitation.id.label("id"),
                Invitation.organization_id.label("organization_id"),
                Organization.name.label("organization_name"),
                Invitation.created_by.label("inviter_id"),
                Inviter.username.label("inviter_name"),
                Invitation.intended_for.label("invitee_id"),
                Invitee.username.label("invitee_name"),
                Invitation.status.label("status"),
                Invitation.expires_at.label("expires_at"),
                Invitation.created_at.label("created_at"),
                Invitation.modified_at.label("modified_at"),
                Invitation.deleted_at.label("deleted_at"),
            )
        )

    async def _fetch_views(self, db: AsyncSession, stmt: Select) -> list[schemas.InvitationView]:
        result = await db.execute(stmt)
        return [schemas.InvitationView.model_validate(dict(row)) for row in result.mappings()]

    async def find_by_intended_user_email(
        self,
        db: AsyncSession,
        *,
        email: str,
        organization_id: int,
        email_encryption: EmailEncryption,
    ) -> Optional[schemas.Invitation]:
        """Find the active invitation of ``organization_id`` addressed to ``email``.

        Args:
            db (AsyncSession): The database session.
            email (str): Email of the invited user, matched through its hash.
            organization_id (int): The inviting organization.
            email_encryption (EmailEncryption): Codec used to hash the email.

        Returns:
            Optional[schemas.Invitation]: The invitation, or None.
        """
        stmt = (
            select(Invitation)
            .join(User, User.id == Invitation.intended_for)
            .where(
                User.email_hash == email_encryption.hash_email(email),
                User.deleted_at.is_(None),
                Invitation.organization_id == organization_id,
                Invitation.deleted_at.is_(None),
            )
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        db_obj = result.scalar_one_or_none()
        return schemas.Invitation.model_validate(db_obj) if db_obj else None

    async def get(self, db: AsyncSession, id: int) -> Optional[schemas.Invitation]:
        """Get an invitation whose organization, inviter and invitee are all active."""
        stmt = (
            self._join_active(select(Invitation))
            .where(Invitation.id == id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        db_obj = result.scalar_one_or_none()
        return schemas.Invitation.model_validate(db_obj) if db_obj else None

    async def get_view(self, db: AsyncSession, id: int) -> Optional[schemas.InvitationView]:
        """Get the joined view of one invitation."""
        views = await self._fetch_views(db, self._view_query().where(Invitation.id == id))
        return views[0] if views else None

    async def get_views_for_user(
        self, db: AsyncSession, *, user_id: int, limit: int = 100, offset: int = 0
    ) -> list[schemas.InvitationView]:
        """Invitations of any status addressed to a user, newest first.

        Returns an empty list when there are none.
        """
        stmt = (
            self._view_query()
            .where(Invitation.intended_for == user_id)
            .order_by(Invitation.created_at.desc(), Invitation.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch_views(db, stmt)

    async def search(
        self, db: AsyncSession, *, params: schemas.InvitationSearchQuery
    ) -> list[schemas.InvitationView]:
        """Search an organization's invitations.

        Statuses match case-insensitively; an empty status list does not filter.
        Results are ordered newest first and paginated with ``limit``/``offset``.

        Args:
            db (AsyncSession): The database session.
            params (schemas.InvitationSearchQuery): The search parameters.

        Returns:
            list[schemas.InvitationView]: Matching invitations, empty when none match.
        """
        stmt = self._view_query().where(Invitation.organization_id == params.organization_id)
        if params.intended_for is not None:
            stmt = stmt.where(Invitation.intended_for == params.intended_for)
        if params.statuses:
            stmt = stmt.where(
                func.lower(Invitation.status).in_([status.lower() for status in params.statuses])
            )
        stmt = (
            stmt.order_by(Invitation.created_at.desc(), Invitation.id.desc())
            .limit(params.limit)
            .offset(params.offset)
        )
        return await self._fetch_views(db, stmt)


invitation_query = CRUDInvitationQuery()
