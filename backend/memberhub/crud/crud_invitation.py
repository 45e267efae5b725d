"""CRUD operations for invitations."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.core.datetime_utils import utc_now_naive
from memberhub.core.exceptions import ResourceNotFoundException
from memberhub.core.shared_models import InvitationStatus
from memberhub.crud._base import CRUDBase
from memberhub.db.unit_of_work import UnitOfWork
from memberhub.models.invitation import Invitation


class CRUDInvitation(CRUDBase[Invitation]):
    """Writes and single-row reads of invitations.

    Joined read models live in ``crud.invitation_query``.
    """

    async def get(self, db: AsyncSession, id: int) -> Optional[schemas.Invitation]:
        """Get a non-deleted invitation by id."""
        db_obj = await self._get_row(db, id, populate_existing=True)
        return schemas.Invitation.model_validate(db_obj) if db_obj else None

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: schemas.InvitationCreate,
        uow: Optional[UnitOfWork] = None,
    ) -> schemas.Invitation:
        """Insert an invitation, idempotently.

        If an active invitation for the same (organization_id, intended_for) pair already
        exists, nothing is written and that invitation is returned as stored. Whether to
        reopen it is up to the caller.

        Args:
            db (AsyncSession): The database session.
            obj_in (schemas.InvitationCreate): The invitation to insert.
            uow (Optional[UnitOfWork]): The unit of work to use for the transaction.

        Returns:
            schemas.Invitation: The new or existing invitation.
        """
        invitation_id = await self._upsert(
            db,
            values={
                "organization_id": obj_in.organization_id,
                "created_by": obj_in.created_by,
                "intended_for": obj_in.intended_for,
                "status": obj_in.status.value,
                "expires_at": obj_in.expires_at,
            },
            index_elements=["organization_id", "intended_for"],
            uow=uow,
        )
        invitation = await self.get(db, invitation_id)
        if invitation is None:
            raise ResourceNotFoundException(f"Invitation {invitation_id} not found")
        return invitation

    async def update_status(
        self,
        db: AsyncSession,
        *,
        id: int,
        status: InvitationStatus,
        expires_at: Optional[datetime] = None,
        uow: Optional[UnitOfWork] = None,
    ) -> schemas.Invitation:
        """Set the status of an invitation, and its expiry when given.

        Args:
            db (AsyncSession): The database session.
            id (int): The invitation id.
            status (InvitationStatus): The new status.
            expires_at (Optional[datetime]): New expiry, kept unchanged when None.
            uow (Optional[UnitOfWork]): The unit of work to use for the transaction.

        Returns:
            schemas.Invitation: The updated invitation.

        Raises:
            ResourceNotFoundException: If no active invitation has this id.
        """
        db_obj = await self._get_row(db, id)
        if db_obj is None:
            raise ResourceNotFoundException(f"Invitation {id} not found")

        db_obj.status = status.value
        if expires_at is not None:
            db_obj.expires_at = expires_at
        db_obj.modified_at = utc_now_naive()

        db_obj = await self._save(db, db_obj, uow)
        return schemas.Invitation.model_validate(db_obj)

    async def get_multi_by_intended_for(
        self, db: AsyncSession, *, user_id: int
    ) -> list[schemas.Invitation]:
        """All active invitations addressed to a user, newest first."""
        stmt = (
            select(Invitation)
            .where(Invitation.intended_for == user_id, Invitation.deleted_at.is_(None))
            .order_by(Invitation.created_at.desc(), Invitation.id.desc())
        )
        result = await db.execute(stmt)
        return [schemas.Invitation.model_validate(row) for row in result.scalars().all()]


invitation = CRUDInvitation(Invitation)
