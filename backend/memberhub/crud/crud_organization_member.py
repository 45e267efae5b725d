"""CRUD operations for organization members."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.core.exceptions import ResourceNotFoundException
from memberhub.crud._base import CRUDBase
from memberhub.db.unit_of_work import UnitOfWork
from memberhub.models.organization import Organization
from memberhub.models.organization_member import OrganizationMember


class CRUDOrganizationMember(CRUDBase[OrganizationMember]):
    """CRUD operations for organization members."""

    async def get(self, db: AsyncSession, id: int) -> Optional[schemas.OrganizationMember]:
        """Get a non-deleted membership by id."""
        db_obj = await self._get_row(db, id, populate_existing=True)
        return schemas.OrganizationMember.model_validate(db_obj) if db_obj else None

    async def create(
        self,
        db: AsyncSession,
        *,
        organization_id: int,
        user_id: int,
        uow: Optional[UnitOfWork] = None,
    ) -> schemas.OrganizationMember:
        """Add a user to an organization.

        Concurrent or repeated inserts of the same pair converge on one active row.

        Args:
            db (AsyncSession): The database session.
            organization_id (int): The organization.
            user_id (int): The user joining it.
            uow (Optional[UnitOfWork]): The unit of work to use for the transaction.

        Returns:
            schemas.OrganizationMember: The (possibly pre-existing) membership.
        """
        member_id = await self._upsert(
            db,
            values={"organization_id": organization_id, "user_id": user_id},
            index_elements=["organization_id", "user_id"],
            uow=uow,
        )
        member = await self.get(db, member_id)
        if member is None:
            raise ResourceNotFoundException(f"Organization member {member_id} not found")
        return member

    async def get_organization_ids_for_user(self, db: AsyncSession, *, user_id: int) -> list[int]:
        """Ids of the active organizations the user is a member of."""
        stmt = (
            select(OrganizationMember.organization_id)
            .join(Organization, Organization.id == OrganizationMember.organization_id)
            .where(
                OrganizationMember.user_id == user_id,
                OrganizationMember.deleted_at.is_(None),
                Organization.deleted_at.is_(None),
            )
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())


organization_member = CRUDOrganizationMember(OrganizationMember)
