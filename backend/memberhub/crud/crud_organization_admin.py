"""CRUD operations for organization admins."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.crud._base import CRUDBase
from memberhub.db.unit_of_work import UnitOfWork
from memberhub.models.organization import Organization
from memberhub.models.organization_admin import OrganizationAdmin


class CRUDOrganizationAdmin(CRUDBase[OrganizationAdmin]):
    """CRUD operations for organization admins."""

    async def create(
        self,
        db: AsyncSession,
        *,
        organization_id: int,
        user_id: int,
        uow: Optional[UnitOfWork] = None,
    ) -> schemas.OrganizationAdmin:
        """Grant ``user_id`` admin rights over ``organization_id``."""
        db_obj = OrganizationAdmin(organization_id=organization_id, user_id=user_id)
        db_obj = await self._save(db, db_obj, uow)
        return schemas.OrganizationAdmin.model_validate(db_obj)

    async def get_organization_ids_for_user(self, db: AsyncSession, *, user_id: int) -> list[int]:
        """Ids of the active organizations the user administers."""
        stmt = (
            select(OrganizationAdmin.organization_id)
            .join(Organization, Organization.id == OrganizationAdmin.organization_id)
            .where(
                OrganizationAdmin.user_id == user_id,
                OrganizationAdmin.deleted_at.is_(None),
                Organization.deleted_at.is_(None),
            )
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())


organization_admin = CRUDOrganizationAdmin(OrganizationAdmin)
