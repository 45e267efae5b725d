"""CRUD operations for organizations."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.crud._base import CRUDBase
from memberhub.db.unit_of_work import UnitOfWork
from memberhub.models.organization import Organization


class CRUDOrganization(CRUDBase[Organization]):
    """CRUD operations for organizations."""

    async def get(self, db: AsyncSession, id: int) -> Optional[schemas.Organization]:
        """Get a non-deleted organization by id."""
        db_obj = await self._get_row(db, id)
        return schemas.Organization.model_validate(db_obj) if db_obj else None

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: schemas.OrganizationCreate,
        created_by: int,
        uow: Optional[UnitOfWork] = None,
    ) -> schemas.Organization:
        """Create an organization row.

        Only the organization itself is written; the creator's admin and member rows are
        added by ``OrganizationService`` in the same unit of work.

        Args:
            db (AsyncSession): The database session.
            obj_in (schemas.OrganizationCreate): Name and description.
            created_by (int): Id of the creating user.
            uow (Optional[UnitOfWork]): The unit of work to use for the transaction.

        Returns:
            schemas.Organization: The created organization.
        """
        db_obj = Organization(
            name=obj_in.name,
            description=obj_in.description,
            is_active=True,
            created_by=created_by,
        )
        db_obj = await self._save(db, db_obj, uow)
        return schemas.Organization.model_validate(db_obj)


organization = CRUDOrganization(Organization)
