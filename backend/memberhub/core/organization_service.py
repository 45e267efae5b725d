"""Organization service."""

from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import crud, schemas
from memberhub.api.context import ApiContext
from memberhub.core.exceptions import InvalidArgumentException, UnauthorizedAccessException
from memberhub.db.unit_of_work import UnitOfWork


class OrganizationService:
    """Creates organizations together with their first admin and member."""

    async def register_new_organization(
        self,
        db: AsyncSession,
        ctx: ApiContext,
        *,
        name: str,
        description: str,
    ) -> schemas.Organization:
        """Create an organization owned by the requester.

        The organization row, the requester's admin row and the requester's member row
        are written in one unit of work: all three exist afterwards, or none does.

        Args:
        ----
            db (AsyncSession): The database session.
            ctx (ApiContext): The requester.
            name (str): Organization name, must not be blank.
            description (str): Organization description, must not be blank.

        Returns:
        -------
            schemas.Organization: The created organization.

        Raises:
        ------
            UnauthorizedAccessException: If the requester is not authenticated.
            InvalidArgumentException: If name or description is blank.

        """
        if not ctx.is_authenticated:
            raise UnauthorizedAccessException()

        name = (name or "").strip()
        description = (description or "").strip()
        if not name:
            raise InvalidArgumentException("Organization name is required")
        if not description:
            raise InvalidArgumentException("Organization description is required")

        async with UnitOfWork(db) as uow:
            organization = await crud.organization.create(
                db,
                obj_in=schemas.OrganizationCreate(name=name, description=description),
                created_by=ctx.user.id,
                uow=uow,
            )
            await crud.organization_admin.create(
                db, organization_id=organization.id, user_id=ctx.user.id, uow=uow
            )
            await crud.organization_member.create(
                db, organization_id=organization.id, user_id=ctx.user.id, uow=uow
            )

        ctx.logger.with_context(organization_id=organization.id).info(
            f"Registered organization '{organization.name}'"
        )
        return organization
