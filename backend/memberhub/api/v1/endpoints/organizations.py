"""API endpoints for organizations."""

from fastapi import Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.api import deps
from memberhub.api.context import ApiContext
from memberhub.api.router import TrailingSlashRouter
from memberhub.core.organization_service import OrganizationService

router = TrailingSlashRouter()


@router.post("", response_model=schemas.Organization, status_code=status.HTTP_201_CREATED)
async def create_organization(
    organization_data: schemas.OrganizationCreate,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    organization_service: OrganizationService = Depends(deps.get_organization_service),
) -> schemas.Organization:
    """Create a new organization with the current user as its admin and first member."""
    return await organization_service.register_new_organization(
        db,
        ctx,
        name=organization_data.name,
        description=organization_data.description,
    )
