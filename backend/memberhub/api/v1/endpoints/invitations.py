"""API endpoints for organization membership invitations."""

from typing import List, Optional

from fastapi import Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.api import deps
from memberhub.api.context import ApiContext
from memberhub.api.router import TrailingSlashRouter
from memberhub.core.invitation_service import InvitationService

router = TrailingSlashRouter()


@router.post("", response_model=schemas.Invitation, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    invitation_in: schemas.InvitationCreateRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    invitation_service: InvitationService = Depends(deps.get_invitation_service),
) -> schemas.Invitation:
    """Invite an existing user into an organization the caller administers.

    Inviting someone who already has a pending or accepted invitation returns that
    invitation; a rejected or cancelled one is reopened.
    """
    return await invitation_service.create_new_invitation(
        db,
        ctx,
        target_email=invitation_in.target_email,
        organization_id=invitation_in.organization_id,
    )


@router.get("/me", response_model=schemas.InvitationList)
async def list_my_invitations(
    limit: int = Query(100, ge=0, description="Maximum number of invitations to return"),
    offset: int = Query(0, ge=0, description="Number of invitations to skip"),
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    invitation_service: InvitationService = Depends(deps.get_invitation_service),
) -> schemas.InvitationList:
    """List the invitations addressed to the caller, newest first."""
    invitations = await invitation_service.get_invitation_intended_to_user(
        db, ctx, limit=limit, offset=offset
    )
    return schemas.InvitationList(invitations=invitations, count=len(invitations))


@router.get("/search", response_model=List[schemas.InvitationView])
async def search_invitations(
    organization_id: int = Query(..., gt=0),
    statuses: Optional[List[str]] = Query(
        None, description="Statuses to include, repeated or comma-separated"
    ),
    target_email: Optional[str] = Query(None),
    limit: int = Query(100, ge=0),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    invitation_service: InvitationService = Depends(deps.get_invitation_service),
) -> List[schemas.InvitationView]:
    """Search the invitations of an organization the caller administers."""
    return await invitation_service.search_organization_member_invitation(
        db,
        ctx,
        organization_id=organization_id,
        params=schemas.InvitationSearchRequest(
            statuses=statuses, target_email=target_email, limit=limit, offset=offset
        ),
    )


@router.post(
    "/accept", response_model=schemas.OrganizationMember, status_code=status.HTTP_201_CREATED
)
async def accept_invitation(
    action: schemas.InvitationActionRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    invitation_service: InvitationService = Depends(deps.get_invitation_service),
) -> schemas.OrganizationMember:
    """Accept an invitation addressed to the caller and join the organization."""
    return await invitation_service.accept_organization_membership_invitation(
        db, ctx, invitation_id=action.invitation_id
    )


@router.post("/reject", response_model=schemas.InvitationView)
async def reject_invitation(
    action: schemas.InvitationActionRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    invitation_service: InvitationService = Depends(deps.get_invitation_service),
) -> schemas.InvitationView:
    """Reject an invitation addressed to the caller."""
    return await invitation_service.reject_organization_membership_invitation(
        db, ctx, invitation_id=action.invitation_id
    )


@router.post("/cancel", response_model=schemas.InvitationView)
async def cancel_invitation(
    action: schemas.InvitationActionRequest,
    db: AsyncSession = Depends(deps.get_db),
    ctx: ApiContext = Depends(deps.get_context),
    invitation_service: InvitationService = Depends(deps.get_invitation_service),
) -> schemas.InvitationView:
    """Cancel an invitation of an organization the caller administers."""
    return await invitation_service.cancel_organization_membership_invitation(
        db, ctx, invitation_id=action.invitation_id
    )
