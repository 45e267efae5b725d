"""The API module that contains the endpoints for users."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import schemas
from memberhub.api import deps
from memberhub.api.auth import IdentityClaims
from memberhub.api.context import ApiContext
from memberhub.api.router import TrailingSlashRouter
from memberhub.core.exceptions import UnauthorizedAccessException
from memberhub.core.user_service import UserService

router = TrailingSlashRouter()


@router.get("/me", response_model=schemas.User)
async def read_user(ctx: ApiContext = Depends(deps.get_context)) -> schemas.User:
    """Get the current user."""
    if not ctx.is_authenticated:
        raise UnauthorizedAccessException()
    return ctx.user


@router.post("/sign-up", response_model=schemas.User)
async def sign_up(
    db: AsyncSession = Depends(deps.get_db),
    identity: Optional[IdentityClaims] = Depends(deps.get_identity),
    user_service: UserService = Depends(deps.get_user_service),
) -> schemas.User:
    """Register the caller from their identity provider claims.

    Returns the existing user when the caller signed up before.
    """
    if identity is None or not identity.email:
        raise UnauthorizedAccessException("A verified identity is required to sign up")
    return await user_service.sign_up_via_third_party(
        db,
        email=identity.email,
        username=identity.name,
        email_verified=identity.email_verified,
    )
