"""Dependencies that are used in the API endpoints.

Long-lived collaborators (session factory, email codec, identity provider, services)
are created by the application lifespan and read from ``app.state`` here.
"""

import uuid
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import crud
from memberhub.api.auth import IdentityClaims, IdentityProvider, MockIdentityProvider
from memberhub.api.context import ApiContext
from memberhub.core.email_encryption import EmailEncryption
from memberhub.core.invitation_service import InvitationService
from memberhub.core.logging import logger
from memberhub.core.organization_service import OrganizationService
from memberhub.core.user_service import UserService

BEARER_PREFIX = "bearer "


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session to be used in dependency injection.

    Yields:
    ------
        AsyncSession: An async database session

    """
    async with request.app.state.session_factory() as db:
        try:
            yield db
        finally:
            await db.close()


def get_email_encryption(request: Request) -> EmailEncryption:
    """The application's email codec."""
    return request.app.state.email_encryption


def get_identity_provider(request: Request) -> IdentityProvider | MockIdentityProvider:
    """The application's identity provider."""
    return request.app.state.identity_provider


def get_invitation_service(request: Request) -> InvitationService:
    """The application's invitation service."""
    return request.app.state.invitation_service


def get_organization_service(request: Request) -> OrganizationService:
    """The application's organization service."""
    return request.app.state.organization_service


def get_user_service(request: Request) -> UserService:
    """The application's user service."""
    return request.app.state.user_service


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization", "")
    if authorization.lower().startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX) :].strip() or None
    return None


async def get_identity(
    request: Request,
    identity_provider: IdentityProvider | MockIdentityProvider = Depends(get_identity_provider),
) -> Optional[IdentityClaims]:
    """Verified identity claims of the caller, or None."""
    return await identity_provider.verify(_bearer_token(request))


async def get_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: Optional[IdentityClaims] = Depends(get_identity),
    email_encryption: EmailEncryption = Depends(get_email_encryption),
) -> ApiContext:
    """Create the authorization context for the request.

    This is the dependency every endpoint receives, providing:
    - Request tracking (request_id)
    - The caller's user and the organizations they belong to and administer
    - Pre-configured contextual logger with all dimensions

    A missing or invalid token, or a verified email with no local user, yields an
    unauthenticated context rather than an error; the services decide what needs one.

    Args:
    ----
        request (Request): The FastAPI request object.
        db (AsyncSession): Database session.
        identity (Optional[IdentityClaims]): Verified claims from the identity provider.
        email_encryption (EmailEncryption): Codec for the user lookup.

    Returns:
    -------
        ApiContext: The authorization context.

    """
    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    base_logger = logger.with_context(request_id=request_id, context_base="api")

    if identity is None or not identity.email:
        return ApiContext(request_id=request_id, logger=base_logger)

    user = await crud.user.get_by_email(
        db, email=identity.email, email_encryption=email_encryption
    )
    if user is None:
        base_logger.warning("Authenticated identity has no local user")
        return ApiContext(request_id=request_id, logger=base_logger)

    member_ids = await crud.organization_member.get_organization_ids_for_user(db, user_id=user.id)
    admin_ids = await crud.organization_admin.get_organization_ids_for_user(db, user_id=user.id)

    ctx = ApiContext(
        request_id=request_id,
        user=user,
        member_organization_ids=frozenset(member_ids),
        admin_organization_ids=frozenset(admin_ids),
        logger=base_logger.with_context(user_id=user.id),
    )
    ctx.logger.debug(f"Resolved {ctx}")
    return ctx

