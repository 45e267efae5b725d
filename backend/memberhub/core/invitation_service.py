"""Invitation service: the organization membership invitation state machine.

``pending`` moves one way to ``accepted``, ``rejected`` or ``cancelled``. Re-inviting
a user whose invitation was rejected or cancelled reopens the same row as ``pending``;
an accepted invitation is never reopened.
"""

from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub import crud, schemas
from memberhub.api.context import ApiContext
from memberhub.core.config import settings
from memberhub.core.datetime_utils import utc_days_from_now_naive
from memberhub.core.email_encryption import EmailEncryption
from memberhub.core.exceptions import (
    ForbiddenAccessException,
    InvalidArgumentException,
    ResourceNotFoundException,
    UnauthorizedAccessException,
)
from memberhub.core.shared_models import InvitationOperation, InvitationStatus
from memberhub.db.unit_of_work import UnitOfWork

_UNCHANGED_ON_REINVITE = (InvitationStatus.PENDING, InvitationStatus.ACCEPTED)


class InvitationService:
    """Creates invitations and applies accept, reject and cancel to them."""

    def __init__(
        self,
        email_encryption: EmailEncryption,
        expiry_days: int = settings.INVITATION_EXPIRY_DAYS,
    ):
        """Initialize the service.

        Args:
        ----
            email_encryption (EmailEncryption): Codec for email lookups.
            expiry_days (int): Lifetime of a new or reopened invitation.

        """
        self._email_encryption = email_encryption
        self._expiry_days = expiry_days

    @staticmethod
    def _require_authenticated(ctx: ApiContext) -> schemas.User:
        if not ctx.is_authenticated:
            raise UnauthorizedAccessException()
        return ctx.user

    @staticmethod
    def _validate_email(email: str) -> str:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError as e:
            raise InvalidArgumentException(f"Invalid email address: {e}") from e
        return email.strip()

    async def _get_invitation(self, db: AsyncSession, invitation_id: int) -> schemas.Invitation:
        invitation = await crud.invitation_query.get(db, invitation_id)
        if invitation is None:
            raise ResourceNotFoundException(f"Invitation {invitation_id} not found")
        return invitation

    async def _get_view(self, db: AsyncSession, invitation_id: int) -> schemas.InvitationView:
        view = await crud.invitation_query.get_view(db, invitation_id)
        if view is None:
            raise ResourceNotFoundException(f"Invitation {invitation_id} not found")
        return view

    @staticmethod
    def _require_valid_operation(
        invitation: schemas.Invitation, operation: InvitationOperation
    ) -> None:
        if not invitation.is_acceptance_operation_valid(operation):
            raise ForbiddenAccessException(
                f"Cannot {operation.value} an invitation that is {invitation.status.value}"
            )

    async def create_new_invitation(
        self,
        db: AsyncSession,
        ctx: ApiContext,
        *,
        target_email: str,
        organization_id: int,
    ) -> schemas.Invitation:
        """Invite the user with ``target_email`` into an organization.

        Inviting converges instead of failing: a pending or accepted invitation is
        returned unchanged, a rejected or cancelled one is reopened as pending with a
        fresh expiry, and otherwise a new pending invitation is inserted. The lookup and
        the write run in one unit of work.

        Args:
        ----
            db (AsyncSession): The database session.
            ctx (ApiContext): The requester, who must administer the organization.
            target_email (str): Email of an existing user.
            organization_id (int): The organization to invite into.

        Returns:
        -------
            schemas.Invitation: The pending or accepted invitation.

        Raises:
        ------
            UnauthorizedAccessException: If the requester is not authenticated.
            ForbiddenAccessException: If the requester is not an admin of the organization.
            InvalidArgumentException: If target_email is not a valid email address.
            ResourceNotFoundException: If no user has target_email.

        """
        requester = self._require_authenticated(ctx)
        if not ctx.is_admin_of_organization(organization_id):
            raise ForbiddenAccessException(
                f"User is not an admin of organization {organization_id}"
            )
        email = self._validate_email(target_email)
        log = ctx.logger.with_context(
            operation="create_invitation", organization_id=organization_id
        )

        async with UnitOfWork(db) as uow:
            existing = await crud.invitation_query.find_by_intended_user_email(
                db,
                email=email,
                organization_id=organization_id,
                email_encryption=self._email_encryption,
            )
            if existing is not None:
                if existing.status in _UNCHANGED_ON_REINVITE:
                    log.info(f"Invitation {existing.id} is already {existing.status.value}")
                    return existing
                reopened = await crud.invitation.update_status(
                    db,
                    id=existing.id,
                    status=InvitationStatus.PENDING,
                    expires_at=utc_days_from_now_naive(self._expiry_days),
                    uow=uow,
                )
                log.info(f"Reopened {existing.status.value} invitation {existing.id}")
                return reopened

            target_user = await crud.user.get_by_email(
                db, email=email, email_encryption=self._email_encryption
            )
            if target_user is None:
                raise ResourceNotFoundException("No user is registered with this email")

            invitation = await crud.invitation.create(
                db,
                obj_in=schemas.InvitationCreate(
                    organization_id=organization_id,
                    created_by=requester.id,
                    intended_for=target_user.id,
                    status=InvitationStatus.PENDING,
                    expires_at=utc_days_from_now_naive(self._expiry_days),
                ),
                uow=uow,
            )

        log.info(f"Created invitation {invitation.id} for user {invitation.intended_for}")
        return invitation

    async def get_invitation_intended_to_user(
        self,
        db: AsyncSession,
        ctx: ApiContext,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> list[schemas.InvitationView]:
        """All invitations, of any status, addressed to the requester.

        Raises:
        ------
            UnauthorizedAccessException: If the requester is not authenticated.
            ResourceNotFoundException: If there are none.

        """
        requester = self._require_authenticated(ctx)
        views = await crud.invitation_query.get_views_for_user(
            db, user_id=requester.id, limit=limit, offset=offset
        )
        if not views:
            raise ResourceNotFoundException("No invitations found for the current user")
        return views

    async def search_organization_member_invitation(
        self,
        db: AsyncSession,
        ctx: ApiContext,
        *,
        organization_id: int,
        params: schemas.InvitationSearchRequest,
    ) -> list[schemas.InvitationView]:
        """Search the invitations of an organization the requester administers.

        Missing or invalid status filters fall back to all known statuses. A target
        email narrows the search to the invitation of that user.

        Raises:
        ------
            UnauthorizedAccessException: If the requester is not authenticated.
            ForbiddenAccessException: If the requester is not an admin of the organization.
            InvalidArgumentException: If target_email is not a valid email address.
            ResourceNotFoundException: If the target email is unknown or nothing matches.

        """
        self._require_authenticated(ctx)
        if not ctx.is_admin_of_organization(organization_id):
            raise ForbiddenAccessException(
                f"User is not an admin of organization {organization_id}"
            )

        statuses = [status.lower() for status in params.statuses or []]
        if not InvitationStatus.are_all_valid(statuses):
            statuses = InvitationStatus.all_values()

        intended_for: Optional[int] = None
        if params.target_email and params.target_email.strip():
            email = self._validate_email(params.target_email)
            target_user = await crud.user.get_by_email(
                db, email=email, email_encryption=self._email_encryption
            )
            if target_user is None:
                raise ResourceNotFoundException("No user is registered with this email")
            intended_for = target_user.id

        views = await crud.invitation_query.search(
            db,
            params=schemas.InvitationSearchQuery(
                organization_id=organization_id,
                intended_for=intended_for,
                statuses=statuses,
                limit=params.limit,
                offset=params.offset,
            ),
        )
        if not views:
            raise ResourceNotFoundException("No invitations match the search")
        return views

    async def accept_organization_membership_invitation(
        self, db: AsyncSession, ctx: ApiContext, *, invitation_id: int
    ) -> schemas.OrganizationMember:
        """Accept an invitation and join its organization.

        Marking the invitation accepted and inserting the membership happen in one unit
        of work: if the membership cannot be written, the invitation stays as it was.

        Raises:
        ------
            UnauthorizedAccessException: If the requester is not authenticated.
            ResourceNotFoundException: If the invitation does not exist, or its organization,
                inviter or invitee has been deleted.
            ForbiddenAccessException: If the invitation is addressed to someone else, is
                not pending, or has expired.

        """
        requester = self._require_authenticated(ctx)

        async with UnitOfWork(db) as uow:
            invitation = await self._get_invitation(db, invitation_id)
            if invitation.intended_for != requester.id:
                raise ForbiddenAccessException("Invitation is not intended for the current user")
            self._require_valid_operation(invitation, InvitationOperation.ACCEPT)
            if invitation.is_expired:
                raise ForbiddenAccessException("Invitation has expired")

            await crud.invitation.update_status(
                db, id=invitation.id, status=InvitationStatus.ACCEPTED, uow=uow
            )
            member = await crud.organization_member.create(
                db,
                organization_id=invitation.organization_id,
                user_id=requester.id,
                uow=uow,
            )

        ctx.logger.with_context(
            operation="accept_invitation", organization_id=invitation.organization_id
        ).info(f"Invitation {invitation.id} accepted")
        return member

    async def cancel_organization_membership_invitation(
        self, db: AsyncSession, ctx: ApiContext, *, invitation_id: int
    ) -> schemas.InvitationView:
        """Cancel an invitation of an organization the requester administers.

        Cancelling an already cancelled invitation returns it unchanged.

        Raises:
        ------
            UnauthorizedAccessException: If the requester is not authenticated.
            ResourceNotFoundException: If the invitation does not exist, or its organization,
                inviter or invitee has been deleted.
            ForbiddenAccessException: If the requester is not an admin of the invitation's
                organization, or the invitation is accepted or rejected.

        """
        self._require_authenticated(ctx)
        invitation = await self._get_invitation(db, invitation_id)
        if not ctx.is_admin_of_organization(invitation.organization_id):
            raise ForbiddenAccessException(
                f"User is not an admin of organization {invitation.organization_id}"
            )
        if invitation.status == InvitationStatus.CANCELLED:
            return await self._get_view(db, invitation.id)
        self._require_valid_operation(invitation, InvitationOperation.CANCEL)

        await crud.invitation.update_status(db, id=invitation.id, status=InvitationStatus.CANCELLED)
        ctx.logger.with_context(
            operation="cancel_invitation", organization_id=invitation.organization_id
        ).info(f"Invitation {invitation.id} cancelled")
        return await self._get_view(db, invitation.id)

    async def reject_organization_membership_invitation(
        self, db: AsyncSession, ctx: ApiContext, *, invitation_id: int
    ) -> schemas.InvitationView:
        """Reject an invitation addressed to the requester.

        Rejecting an already rejected invitation returns it unchanged.

        Raises:
        ------
            UnauthorizedAccessException: If the requester is not authenticated.
            ResourceNotFoundException: If the invitation does not exist, or its organization,
                inviter or invitee has been deleted.
            ForbiddenAccessException: If the invitation is addressed to someone else, or is
                accepted or cancelled.

        """
        requester = self._require_authenticated(ctx)
        invitation = await self._get_invitation(db, invitation_id)
        if invitation.intended_for != requester.id:
            raise ForbiddenAccessException("Invitation is not intended for the current user")
        if invitation.status == InvitationStatus.REJECTED:
            return await self._get_view(db, invitation.id)
        self._require_valid_operation(invitation, InvitationOperation.REJECT)

        await crud.invitation.update_status(db, id=invitation.id, status=InvitationStatus.REJECTED)
        ctx.logger.with_context(
            operation="reject_invitation", organization_id=invitation.organization_id
        ).info(f"Invitation {invitation.id} rejected")
        return await self._get_view(db, invitation.id)
