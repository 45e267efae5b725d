"""Common test fixtures."""

import base64
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

import pytest

from memberhub import crud, schemas
from memberhub.api.context import ApiContext
from memberhub.core.email_encryption import EmailEncryption
from memberhub.core.invitation_service import InvitationService
from memberhub.core.logging import logger
from memberhub.core.organization_service import OrganizationService
from memberhub.core.user_service import UserService

OWNER_EMAIL = "owner@example.com"
INVITEE_EMAIL = "invitee@example.com"
OUTSIDER_EMAIL = "outsider@example.com"


def make_user(
    id: int = 1,
    email: str = "test@example.com",
    username: str = "test-user",
) -> schemas.User:
    """Build a user schema without touching the database."""
    return schemas.User(
        id=id,
        email=email,
        username=username,
        email_verified=True,
        created_at=datetime(2024, 1, 1),
        modified_at=datetime(2024, 1, 1),
    )


def make_context(
    user: Optional[schemas.User] = None,
    *,
    member_of: Iterable[int] = (),
    admin_of: Iterable[int] = (),
) -> ApiContext:
    """Build an API context for ``user`` with the given organization roles."""
    return ApiContext(
        request_id=str(uuid.uuid4()),
        user=user,
        member_organization_ids=frozenset(member_of),
        admin_organization_ids=frozenset(admin_of),
        logger=logger.with_context(context_base="test"),
    )


async def create_user(db, email_encryption: EmailEncryption, email: str) -> schemas.User:
    """Insert a user with ``email``; the username is the local part."""
    return await crud.user.create(
        db,
        obj_in=schemas.UserCreate(email=email, username=email.split("@")[0], email_verified=True),
        email_encryption=email_encryption,
    )


async def context_for(db, user: schemas.User) -> ApiContext:
    """Build the context ``deps.get_context`` would build for ``user``."""
    member_ids = await crud.organization_member.get_organization_ids_for_user(db, user_id=user.id)
    admin_ids = await crud.organization_admin.get_organization_ids_for_user(db, user_id=user.id)
    return make_context(user, member_of=member_ids, admin_of=admin_ids)


@dataclass
class SeededOrganization:
    """An organization owned by ``owner`` and two other registered users."""

    organization: schemas.Organization
    owner: schemas.User
    invitee: schemas.User
    outsider: schemas.User
    owner_ctx: ApiContext
    invitee_ctx: ApiContext
    outsider_ctx: ApiContext


@pytest.fixture
def email_encryption_key():
    """Random base64 master key."""
    return base64.b64encode(os.urandom(32)).decode()


@pytest.fixture
def invitation_service(email_encryption):
    """Invitation service using the test codec."""
    return InvitationService(email_encryption, expiry_days=14)


@pytest.fixture
def organization_service():
    """Organization service."""
    return OrganizationService()


@pytest.fixture
def user_service(email_encryption):
    """User service using the test codec."""
    return UserService(email_encryption)


@pytest.fixture
def unauthenticated_context():
    """Context of a caller without a local user."""
    return make_context()


@pytest.fixture
def admin_context():
    """Context of user 1, admin and member of organization 10."""
    return make_context(make_user(), member_of=[10], admin_of=[10])


@pytest.fixture
async def seeded_organization(db_session, email_encryption, organization_service):
    """Create three users and an organization administered by the first one."""
    owner = await create_user(db_session, email_encryption, OWNER_EMAIL)
    invitee = await create_user(db_session, email_encryption, INVITEE_EMAIL)
    outsider = await create_user(db_session, email_encryption, OUTSIDER_EMAIL)

    organization = await organization_service.register_new_organization(
        db_session,
        make_context(owner),
        name="Acme",
        description="Acme test organization",
    )

    return SeededOrganization(
        organization=organization,
        owner=owner,
        invitee=invitee,
        outsider=outsider,
        owner_ctx=await context_for(db_session, owner),
        invitee_ctx=await context_for(db_session, invitee),
        outsider_ctx=await context_for(db_session, outsider),
    )
