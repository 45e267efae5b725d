"""Integration tests for organization registration and user sign up."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from memberhub import crud
from memberhub.core.exceptions import InvalidArgumentException, UnauthorizedAccessException
from memberhub.models.organization import Organization
from memberhub.models.organization_admin import OrganizationAdmin
from tests.fixtures.common import context_for, create_user, make_context

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
class TestRegisterOrganization:
    async def test_creator_becomes_admin_and_member(
        self, db_session, email_encryption, organization_service
    ):
        user = await create_user(db_session, email_encryption, "founder@example.com")

        organization = await organization_service.register_new_organization(
            db_session, make_context(user), name="  Initech ", description="Software"
        )

        assert organization.name == "Initech"
        assert organization.created_by == user.id
        assert organization.is_active
        ctx = await context_for(db_session, user)
        assert ctx.is_admin_of_organization(organization.id)
        assert ctx.is_member_of_organization(organization.id)

    @pytest.mark.parametrize("name, description", [("", "x"), ("  ", "x"), ("Acme", " ")])
    async def test_blank_fields(
        self, db_session, email_encryption, organization_service, name, description
    ):
        user = await create_user(db_session, email_encryption, "founder@example.com")

        with pytest.raises(InvalidArgumentException):
            await organization_service.register_new_organization(
                db_session, make_context(user), name=name, description=description
            )

    async def test_unauthenticated(self, db_session, organization_service):
        with pytest.raises(UnauthorizedAccessException):
            await organization_service.register_new_organization(
                db_session, make_context(), name="Acme", description="x"
            )

    async def test_registration_is_atomic(
        self, db_session, email_encryption, organization_service
    ):
        """A failure while adding the member leaves no organization or admin row behind."""
        user = await create_user(db_session, email_encryption, "founder@example.com")

        with patch.object(
            crud.organization_member, "create", AsyncMock(side_effect=RuntimeError("db down"))
        ):
            with pytest.raises(RuntimeError):
                await organization_service.register_new_organization(
                    db_session, make_context(user), name="Acme", description="x"
                )

        assert await db_session.scalar(select(func.count()).select_from(Organization)) == 0
        assert await db_session.scalar(select(func.count()).select_from(OrganizationAdmin)) == 0


@pytest.mark.asyncio
class TestSignUp:
    async def test_creates_user(self, db_session, user_service):
        user = await user_service.sign_up_via_third_party(
            db_session, email="New.User@example.com", username="New User", email_verified=True
        )

        assert user.id is not None
        assert user.email == "new.user@example.com"
        assert user.username == "New User"
        assert user.is_email_verified

    async def test_returns_existing_user(self, db_session, user_service):
        first = await user_service.sign_up_via_third_party(
            db_session, email="repeat@example.com", username="Repeat", email_verified=False
        )
        second = await user_service.sign_up_via_third_party(
            db_session, email="REPEAT@example.com", username="Other", email_verified=True
        )

        assert first.id == second.id
        assert second.username == "Repeat"

    async def test_username_defaults_to_local_part(self, db_session, user_service):
        user = await user_service.sign_up_via_third_party(
            db_session, email="nameless@example.com", username=None, email_verified=False
        )

        assert user.username == "nameless"

    async def test_email_required(self, db_session, user_service):
        with pytest.raises(InvalidArgumentException):
            await user_service.sign_up_via_third_party(
                db_session, email="", username="x", email_verified=False
            )
