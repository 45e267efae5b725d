"""Integration tests for the user, membership and invitation repositories."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from memberhub import crud, schemas
from memberhub.core.datetime_utils import utc_days_from_now_naive, utc_now_naive
from memberhub.core.exceptions import DecryptionFailure, ResourceNotFoundException
from memberhub.core.shared_models import InvitationStatus
from memberhub.db.unit_of_work import UnitOfWork
from memberhub.models.invitation import Invitation
from memberhub.models.organization import Organization
from memberhub.models.organization_member import OrganizationMember
from memberhub.models.user import User
from tests.fixtures.common import INVITEE_EMAIL, create_user

pytestmark = pytest.mark.integration


def _invitation_in(seeded, **overrides) -> schemas.InvitationCreate:
    values = {
        "organization_id": seeded.organization.id,
        "created_by": seeded.owner.id,
        "intended_for": seeded.invitee.id,
        "status": InvitationStatus.PENDING,
        "expires_at": utc_days_from_now_naive(14),
    }
    values.update(overrides)
    return schemas.InvitationCreate(**values)


@pytest.mark.asyncio
class TestUserRepository:
    async def test_email_is_never_stored_in_plaintext(self, db_session, email_encryption):
        user = await create_user(db_session, email_encryption, "Plain@Example.com")

        row = await db_session.get(User, user.id)
        assert "plain@example.com" not in row.email_encrypted
        assert row.email_hash == email_encryption.hash_email("plain@example.com")
        assert user.email == "plain@example.com"

    async def test_get_by_email_is_case_insensitive(self, db_session, email_encryption):
        user = await create_user(db_session, email_encryption, "dana@example.com")

        found = await crud.user.get_by_email(
            db_session, email=" DANA@example.com ", email_encryption=email_encryption
        )

        assert found.id == user.id

    async def test_get_by_unknown_email(self, db_session, email_encryption):
        assert (
            await crud.user.get_by_email(
                db_session, email="nobody@example.com", email_encryption=email_encryption
            )
            is None
        )

    async def test_soft_deleted_user_is_invisible(self, db_session, email_encryption):
        user = await create_user(db_session, email_encryption, "gone@example.com")
        row = await db_session.get(User, user.id)
        row.deleted_at = utc_now_naive()
        await db_session.commit()

        assert await crud.user.get(db_session, user.id, email_encryption=email_encryption) is None
        assert (
            await crud.user.get_by_email(
                db_session, email="gone@example.com", email_encryption=email_encryption
            )
            is None
        )

    async def test_corrupted_ciphertext_raises(self, db_session, email_encryption):
        user = await create_user(db_session, email_encryption, "eve@example.com")
        row = await db_session.get(User, user.id)
        row.email_encrypted = email_encryption.encrypt_email("x@example.com").data[:-4] + "AAAA"
        await db_session.commit()

        with pytest.raises(DecryptionFailure):
            await crud.user.get(db_session, user.id, email_encryption=email_encryption)


@pytest.mark.asyncio
class TestInvitationRepository:
    async def test_create_is_idempotent(self, db_session, seeded_organization):
        first = await crud.invitation.create(db_session, obj_in=_invitation_in(seeded_organization))
        second = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )

        assert first.id == second.id
        count = await db_session.scalar(select(func.count()).select_from(Invitation))
        assert count == 1

    async def test_create_does_not_overwrite_existing(self, db_session, seeded_organization):
        first = await crud.invitation.create(db_session, obj_in=_invitation_in(seeded_organization))
        await crud.invitation.update_status(
            db_session, id=first.id, status=InvitationStatus.REJECTED
        )

        again = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )

        assert again.id == first.id
        assert again.status == InvitationStatus.REJECTED

    async def test_create_after_soft_delete_inserts_new_row(
        self, db_session, seeded_organization
    ):
        first = await crud.invitation.create(db_session, obj_in=_invitation_in(seeded_organization))
        row = await db_session.get(Invitation, first.id)
        row.deleted_at = utc_now_naive()
        await db_session.commit()

        second = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )

        assert second.id != first.id
        assert await crud.invitation.get(db_session, first.id) is None

    async def test_update_status_sets_expiry(self, db_session, seeded_organization):
        invitation = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )
        new_expiry = utc_days_from_now_naive(30)

        updated = await crud.invitation.update_status(
            db_session,
            id=invitation.id,
            status=InvitationStatus.PENDING,
            expires_at=new_expiry,
        )

        assert updated.expires_at == new_expiry
        assert updated.modified_at >= invitation.modified_at

    async def test_update_status_of_missing_invitation(self, db_session):
        with pytest.raises(ResourceNotFoundException):
            await crud.invitation.update_status(
                db_session, id=12345, status=InvitationStatus.CANCELLED
            )

    async def test_get_multi_by_intended_for(self, db_session, seeded_organization):
        await crud.invitation.create(db_session, obj_in=_invitation_in(seeded_organization))

        invitations = await crud.invitation.get_multi_by_intended_for(
            db_session, user_id=seeded_organization.invitee.id
        )

        assert [invitation.intended_for for invitation in invitations] == [
            seeded_organization.invitee.id
        ]

    async def test_writes_inside_unit_of_work_roll_back(self, db_session, seeded_organization):
        with pytest.raises(RuntimeError):
            async with UnitOfWork(db_session) as uow:
                await crud.invitation.create(
                    db_session, obj_in=_invitation_in(seeded_organization), uow=uow
                )
                raise RuntimeError("abort")

        count = await db_session.scalar(select(func.count()).select_from(Invitation))
        assert count == 0


@pytest.mark.asyncio
class TestOrganizationMemberRepository:
    async def test_create_is_idempotent(self, db_session, seeded_organization):
        org_id = seeded_organization.organization.id
        user_id = seeded_organization.invitee.id

        first = await crud.organization_member.create(
            db_session, organization_id=org_id, user_id=user_id
        )
        second = await crud.organization_member.create(
            db_session, organization_id=org_id, user_id=user_id
        )

        assert first.id == second.id
        count = await db_session.scalar(
            select(func.count())
            .select_from(OrganizationMember)
            .where(OrganizationMember.user_id == user_id)
        )
        assert count == 1

    async def test_organization_ids_for_user(self, db_session, seeded_organization):
        org_id = seeded_organization.organization.id
        owner_id = seeded_organization.owner.id

        assert await crud.organization_member.get_organization_ids_for_user(
            db_session, user_id=owner_id
        ) == [org_id]
        assert await crud.organization_admin.get_organization_ids_for_user(
            db_session, user_id=owner_id
        ) == [org_id]
        assert (
            await crud.organization_admin.get_organization_ids_for_user(
                db_session, user_id=seeded_organization.invitee.id
            )
            == []
        )


@pytest.mark.asyncio
class TestInvitationQueries:
    async def test_find_by_intended_user_email(
        self, db_session, seeded_organization, email_encryption
    ):
        created = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )

        found = await crud.invitation_query.find_by_intended_user_email(
            db_session,
            email=INVITEE_EMAIL.upper(),
            organization_id=seeded_organization.organization.id,
            email_encryption=email_encryption,
        )
        other_org = await crud.invitation_query.find_by_intended_user_email(
            db_session,
            email=INVITEE_EMAIL,
            organization_id=seeded_organization.organization.id + 1,
            email_encryption=email_encryption,
        )

        assert found.id == created.id
        assert other_org is None

    async def test_view_carries_names(self, db_session, seeded_organization):
        created = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )

        view = await crud.invitation_query.get_view(db_session, created.id)

        assert view.organization_name == "Acme"
        assert view.inviter_name == "owner"
        assert view.invitee_name == "invitee"
        assert view.status == InvitationStatus.PENDING

    async def test_views_for_user(self, db_session, seeded_organization):
        await crud.invitation.create(db_session, obj_in=_invitation_in(seeded_organization))

        views = await crud.invitation_query.get_views_for_user(
            db_session, user_id=seeded_organization.invitee.id
        )
        none = await crud.invitation_query.get_views_for_user(
            db_session, user_id=seeded_organization.outsider.id
        )

        assert len(views) == 1
        assert none == []

    async def test_search_filters_and_pages(self, db_session, seeded_organization):
        org_id = seeded_organization.organization.id
        pending = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )
        rejected = await crud.invitation.create(
            db_session,
            obj_in=_invitation_in(
                seeded_organization,
                intended_for=seeded_organization.outsider.id,
                status=InvitationStatus.REJECTED,
            ),
        )

        only_pending = await crud.invitation_query.search(
            db_session,
            params=schemas.InvitationSearchQuery(organization_id=org_id, statuses=["PENDING"]),
        )
        everything = await crud.invitation_query.search(
            db_session, params=schemas.InvitationSearchQuery(organization_id=org_id)
        )
        second_page = await crud.invitation_query.search(
            db_session,
            params=schemas.InvitationSearchQuery(organization_id=org_id, limit=1, offset=1),
        )
        by_user = await crud.invitation_query.search(
            db_session,
            params=schemas.InvitationSearchQuery(
                organization_id=org_id, intended_for=seeded_organization.outsider.id
            ),
        )

        assert [view.id for view in only_pending] == [pending.id]
        assert {view.id for view in everything} == {pending.id, rejected.id}
        assert len(second_page) == 1
        assert [view.id for view in by_user] == [rejected.id]

    async def test_search_orders_newest_first(self, db_session, seeded_organization):
        older = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )
        row = await db_session.get(Invitation, older.id)
        row.created_at = utc_now_naive() - timedelta(days=1)
        await db_session.commit()
        newer = await crud.invitation.create(
            db_session,
            obj_in=_invitation_in(seeded_organization, intended_for=seeded_organization.outsider.id),
        )

        views = await crud.invitation_query.search(
            db_session,
            params=schemas.InvitationSearchQuery(
                organization_id=seeded_organization.organization.id
            ),
        )

        assert [view.id for view in views] == [newer.id, older.id]

    async def test_search_hides_soft_deleted_invitee(self, db_session, seeded_organization):
        await crud.invitation.create(db_session, obj_in=_invitation_in(seeded_organization))
        row = await db_session.get(User, seeded_organization.invitee.id)
        row.deleted_at = utc_now_naive()
        await db_session.commit()

        views = await crud.invitation_query.search(
            db_session,
            params=schemas.InvitationSearchQuery(
                organization_id=seeded_organization.organization.id
            ),
        )

        assert views == []

    async def test_get_hides_invitation_of_deleted_organization(
        self, db_session, seeded_organization
    ):
        created = await crud.invitation.create(
            db_session, obj_in=_invitation_in(seeded_organization)
        )
        assert (await crud.invitation_query.get(db_session, created.id)).id == created.id

        row = await db_session.get(Organization, seeded_organization.organization.id)
        row.deleted_at = utc_now_naive()
        await db_session.commit()

        assert await crud.invitation_query.get(db_session, created.id) is None
        assert await crud.invitation.get(db_session, created.id) is not None
