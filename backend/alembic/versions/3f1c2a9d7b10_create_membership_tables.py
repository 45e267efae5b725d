"""Create user, organization, admin, member and invitation tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_ROWS = sa.text('deleted_at IS NULL')


def _base_columns() -> list:
    return [
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('modified_at', sa.DateTime(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('user',
        *_base_columns(),
        sa.Column('email_hash', sa.String(length=64), nullable=False),
        sa.Column('email_encrypted', sa.Text(), nullable=False),
        sa.Column('encryption_version', sa.SmallInteger(), nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('uq_user_email_hash_active', 'user', ['email_hash'],
                    unique=True, postgresql_where=ACTIVE_ROWS)

    op.create_table('organization',
        *_base_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('organization_admin',
        *_base_columns(),
        sa.Column('organization_id', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organization.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'user_id', name='uq_organization_admin_org_user'),
    )

    op.create_table('organization_member',
        *_base_columns(),
        sa.Column('organization_id', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organization.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('uq_organization_member_org_user_active', 'organization_member',
                    ['organization_id', 'user_id'], unique=True, postgresql_where=ACTIVE_ROWS)

    op.create_table('invitation',
        *_base_columns(),
        sa.Column('organization_id', sa.BigInteger(), nullable=False),
        sa.Column('created_by', sa.BigInteger(), nullable=False),
        sa.Column('intended_for', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organization.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['intended_for'], ['user.id']),
        sa.ForeignKeyConstraint(
            ['organization_id', 'created_by'],
            ['organization_admin.organization_id', 'organization_admin.user_id'],
            name='fk_invitation_created_by_admin',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('uq_invitation_org_intended_for_active', 'invitation',
                    ['organization_id', 'intended_for'], unique=True,
                    postgresql_where=ACTIVE_ROWS)


def downgrade() -> None:
    op.drop_index('uq_invitation_org_intended_for_active', table_name='invitation')
    op.drop_table('invitation')
    op.drop_index('uq_organization_member_org_user_active', table_name='organization_member')
    op.drop_table('organization_member')
    op.drop_table('organization_admin')
    op.drop_table('organization')
    op.drop_index('uq_user_email_hash_active', table_name='user')
    op.drop_table('user')
