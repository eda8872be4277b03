"""create registration desk tables

Revision ID: r001_create_registration_desk_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'r001_create_registration_desk_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the registration desk schema.

    Unique constraints on email_hash, identity_hash, ticket_number and
    idempotency_key are what arbitrate concurrent intake requests.
    """
    op.create_table(
        'roles',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('permissions', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_roles_name', 'roles', ['name'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role_id', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role_id', 'users', ['role_id'], unique=False)

    op.create_table(
        'print_statuses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('type', 'name', name='uq_print_status_type_name'),
    )
    op.create_index('ix_print_statuses_type', 'print_statuses', ['type'], unique=False)

    op.create_table(
        'server_modes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('mode', sa.String(length=20), nullable=False),
        sa.Column('activated_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['activated_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_server_modes_mode', 'server_modes', ['mode'], unique=False)
    op.create_index('ix_server_modes_created_at', 'server_modes', ['created_at'], unique=False)

    op.create_table(
        'registrations',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('ticket_number', sa.String(length=36), nullable=False),
        # Encrypted identity columns
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('company_name', sa.Text(), nullable=True),
        sa.Column('email_hash', sa.String(length=64), nullable=True),
        sa.Column('identity_hash', sa.String(length=64), nullable=False),
        # Survey fields
        sa.Column('job_title', sa.String(length=255), nullable=True),
        sa.Column('industry', sa.String(length=255), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('age_range', sa.String(length=50), nullable=True),
        sa.Column('gender', sa.String(length=50), nullable=True),
        sa.Column('referral_source', sa.String(length=255), nullable=True),
        sa.Column('registration_type', sa.String(length=20), nullable=False),
        sa.Column('payment_status', sa.String(length=20), server_default='unpaid', nullable=False),
        sa.Column('server_mode', sa.String(length=20), nullable=True),
        sa.Column('badge_status_id', sa.Integer(), nullable=False),
        sa.Column('ticket_status_id', sa.Integer(), nullable=False),
        sa.Column('badge_print_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('ticket_print_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('confirmed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('confirmed_by', sa.String(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('registered_by', sa.String(), nullable=True),
        sa.Column('qr_asset_path', sa.String(length=255), nullable=True),
        sa.Column('idempotency_key', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['badge_status_id'], ['print_statuses.id']),
        sa.ForeignKeyConstraint(['ticket_status_id'], ['print_statuses.id']),
        sa.ForeignKeyConstraint(['confirmed_by'], ['users.id']),
        sa.ForeignKeyConstraint(['registered_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_registrations_ticket_number', 'registrations', ['ticket_number'], unique=True)
    op.create_index('ix_registrations_email_hash', 'registrations', ['email_hash'], unique=True)
    op.create_index('ix_registrations_identity_hash', 'registrations', ['identity_hash'], unique=True)
    op.create_index('ix_registrations_idempotency_key', 'registrations', ['idempotency_key'], unique=True)
    op.create_index('ix_registrations_registration_type', 'registrations', ['registration_type'], unique=False)
    op.create_index('ix_registrations_registered_by', 'registrations', ['registered_by'], unique=False)

    op.create_table(
        'scans',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('registration_id', sa.String(), nullable=False),
        sa.Column('scanned_by', sa.String(), nullable=True),
        sa.Column('scanned_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('target', sa.String(length=20), server_default='badge', nullable=False),
        sa.Column('badge_status_id', sa.Integer(), nullable=True),
        sa.Column('ticket_status_id', sa.Integer(), nullable=True),
        sa.Column('payment_status', sa.String(length=20), nullable=True),
        sa.ForeignKeyConstraint(['registration_id'], ['registrations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['scanned_by'], ['users.id']),
        sa.ForeignKeyConstraint(['badge_status_id'], ['print_statuses.id']),
        sa.ForeignKeyConstraint(['ticket_status_id'], ['print_statuses.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_scans_registration_id', 'scans', ['registration_id'], unique=False)
    op.create_index('ix_scans_scanned_by', 'scans', ['scanned_by'], unique=False)
    op.create_index('ix_scans_scanned_at', 'scans', ['scanned_at'], unique=False)
    op.create_index('idx_scans_registration_scanned', 'scans', ['registration_id', 'scanned_at'], unique=False)


def downgrade() -> None:
    op.drop_table('scans')
    op.drop_table('registrations')
    op.drop_table('server_modes')
    op.drop_table('print_statuses')
    op.drop_table('users')
    op.drop_table('roles')
