"""add name and request hashes to registrations

Revision ID: r002_add_name_and_request_hashes
Revises: r001_create_registration_desk_tables
Create Date: 2026-10-26 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'r002_add_name_and_request_hashes'
down_revision: Union[str, None] = 'r001_create_registration_desk_tables'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    name_hash backs the name-only duplicate check for staff channels.
    request_hash ties an idempotency key to the caller and request body.

    Existing rows keep NULL name_hash; the names are encrypted, so it can only
    be filled in by re-saving the row through the application.
    """
    with op.batch_alter_table('registrations') as batch_op:
        batch_op.add_column(sa.Column('name_hash', sa.String(length=64), nullable=True))
        batch_op.add_column(sa.Column('request_hash', sa.String(length=64), nullable=True))
        batch_op.create_index('ix_registrations_name_hash', ['name_hash'], unique=False)


def downgrade() -> None:
    with op.batch_alter_table('registrations') as batch_op:
        batch_op.drop_index('ix_registrations_name_hash')
        batch_op.drop_column('request_hash')
        batch_op.drop_column('name_hash')
