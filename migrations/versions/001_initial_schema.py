"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


COLLECTIONS = ('invoices', 'clients', 'accounts')


def upgrade() -> None:
    # One JSON document table per collection
    for table in COLLECTIONS:
        op.create_table(table,
            sa.Column('id', sa.String(length=128), nullable=False),
            sa.Column('owner_id', sa.String(length=128), nullable=False),
            sa.Column('data', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(f'ix_{table}_owner_created', table, ['owner_id', 'created_at'])


def downgrade() -> None:
    for table in reversed(COLLECTIONS):
        op.drop_index(f'ix_{table}_owner_created', table_name=table)
        op.drop_table(table)
