"""Add pull_requests table and suggestions.explanation_of_failure

Revision ID: 002_add_pull_requests
Revises: 001_initial
Create Date: 2026-10-20

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002_add_pull_requests'
down_revision: Union[str, None] = '001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column('suggestions', sa.Column('explanation_of_failure', sa.Text(), nullable=True))

    # Pull requests opened for approved suggestions
    op.create_table(
        'pull_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('suggestion_id', sa.Uuid(), nullable=False),
        sa.Column('approval_id', sa.Uuid(), nullable=False),
        sa.Column('failure_id', sa.Uuid(), nullable=False),
        sa.Column('branch_name', sa.String(255), nullable=False),
        sa.Column('selector_key', sa.String(511), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('pr_number', sa.Integer(), nullable=True),
        sa.Column('pr_url', sa.String(1000), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_pull_requests_suggestion_id', 'pull_requests', ['suggestion_id'], unique=True)
    op.create_index('ix_pull_requests_failure_id', 'pull_requests', ['failure_id'])
    op.create_index('ix_pull_requests_status', 'pull_requests', ['status'])


def downgrade() -> None:
    op.drop_index('ix_pull_requests_status', table_name='pull_requests')
    op.drop_index('ix_pull_requests_failure_id', table_name='pull_requests')
    op.drop_index('ix_pull_requests_suggestion_id', table_name='pull_requests')
    op.drop_table('pull_requests')
    op.drop_column('suggestions', 'explanation_of_failure')
