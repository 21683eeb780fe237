"""Initial schema: users, runs, failures, suggestions, approvals, selectors

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(64), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    # Runs table
    op.create_table(
        'runs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('repo', sa.String(255), nullable=False),
        sa.Column('branch', sa.String(255), nullable=False),
        sa.Column('commit', sa.String(64), nullable=False),
        sa.Column('ci_run_id', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='running'),
        sa.Column('started_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('total_tests', sa.Integer(), nullable=True),
        sa.Column('passed_tests', sa.Integer(), nullable=True),
        sa.Column('failed_tests', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_runs_repo', 'runs', ['repo'])
    op.create_index('ix_runs_ci_run_id', 'runs', ['ci_run_id'])
    op.create_index('ix_runs_status', 'runs', ['status'])
    op.create_index('ix_runs_repo_status_started_at', 'runs', ['repo', 'status', 'started_at'])

    # Failures table (run_id is a loose reference, no foreign key)
    op.create_table(
        'failures',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('run_id', sa.String(255), nullable=False),
        sa.Column('repo', sa.String(255), nullable=False),
        sa.Column('branch', sa.String(255), nullable=False),
        sa.Column('commit', sa.String(64), nullable=False),
        sa.Column('suite', sa.String(500), nullable=False),
        sa.Column('test', sa.String(500), nullable=False),
        sa.Column('spec_path', sa.String(500), nullable=False),
        sa.Column('browser', sa.String(50), nullable=False),
        sa.Column('viewport', sa.String(50), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('screenshot_path', sa.String(1000), nullable=True),
        sa.Column('dom_html', sa.Text(), nullable=False),
        sa.Column('console_logs', sa.JSON(), nullable=False),
        sa.Column('network_logs', sa.JSON(), nullable=False),
        sa.Column('current_selector', sa.String(1000), nullable=False),
        sa.Column('selector_context', sa.JSON(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='new'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_failures_run_id', 'failures', ['run_id'])
    op.create_index('ix_failures_status', 'failures', ['status'])
    op.create_index('ix_failures_repo_status_timestamp', 'failures', ['repo', 'status', 'timestamp'])

    # Suggestions table
    op.create_table(
        'suggestions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('failure_id', sa.Uuid(), nullable=False),
        sa.Column('candidates', sa.JSON(), nullable=False),
        sa.Column('top_choice', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_suggestions_failure_id', 'suggestions', ['failure_id'])

    # Approvals table
    op.create_table(
        'approvals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('suggestion_id', sa.Uuid(), nullable=False),
        sa.Column('approved_by', sa.String(255), nullable=False),
        sa.Column('decision', sa.String(20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_approvals_suggestion_id', 'approvals', ['suggestion_id'])
    op.create_index('ix_approvals_decision', 'approvals', ['decision'])

    # Selector catalog
    op.create_table(
        'selectors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('page', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('current', sa.String(1000), nullable=False),
        sa.Column('history', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('page', 'name', name='uq_selectors_page_name')
    )
    op.create_index('ix_selectors_page', 'selectors', ['page'])


def downgrade() -> None:
    op.drop_index('ix_selectors_page', table_name='selectors')
    op.drop_table('selectors')
    op.drop_index('ix_approvals_decision', table_name='approvals')
    op.drop_index('ix_approvals_suggestion_id', table_name='approvals')
    op.drop_table('approvals')
    op.drop_index('ix_suggestions_failure_id', table_name='suggestions')
    op.drop_table('suggestions')
    op.drop_index('ix_failures_repo_status_timestamp', table_name='failures')
    op.drop_index('ix_failures_status', table_name='failures')
    op.drop_index('ix_failures_run_id', table_name='failures')
    op.drop_table('failures')
    op.drop_index('ix_runs_repo_status_started_at', table_name='runs')
    op.drop_index('ix_runs_status', table_name='runs')
    op.drop_index('ix_runs_ci_run_id', table_name='runs')
    op.drop_index('ix_runs_repo', table_name='runs')
    op.drop_table('runs')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
