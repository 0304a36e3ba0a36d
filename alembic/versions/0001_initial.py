"""Initial schema: users, jobs, applications, messages, flags, evaluations

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50)),
        *_timestamps(),
    )
    op.create_table(
        'jobs',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('simulation_type', sa.String(50), nullable=False),
        sa.Column('seniority_level', sa.String(30), nullable=False),
        sa.Column('time_limit_minutes', sa.Integer(), nullable=False),
        sa.Column('num_questions', sa.Integer(), nullable=False),
        sa.Column('scoring_weights', sa.JSON()),
        sa.Column('job_token', sa.String(64), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_jobs_owner_id', 'jobs', ['owner_id'])
    op.create_table(
        'applications',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('job_id', sa.String(32), sa.ForeignKey('jobs.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('candidate_name', sa.String(120), nullable=False),
        sa.Column('candidate_email', sa.String(254), nullable=False),
        sa.Column('location', sa.String(200)),
        sa.Column('work_auth', sa.String(50)),
        sa.Column('availability_date', sa.String(50)),
        sa.Column('years_experience', sa.Integer()),
        sa.Column('desired_comp', sa.String(100)),
        sa.Column('started_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('submitted_at', sa.DateTime()),
    )
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])
    op.create_table(
        'messages',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('application_id', sa.String(32), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('seq', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('application_id', 'seq', name='uq_messages_application_seq'),
    )
    op.create_index('ix_messages_application_id', 'messages', ['application_id'])
    op.create_table(
        'flags',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('application_id', sa.String(32), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('seq', sa.Integer(), nullable=False),
        sa.Column('severity', sa.String(20), nullable=False),
        sa.Column('category', sa.String(120), nullable=False),
        sa.Column('excerpt', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('application_id', 'seq', name='uq_flags_application_seq'),
    )
    op.create_index('ix_flags_application_id', 'flags', ['application_id'])
    op.create_table(
        'evaluations',
        sa.Column('id', sa.String(32), primary_key=True),
        sa.Column('application_id', sa.String(32), sa.ForeignKey('applications.id'), nullable=False, unique=True),
        sa.Column('overall_score', sa.Integer(), nullable=False),
        sa.Column('decision_quality', sa.Integer(), nullable=False),
        sa.Column('communication_clarity', sa.Integer(), nullable=False),
        sa.Column('structured_process', sa.Integer(), nullable=False),
        sa.Column('risk_awareness', sa.Integer(), nullable=False),
        sa.Column('professional_judgment', sa.Integer(), nullable=False),
        sa.Column('recommendation', sa.String(20), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('strengths', sa.JSON(), nullable=False),
        sa.Column('concerns', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )


def downgrade() -> None:
    for name in ('evaluations', 'flags', 'messages', 'applications', 'jobs', 'users'):
        op.drop_table(name)
