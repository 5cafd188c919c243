"""Initial workforce schema: users, workplaces, assignments, clock logs, payment settings

Revision ID: 001_initial_workforce
Revises: None
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = '001_initial_workforce'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False, server_default='employee'),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true()),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('supervisor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_supervisor_id', 'users', ['supervisor_id'])

    op.create_table(
        'workplaces',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_workplaces_id', 'workplaces', ['id'])

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('workplace_id', sa.Integer(), sa.ForeignKey('workplaces.id'), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('priority', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='UPCOMING'),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('estimated_hours', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_assignments_id', 'assignments', ['id'])
    op.create_index('ix_assignments_employee_id', 'assignments', ['employee_id'])
    op.create_index('ix_assignments_workplace_id', 'assignments', ['workplace_id'])
    op.create_index('ix_assignments_status', 'assignments', ['status'])

    op.create_table(
        'clock_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assignment_id', sa.Integer(), sa.ForeignKey('assignments.id'), nullable=True),
        sa.Column('clock_in', sa.DateTime(timezone=True), nullable=False),
        sa.Column('clock_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('regular_hours', sa.Float(), server_default='0'),
        sa.Column('overtime_hours', sa.Float(), server_default='0'),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_clock_logs_id', 'clock_logs', ['id'])
    op.create_index('ix_clock_logs_employee_id', 'clock_logs', ['employee_id'])
    op.create_index('ix_clock_logs_assignment_id', 'clock_logs', ['assignment_id'])
    op.create_index('ix_clock_logs_clock_in', 'clock_logs', ['clock_in'])

    # At most one open shift per cleaner
    op.create_index(
        'uq_clock_logs_one_open_per_employee',
        'clock_logs',
        ['employee_id'],
        unique=True,
        postgresql_where=sa.text('clock_out IS NULL'),
        sqlite_where=sa.text('clock_out IS NULL'),
    )

    op.create_table(
        'payment_settings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('regular_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('overtime_rate', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_payment_settings_id', 'payment_settings', ['id'])
    op.create_index('ix_payment_settings_created_at', 'payment_settings', ['created_at'])


def downgrade():
    op.drop_table('payment_settings')
    op.drop_index('uq_clock_logs_one_open_per_employee', table_name='clock_logs')
    op.drop_table('clock_logs')
    op.drop_table('assignments')
    op.drop_table('workplaces')
    op.drop_table('users')
