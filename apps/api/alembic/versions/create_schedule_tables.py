"""create employees, skills, statuses and daily schedule tables

Revision ID: create_schedule_tables
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_schedule_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'employees',
        sa.Column('employee_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('employee_id'),
    )

    op.create_table(
        'skills',
        sa.Column('skill_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('skill_id'),
        sa.UniqueConstraint('slug', name='uq_skills_slug'),
    )

    op.create_table(
        'statuses',
        sa.Column('status_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('status_id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'employee_skills',
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.skill_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('employee_id', 'skill_id'),
    )

    op.create_table(
        'schedule_preferences',
        sa.Column('preference_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('maximum_hours', sa.Integer(), nullable=False),
        sa.Column('employment_type', sa.Enum('FT', 'PT', name='employment_type'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('preference_id'),
    )
    op.create_index(op.f('ix_schedule_preferences_employee_id'), 'schedule_preferences', ['employee_id'], unique=True)

    op.create_table(
        'daily_schedules',
        sa.Column('daily_schedule_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('date_of_day', sa.Date(), nullable=False),
        sa.Column('scheduled_start_time', sa.Time(), nullable=False),
        sa.Column('scheduled_end_time', sa.Time(), nullable=False),
        sa.Column('actual_start_time', sa.Time(), nullable=True),
        sa.Column('actual_end_time', sa.Time(), nullable=True),
        sa.Column('vci', sa.Boolean(), nullable=True),
        sa.Column('agree_on_exception', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('exception_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.employee_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['status_id'], ['statuses.status_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('daily_schedule_id'),
    )
    op.create_index(op.f('ix_daily_schedules_date_of_day'), 'daily_schedules', ['date_of_day'], unique=False)
    op.create_index('ix_daily_schedules_date_employee', 'daily_schedules', ['date_of_day', 'employee_id'], unique=False)

    op.create_table(
        'daily_schedule_skills',
        sa.Column('daily_schedule_id', sa.Integer(), nullable=False),
        sa.Column('skill_id', sa.Integer(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default='true'),
        sa.ForeignKeyConstraint(['daily_schedule_id'], ['daily_schedules.daily_schedule_id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['skill_id'], ['skills.skill_id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('daily_schedule_id', 'skill_id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('daily_schedule_skills')
    op.drop_index('ix_daily_schedules_date_employee', table_name='daily_schedules')
    op.drop_index(op.f('ix_daily_schedules_date_of_day'), table_name='daily_schedules')
    op.drop_table('daily_schedules')
    op.drop_index(op.f('ix_schedule_preferences_employee_id'), table_name='schedule_preferences')
    op.drop_table('schedule_preferences')
    op.drop_table('employee_skills')
    op.drop_table('statuses')
    op.drop_table('skills')
    op.drop_table('employees')
    sa.Enum(name='employment_type').drop(op.get_bind(), checkfirst=True)
