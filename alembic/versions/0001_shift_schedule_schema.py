"""shift scheduling schema

Revision ID: 0001_shift_schedule_schema
Revises: 
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_shift_schedule_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("weekly_hours_limit", sa.Float(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("role IN ('employee', 'manager')", name="ck_employees_role"),
        sa.CheckConstraint("weekly_hours_limit > 0", name="ck_employees_weekly_hours_limit"),
    )

    op.create_table(
        "shifts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("duration_hours", sa.Float(), nullable=True),
        sa.Column("max_employees", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "employee_availability",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("employee_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("shift_id", sa.String(length=36), nullable=True),
        sa.Column("start_time", sa.String(length=8), nullable=True),
        sa.Column("end_time", sa.String(length=8), nullable=True),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_employee_availability_day"),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_employee_availability_employee_id", "employee_availability", ["employee_id"], unique=False)

    op.create_table(
        "coverage_requirements",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("min_employees", sa.Integer(), nullable=False),
    )

    op.create_table(
        "time_off_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("employee_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_time_off_requests_status"),
        sa.CheckConstraint("start_date <= end_date", name="ck_time_off_requests_date_range"),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_time_off_requests_employee_id", "time_off_requests", ["employee_id"], unique=False)
    op.create_index("ix_time_off_requests_start_date", "time_off_requests", ["start_date"], unique=False)
    op.create_index("ix_time_off_requests_end_date", "time_off_requests", ["end_date"], unique=False)
    op.create_index("ix_time_off_requests_status", "time_off_requests", ["status"], unique=False)

    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("week_start_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_by", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('draft', 'published')", name="ck_schedules_status"),
        sa.UniqueConstraint("week_start_date", name="uq_schedules_week_start_date"),
    )
    op.create_index("ix_schedules_created_at", "schedules", ["created_at"], unique=False)

    op.create_table(
        "schedule_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("schedule_id", sa.String(length=36), nullable=False),
        sa.Column("employee_id", sa.String(length=36), nullable=False),
        sa.Column("shift_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["shift_id"], ["shifts.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("schedule_id", "employee_id", "date", name="uq_schedule_assignments_employee_date"),
    )
    op.create_index("ix_schedule_assignments_schedule_id", "schedule_assignments", ["schedule_id"], unique=False)
    op.create_index("ix_schedule_assignments_employee_id", "schedule_assignments", ["employee_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_schedule_assignments_employee_id", table_name="schedule_assignments")
    op.drop_index("ix_schedule_assignments_schedule_id", table_name="schedule_assignments")
    op.drop_table("schedule_assignments")
    op.drop_index("ix_schedules_created_at", table_name="schedules")
    op.drop_table("schedules")
    op.drop_index("ix_time_off_requests_status", table_name="time_off_requests")
    op.drop_index("ix_time_off_requests_end_date", table_name="time_off_requests")
    op.drop_index("ix_time_off_requests_start_date", table_name="time_off_requests")
    op.drop_index("ix_time_off_requests_employee_id", table_name="time_off_requests")
    op.drop_table("time_off_requests")
    op.drop_table("coverage_requirements")
    op.drop_index("ix_employee_availability_employee_id", table_name="employee_availability")
    op.drop_table("employee_availability")
    op.drop_table("shifts")
    op.drop_table("employees")
