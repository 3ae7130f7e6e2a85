from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import CheckConstraint, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiftplan.db import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class EmployeeRecord(Base):
    __tablename__ = "employees"
    __table_args__ = (
        CheckConstraint("role IN ('employee', 'manager')", name="ck_employees_role"),
        CheckConstraint("weekly_hours_limit > 0", name="ck_employees_weekly_hours_limit"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    weekly_hours_limit: Mapped[float] = mapped_column(Float, nullable=False, default=40)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class ShiftRecord(Base):
    __tablename__ = "shifts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    start_time: Mapped[str] = mapped_column(String(8), nullable=False)
    end_time: Mapped[str] = mapped_column(String(8), nullable=False)
    duration_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_employees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class AvailabilityRecord(Base):
    __tablename__ = "employee_availability"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_employee_availability_day"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    shift_id: Mapped[str | None] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), nullable=True)
    start_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(8), nullable=True)


class CoverageRequirementRecord(Base):
    __tablename__ = "coverage_requirements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    start_time: Mapped[str] = mapped_column(String(8), nullable=False)
    end_time: Mapped[str] = mapped_column(String(8), nullable=False)
    min_employees: Mapped[int] = mapped_column(Integer, nullable=False)


class TimeOffRequestRecord(Base):
    __tablename__ = "time_off_requests"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_time_off_requests_status"),
        CheckConstraint("start_date <= end_date", name="ck_time_off_requests_date_range"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    employee_id: Mapped[str] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)


class ScheduleRecord(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published')", name="ck_schedules_status"),
        UniqueConstraint("week_start_date", name="uq_schedules_week_start_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    week_start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    assignments = relationship(
        "ScheduleAssignmentRecord",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="ScheduleAssignmentRecord.date",
    )


class ScheduleAssignmentRecord(Base):
    __tablename__ = "schedule_assignments"
    __table_args__ = (
        UniqueConstraint("schedule_id", "employee_id", "date", name="uq_schedule_assignments_employee_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    schedule_id: Mapped[str] = mapped_column(ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id: Mapped[str] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    shift_id: Mapped[str] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    schedule = relationship("ScheduleRecord", back_populates="assignments")
