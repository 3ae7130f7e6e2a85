from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, TypeVar

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shiftplan.errors import AlreadyExists, InsufficientInputData, NotFound, PersistenceFailure
from shiftplan.models import (
    AvailabilityRecord,
    CoverageRequirementRecord,
    EmployeeRecord,
    ScheduleAssignmentRecord,
    ScheduleRecord,
    ShiftRecord,
    TimeOffRequestRecord,
)
from shiftplan.schemas import (
    CoverageRequirement,
    Employee,
    EmployeeAvailability,
    Record,
    Schedule,
    ScheduleAssignment,
    ScheduleDetail,
    Shift,
    StoredAssignment,
    TimeOffRequest,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Record)


def _to_records(schema: type[RecordT], rows: Iterable[object], collection: str) -> list[RecordT]:
    out = []
    for row in rows:
        try:
            out.append(schema.model_validate(row))
        except ValidationError as exc:
            row_id = getattr(row, "id", None)
            raise InsufficientInputData(f"Invalid {collection} row {row_id}: {exc.errors()[0]['msg']}") from exc
    return out


def _to_detail(record: ScheduleRecord) -> ScheduleDetail:
    assignments = sorted(record.assignments, key=lambda a: (a.date, a.employee_id))
    return ScheduleDetail(
        id=record.id,
        week_start_date=record.week_start_date,
        status=record.status,
        created_by=record.created_by,
        created_at=record.created_at,
        assignments=[StoredAssignment.model_validate(a) for a in assignments],
    )


class ScheduleRepository:
    """Reads scheduling inputs and persists schedules through one SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def load_employees(self) -> list[Employee]:
        rows = self.db.scalars(
            select(EmployeeRecord).where(EmployeeRecord.role == "employee").order_by(EmployeeRecord.id)
        ).all()
        return _to_records(Employee, rows, "employee")

    def load_shifts(self) -> list[Shift]:
        rows = self.db.scalars(select(ShiftRecord).order_by(ShiftRecord.start_time, ShiftRecord.id)).all()
        return _to_records(Shift, rows, "shift")

    def load_availability(self) -> list[EmployeeAvailability]:
        rows = self.db.scalars(select(AvailabilityRecord).order_by(AvailabilityRecord.id)).all()
        return _to_records(EmployeeAvailability, rows, "availability")

    def load_coverage_requirements(self) -> list[CoverageRequirement]:
        rows = self.db.scalars(
            select(CoverageRequirementRecord).order_by(CoverageRequirementRecord.start_time, CoverageRequirementRecord.id)
        ).all()
        return _to_records(CoverageRequirement, rows, "coverage requirement")

    def load_approved_time_off(self, week_start: date, week_end: date) -> list[TimeOffRequest]:
        rows = self.db.scalars(
            select(TimeOffRequestRecord).where(
                TimeOffRequestRecord.status == "approved",
                TimeOffRequestRecord.start_date <= week_end,
                TimeOffRequestRecord.end_date >= week_start,
            )
        ).all()
        return _to_records(TimeOffRequest, rows, "time-off request")

    def get_employee(self, employee_id: str) -> Employee | None:
        row = self.db.get(EmployeeRecord, employee_id)
        return Employee.model_validate(row) if row is not None else None

    def get_shift(self, shift_id: str) -> Shift | None:
        row = self.db.get(ShiftRecord, shift_id)
        return Shift.model_validate(row) if row is not None else None

    def schedule_exists_for_week(self, week_start: date) -> bool:
        found = self.db.scalar(select(ScheduleRecord.id).where(ScheduleRecord.week_start_date == week_start))
        return found is not None

    def create_schedule(
        self,
        schedule_id: str,
        week_start: date,
        created_by: str,
        assignments: list[ScheduleAssignment],
    ) -> ScheduleDetail:
        """Insert the schedule and every assignment in one transaction."""
        record = ScheduleRecord(id=schedule_id, week_start_date=week_start, status="draft", created_by=created_by)
        record.assignments = [
            ScheduleAssignmentRecord(employee_id=a.employee_id, shift_id=a.shift_id, date=a.date) for a in assignments
        ]
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            taken = self.db.scalar(select(ScheduleRecord.id).where(ScheduleRecord.week_start_date == week_start))
            if taken is not None:
                raise AlreadyExists(f"A schedule already exists for week starting {week_start.isoformat()}") from exc
            logger.exception("Integrity error while saving schedule for %s", week_start.isoformat())
            raise PersistenceFailure(f"Could not save schedule: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to save schedule for %s", week_start.isoformat())
            raise PersistenceFailure(f"Could not save schedule: {exc}") from exc
        self.db.refresh(record)
        return _to_detail(record)

    def list_schedules(self) -> list[Schedule]:
        rows = self.db.scalars(select(ScheduleRecord).order_by(ScheduleRecord.week_start_date.desc())).all()
        return [Schedule.model_validate(row) for row in rows]

    def get_schedule(self, schedule_id: str) -> ScheduleDetail:
        return _to_detail(self._require_schedule(schedule_id))

    def set_status(self, schedule_id: str, status: str) -> Schedule:
        record = self._require_schedule(schedule_id)
        if record.status != status:
            record.status = status
            self._commit(f"update schedule {schedule_id}")
        return Schedule.model_validate(record)

    def delete_schedule(self, schedule_id: str) -> None:
        record = self._require_schedule(schedule_id)
        self.db.delete(record)
        self._commit(f"delete schedule {schedule_id}")

    def add_assignment(self, schedule_id: str, employee_id: str, shift_id: str, day: date) -> StoredAssignment:
        record = ScheduleAssignmentRecord(schedule_id=schedule_id, employee_id=employee_id, shift_id=shift_id, date=day)
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AlreadyExists(f"Employee {employee_id} is already assigned on {day.isoformat()}") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to add assignment to schedule %s", schedule_id)
            raise PersistenceFailure(f"Could not save assignment: {exc}") from exc
        return StoredAssignment.model_validate(record)

    def remove_assignment(self, schedule_id: str, assignment_id: str) -> None:
        record = self.db.get(ScheduleAssignmentRecord, assignment_id)
        if record is None or record.schedule_id != schedule_id:
            raise NotFound("Assignment not found")
        self.db.delete(record)
        self._commit(f"delete assignment {assignment_id}")

    def _require_schedule(self, schedule_id: str) -> ScheduleRecord:
        record = self.db.get(ScheduleRecord, schedule_id)
        if record is None:
            raise NotFound("Schedule not found")
        # Assignments may have changed through other rows since the collection was loaded.
        self.db.expire(record, ["assignments"])
        return record

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to %s", action)
            raise PersistenceFailure(f"Could not {action}: {exc}") from exc
