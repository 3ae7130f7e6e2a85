from __future__ import annotations

import logging
from datetime import date, timedelta

from shiftplan.coverage import build_coverage_report
from shiftplan.errors import AlreadyExists, InsufficientInputData, NotFound, ScheduleNotEditable
from shiftplan.models import new_id
from shiftplan.repository import ScheduleRepository
from shiftplan.scheduler import DAYS_PER_WEEK, allocate_week, week_dates
from shiftplan.schemas import (
    GenerateResponse,
    Schedule,
    ScheduleCoverageOut,
    ScheduleDetail,
    SchedulingInput,
    StoredAssignment,
)

logger = logging.getLogger(__name__)


def load_scheduling_input(repo: ScheduleRepository, week_start: date) -> SchedulingInput:
    week_end = week_start + timedelta(days=DAYS_PER_WEEK - 1)
    data = SchedulingInput(
        employees=repo.load_employees(),
        shifts=repo.load_shifts(),
        availability=repo.load_availability(),
        coverage_requirements=repo.load_coverage_requirements(),
        time_off_requests=repo.load_approved_time_off(week_start, week_end),
    )
    missing = [
        label
        for label, rows in (
            ("employees", data.employees),
            ("shifts", data.shifts),
            ("coverage requirements", data.coverage_requirements),
        )
        if not rows
    ]
    if missing:
        raise InsufficientInputData(f"Cannot generate a schedule without {', '.join(missing)}")
    return data


def generate_schedule(repo: ScheduleRepository, week_start: date, requesting_user_id: str) -> GenerateResponse:
    """Build and save a draft schedule for the week starting at ``week_start``.

    Nothing is written unless the whole schedule is saved. The early
    existence check only avoids needless work; the unique constraint on
    ``schedules.week_start_date`` is what rejects a concurrent duplicate.
    Unmet coverage is reported in ``messages`` with ``success=False`` and the
    draft is still saved.
    """
    if repo.schedule_exists_for_week(week_start):
        raise AlreadyExists(f"A schedule already exists for week starting {week_start.isoformat()}")

    data = load_scheduling_input(repo, week_start)
    schedule_id = new_id()
    result = allocate_week(data, week_start, schedule_id)
    repo.create_schedule(schedule_id, week_start, requesting_user_id, result.assignments)

    logger.info(
        "Generated schedule %s for week of %s: %d assignments, success=%s",
        schedule_id,
        week_start.isoformat(),
        len(result.assignments),
        result.report.success,
    )
    return GenerateResponse(
        schedule_id=schedule_id,
        assignments=result.assignments,
        coverage=result.report.coverage,
        daily_coverage=result.report.daily_coverage,
        hours_by_employee=result.hours_by_employee,
        messages=result.report.messages,
        success=result.report.success,
    )


def publish_schedule(repo: ScheduleRepository, schedule_id: str) -> Schedule:
    schedule = repo.set_status(schedule_id, "published")
    logger.info("Schedule %s published", schedule_id)
    return schedule


def delete_schedule(repo: ScheduleRepository, schedule_id: str) -> None:
    repo.delete_schedule(schedule_id)
    logger.info("Schedule %s deleted", schedule_id)


def list_schedules(repo: ScheduleRepository) -> list[Schedule]:
    return repo.list_schedules()


def get_schedule(repo: ScheduleRepository, schedule_id: str) -> ScheduleDetail:
    return repo.get_schedule(schedule_id)


def schedule_coverage(repo: ScheduleRepository, schedule_id: str) -> ScheduleCoverageOut:
    schedule = repo.get_schedule(schedule_id)
    report = build_coverage_report(
        week_dates(schedule.week_start_date),
        schedule.assignments,
        repo.load_shifts(),
        repo.load_coverage_requirements(),
    )
    return ScheduleCoverageOut(
        schedule_id=schedule_id,
        coverage=report.coverage,
        daily_coverage=report.daily_coverage,
        messages=report.messages,
        success=report.success,
    )


def add_assignment(
    repo: ScheduleRepository,
    schedule_id: str,
    employee_id: str,
    shift_id: str,
    day: date,
) -> StoredAssignment:
    schedule = repo.get_schedule(schedule_id)
    if schedule.status != "draft":
        raise ScheduleNotEditable("Only draft schedules can be edited")
    if day not in week_dates(schedule.week_start_date):
        raise InsufficientInputData(f"{day.isoformat()} is outside the schedule week")
    if repo.get_employee(employee_id) is None:
        raise NotFound("Employee not found")
    if repo.get_shift(shift_id) is None:
        raise NotFound("Shift not found")
    return repo.add_assignment(schedule_id, employee_id, shift_id, day)


def remove_assignment(repo: ScheduleRepository, schedule_id: str, assignment_id: str) -> None:
    schedule = repo.get_schedule(schedule_id)
    if schedule.status != "draft":
        raise ScheduleNotEditable("Only draft schedules can be edited")
    repo.remove_assignment(schedule_id, assignment_id)
