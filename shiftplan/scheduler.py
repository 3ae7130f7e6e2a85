from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

from shiftplan.coverage import CoverageReport, build_coverage_report, required_staff
from shiftplan.schemas import (
    Employee,
    EmployeeAvailability,
    ScheduleAssignment,
    SchedulingInput,
    Shift,
    TimeOffRequest,
)
from shiftplan.timewindows import CATEGORY_ORDER, classify, contains, day_of_week, to_minutes

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_DAYS = 5
DAYS_PER_WEEK = 7


def week_dates(week_start: date) -> list[date]:
    return [week_start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def is_available(
    employee: Employee,
    shift: Shift,
    weekday: int,
    availability_rows: Iterable[EmployeeAvailability],
) -> bool:
    for row in availability_rows:
        if row.employee_id != employee.id or row.day_of_week != weekday:
            continue
        if row.shift_id is not None:
            if row.shift_id == shift.id:
                return True
            continue
        if contains(row.start_time, row.end_time, shift.start_time, shift.end_time):
            return True
    return False


class WeeklyHoursLedger:
    def __init__(self) -> None:
        self._hours: dict[str, float] = defaultdict(float)

    def get(self, employee_id: str) -> float:
        return self._hours.get(employee_id, 0.0)

    def add(self, employee_id: str, hours: float) -> None:
        self._hours[employee_id] += hours

    def snapshot(self) -> dict[str, float]:
        return dict(self._hours)


class ConsecutiveDaysLedger:
    """Length of the run of worked dates ending the day before a given date."""

    def __init__(self) -> None:
        self._runs: dict[str, tuple[int, date]] = {}

    def get(self, employee_id: str, on_date: date) -> int:
        entry = self._runs.get(employee_id)
        if entry is None:
            return 0
        run_length, last_worked = entry
        if last_worked == on_date - timedelta(days=1):
            return run_length
        return 0

    def record(self, employee_id: str, worked_date: date) -> None:
        self._runs[employee_id] = (self.get(employee_id, worked_date) + 1, worked_date)


@dataclass
class EligibilityFilter:
    availability: list[EmployeeAvailability]
    time_off: list[TimeOffRequest]
    hours: WeeklyHoursLedger
    consecutive: ConsecutiveDaysLedger
    max_consecutive_days: int = MAX_CONSECUTIVE_DAYS
    _time_off_by_emp: dict[str, list[TimeOffRequest]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._time_off_by_emp = defaultdict(list)
        for request in self.time_off:
            if request.status == "approved":
                self._time_off_by_emp[request.employee_id].append(request)

    def on_time_off(self, employee: Employee, day: date) -> bool:
        return any(request.covers(day) for request in self._time_off_by_emp.get(employee.id, ()))

    def is_eligible(self, employee: Employee, shift: Shift, day: date, assigned_today: set[str]) -> bool:
        if self.on_time_off(employee, day):
            return False
        if employee.id in assigned_today:
            return False
        if self.hours.get(employee.id) + shift.duration_hours > employee.weekly_hours_limit:
            return False
        if self.consecutive.get(employee.id, day) >= self.max_consecutive_days:
            return False
        return is_available(employee, shift, day_of_week(day), self.availability)


@dataclass
class Candidate:
    employee: Employee
    hours: float
    shifts: list[Shift]


@dataclass
class AllocationResult:
    assignments: list[ScheduleAssignment]
    report: CoverageReport
    hours_by_employee: dict[str, float]


def _shift_sort_key(shift: Shift) -> tuple[int, str]:
    return (to_minutes(shift.start_time), shift.id)


def allocate_week(data: SchedulingInput, week_start: date, schedule_id: str) -> AllocationResult:
    """Greedily assign employees to shifts for the seven days starting at ``week_start``.

    Dates are walked in order and, within a date, categories in
    ``CATEGORY_ORDER``. Candidates are ranked by hours already assigned this
    week, then by employee id, and each is placed on the earliest shift of the
    category they qualify for that still has room. Ledgers live only for the
    duration of this call.
    """
    hours = WeeklyHoursLedger()
    consecutive = ConsecutiveDaysLedger()
    eligibility = EligibilityFilter(
        availability=data.availability,
        time_off=data.time_off_requests,
        hours=hours,
        consecutive=consecutive,
    )
    shifts_by_category = {
        category: sorted((s for s in data.shifts if classify(s.start_time) == category), key=_shift_sort_key)
        for category in CATEGORY_ORDER
    }

    dates = week_dates(week_start)
    assignments: list[ScheduleAssignment] = []
    shortfalls = 0

    for work_date in dates:
        assigned_today: set[str] = set()
        weekday = day_of_week(work_date)

        for category in CATEGORY_ORDER:
            required = required_staff(data.coverage_requirements, category, weekday)
            if required <= 0:
                continue
            category_shifts = shifts_by_category[category]
            if not category_shifts:
                logger.debug("No %s shifts defined; %s left uncovered", category, work_date)
                shortfalls += 1
                continue

            candidates = []
            for emp in data.employees:
                usable = [s for s in category_shifts if eligibility.is_eligible(emp, s, work_date, assigned_today)]
                if not usable:
                    logger.debug("%s not eligible for %s on %s", emp.id, category, work_date)
                    continue
                candidates.append(Candidate(employee=emp, hours=hours.get(emp.id), shifts=usable))

            candidates.sort(key=lambda c: (c.hours, c.employee.id))

            filled: dict[str, int] = defaultdict(int)
            placed = 0
            for candidate in candidates:
                if placed >= required:
                    break
                shift = next(
                    (s for s in candidate.shifts if s.max_employees is None or filled[s.id] < s.max_employees),
                    None,
                )
                if shift is None:
                    continue
                emp_id = candidate.employee.id
                assignments.append(ScheduleAssignment(schedule_id=schedule_id, employee_id=emp_id, shift_id=shift.id, date=work_date))
                assigned_today.add(emp_id)
                hours.add(emp_id, shift.duration_hours)
                consecutive.record(emp_id, work_date)
                filled[shift.id] += 1
                placed += 1

            if placed < required:
                shortfalls += 1

    report = build_coverage_report(dates, assignments, data.shifts, data.coverage_requirements)
    logger.info(
        "Allocated %d assignments for week of %s (%d shortfalls)",
        len(assignments),
        week_start.isoformat(),
        shortfalls,
    )
    return AllocationResult(
        assignments=assignments,
        report=report,
        hours_by_employee=hours.snapshot(),
    )
