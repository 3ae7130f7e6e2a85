from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from shiftplan.schemas import CategoryCoverage, CoverageRequirement, ScheduleAssignment, Shift
from shiftplan.timewindows import CATEGORY_LABELS, CATEGORY_ORDER, ShiftCategory, classify

logger = logging.getLogger(__name__)


def required_staff(requirements: Iterable[CoverageRequirement], category: ShiftCategory, day_of_week: int | None = None) -> int:
    """Largest ``min_employees`` among requirements starting in ``category``.

    Requirements carry no date, so ``day_of_week`` does not narrow the match;
    it is accepted so callers can pass it once day-specific rows exist.
    """
    return max((req.min_employees for req in requirements if classify(req.start_time) == category), default=0)


def requirements_by_category(requirements: Iterable[CoverageRequirement]) -> dict[ShiftCategory, int]:
    rows = list(requirements)
    return {category: required_staff(rows, category) for category in CATEGORY_ORDER}


@dataclass
class CoverageReport:
    coverage: dict[ShiftCategory, CategoryCoverage]
    daily_coverage: dict[date, dict[ShiftCategory, CategoryCoverage]]
    messages: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(status.is_met for day in self.daily_coverage.values() for status in day.values())


def build_coverage_report(
    dates: list[date],
    assignments: Iterable[ScheduleAssignment],
    shifts: Iterable[Shift],
    requirements: Iterable[CoverageRequirement],
) -> CoverageReport:
    required = requirements_by_category(requirements)
    category_by_shift = {shift.id: classify(shift.start_time) for shift in shifts}

    counts: dict[tuple[date, ShiftCategory], int] = defaultdict(int)
    for assignment in assignments:
        category = category_by_shift.get(assignment.shift_id)
        if category is None:
            logger.warning("Assignment references unknown shift %s", assignment.shift_id)
            continue
        counts[(assignment.date, category)] += 1

    daily: dict[date, dict[ShiftCategory, CategoryCoverage]] = {}
    messages: list[str] = []
    for day in dates:
        daily[day] = {}
        for category in CATEGORY_ORDER:
            assigned = counts[(day, category)]
            status = CategoryCoverage(required=required[category], assigned=assigned, is_met=assigned >= required[category])
            daily[day][category] = status
            if not status.is_met:
                messages.append(
                    f"Coverage not met for {CATEGORY_LABELS[category]} on {day.isoformat()}: "
                    f"{assigned} of {required[category]} assigned"
                )

    weekly: dict[ShiftCategory, CategoryCoverage] = {}
    for category in CATEGORY_ORDER:
        week_required = required[category] * len(dates)
        week_assigned = sum(daily[day][category].assigned for day in dates)
        weekly[category] = CategoryCoverage(required=week_required, assigned=week_assigned, is_met=week_assigned >= week_required)

    for message in messages:
        logger.warning(message)
    return CoverageReport(coverage=weekly, daily_coverage=daily, messages=messages)
