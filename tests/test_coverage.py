from datetime import date, timedelta

from shiftplan.coverage import build_coverage_report, requirements_by_category, required_staff
from shiftplan.schemas import CoverageRequirement, ScheduleAssignment, Shift

WEEK = [date(2024, 6, 2) + timedelta(days=i) for i in range(7)]


def _req(req_id: str, start: str, end: str, minimum: int) -> CoverageRequirement:
    return CoverageRequirement(id=req_id, start_time=start, end_time=end, min_employees=minimum)


def test_required_staff_takes_max_within_category():
    requirements = [
        _req("r1", "08:00", "12:00", 2),
        _req("r2", "12:00", "16:00", 4),
        _req("r3", "16:00", "22:00", 3),
    ]
    assert required_staff(requirements, "Day") == 4
    assert required_staff(requirements, "Swing") == 3
    assert required_staff(requirements, "Early") == 0
    assert required_staff(requirements, "Graveyard", day_of_week=3) == 0


def test_requirement_is_classified_by_start_time():
    table = requirements_by_category([_req("r1", "23:00", "07:00", 2), _req("r2", "05:00", "09:00", 1)])
    assert table == {"Early": 1, "Day": 0, "Swing": 0, "Graveyard": 2}


def test_report_flags_each_short_day_and_aggregates_week():
    shifts = [Shift(id="day", name="Day Shift", start_time="08:00", end_time="16:00")]
    assignments = [
        ScheduleAssignment(schedule_id="s", employee_id="e1", shift_id="day", date=day) for day in WEEK[:5]
    ]

    report = build_coverage_report(WEEK, assignments, shifts, [_req("r1", "08:00", "16:00", 1)])

    assert report.daily_coverage[WEEK[0]]["Day"].is_met
    assert not report.daily_coverage[WEEK[5]]["Day"].is_met
    assert report.coverage["Day"].required == 7
    assert report.coverage["Day"].assigned == 5
    assert not report.coverage["Day"].is_met
    assert report.coverage["Swing"].is_met
    assert report.messages == [
        "Coverage not met for Day Shift on 2024-06-07: 0 of 1 assigned",
        "Coverage not met for Day Shift on 2024-06-08: 0 of 1 assigned",
    ]
    assert report.success is False


def test_report_is_successful_when_every_day_is_covered():
    shifts = [Shift(id="gy", name="Graveyard", start_time="22:00", end_time="06:00")]
    assignments = [ScheduleAssignment(schedule_id="s", employee_id="e1", shift_id="gy", date=day) for day in WEEK]

    report = build_coverage_report(WEEK, assignments, shifts, [_req("r1", "22:00", "06:00", 1)])

    assert report.success is True
    assert report.messages == []
    assert report.coverage["Graveyard"].assigned == 7
