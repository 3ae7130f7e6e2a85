from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shiftplan.timewindows import ShiftCategory, normalize_time, window_hours

EmployeeRole = Literal["employee", "manager"]
TimeOffStatus = Literal["pending", "approved", "rejected"]
ScheduleStatus = Literal["draft", "published"]


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class Employee(Record):
    id: str
    first_name: str
    last_name: str = ""
    weekly_hours_limit: float = Field(gt=0)
    role: EmployeeRole = "employee"

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Shift(Record):
    id: str
    name: str
    start_time: str
    end_time: str
    duration_hours: float | None = Field(default=None, gt=0)
    max_employees: int | None = Field(default=None, ge=1)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        return normalize_time(value)

    @model_validator(mode="after")
    def derive_duration(self) -> Shift:
        if self.duration_hours is None:
            hours = window_hours(self.start_time, self.end_time)
            if hours <= 0:
                raise ValueError("Shift start_time and end_time must differ")
            self.duration_hours = hours
        return self


class EmployeeAvailability(Record):
    id: str
    employee_id: str
    day_of_week: int = Field(ge=0, le=6)
    shift_id: str | None = None
    start_time: str | None = None
    end_time: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str | None) -> str | None:
        return normalize_time(value) if value is not None else None

    @model_validator(mode="after")
    def require_shift_or_window(self) -> EmployeeAvailability:
        if self.shift_id is None and (self.start_time is None or self.end_time is None):
            raise ValueError("Availability needs either shift_id or both start_time and end_time")
        return self


class CoverageRequirement(Record):
    id: str
    start_time: str
    end_time: str
    min_employees: int = Field(ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        return normalize_time(value)


class TimeOffRequest(Record):
    employee_id: str
    start_date: date
    end_date: date
    status: TimeOffStatus = "pending"

    @model_validator(mode="after")
    def validate_range(self) -> TimeOffRequest:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def covers(self, day: date) -> bool:
        return self.status == "approved" and self.start_date <= day <= self.end_date


class ScheduleAssignment(Record):
    schedule_id: str
    employee_id: str
    shift_id: str
    date: date


class StoredAssignment(ScheduleAssignment):
    id: str


class Schedule(Record):
    id: str
    week_start_date: date
    status: ScheduleStatus
    created_by: str
    created_at: datetime | None = None


class ScheduleDetail(Schedule):
    assignments: list[StoredAssignment] = Field(default_factory=list)


class CategoryCoverage(BaseModel):
    required: int
    assigned: int
    is_met: bool


CoverageStatus = dict[ShiftCategory, CategoryCoverage]


class SchedulingInput(BaseModel):
    employees: list[Employee]
    shifts: list[Shift]
    availability: list[EmployeeAvailability] = Field(default_factory=list)
    coverage_requirements: list[CoverageRequirement]
    time_off_requests: list[TimeOffRequest] = Field(default_factory=list)


class GenerateRequest(BaseModel):
    week_start_date: date
    requesting_user_id: str


class GenerateResponse(BaseModel):
    schedule_id: str
    assignments: list[ScheduleAssignment]
    coverage: CoverageStatus
    daily_coverage: dict[date, CoverageStatus]
    hours_by_employee: dict[str, float]
    messages: list[str]
    success: bool


class ScheduleCoverageOut(BaseModel):
    schedule_id: str
    coverage: CoverageStatus
    daily_coverage: dict[date, CoverageStatus]
    messages: list[str]
    success: bool


class AssignmentCreatePayload(BaseModel):
    employee_id: str
    shift_id: str
    date: date
