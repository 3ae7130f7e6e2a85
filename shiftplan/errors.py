from __future__ import annotations


class SchedulingError(Exception):
    """Base class for failures surfaced to the caller of a schedule operation."""


class AlreadyExists(SchedulingError):
    pass


class InsufficientInputData(SchedulingError):
    pass


class PersistenceFailure(SchedulingError):
    pass


class NotFound(SchedulingError):
    pass


class ScheduleNotEditable(SchedulingError):
    pass
