from __future__ import annotations

from datetime import date
from typing import Literal

MINUTES_PER_DAY = 24 * 60

ShiftCategory = Literal["Early", "Day", "Swing", "Graveyard"]
CATEGORY_ORDER: tuple[ShiftCategory, ...] = ("Early", "Day", "Swing", "Graveyard")

# (category, start minute inclusive, end minute exclusive); Graveyard takes everything else.
CATEGORY_BOUNDARIES: tuple[tuple[ShiftCategory, int, int], ...] = (
    ("Early", 4 * 60, 8 * 60),
    ("Day", 8 * 60, 16 * 60),
    ("Swing", 16 * 60, 22 * 60),
)

CATEGORY_LABELS = {
    "Early": "Day Shift Early",
    "Day": "Day Shift",
    "Swing": "Swing Shift",
    "Graveyard": "Graveyard",
}


def normalize_time(value: str) -> str:
    """Accept ``HH:MM`` or ``HH:MM:SS`` and return ``HH:MM``."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hh, mm = int(parts[0]), int(parts[1])
    if hh > 23 or mm > 59 or (len(parts) == 3 and int(parts[2]) > 59):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return f"{hh:02d}:{mm:02d}"


def to_minutes(value: str) -> int:
    hh, mm = normalize_time(value).split(":")
    return int(hh) * 60 + int(mm)


def _span(start: str, end: str) -> tuple[int, int] | None:
    start_min, end_min = to_minutes(start), to_minutes(end)
    if start_min == end_min:
        return None
    if end_min < start_min:
        end_min += MINUTES_PER_DAY
    return start_min, end_min


def overlaps(a_start: str, a_end: str, b_start: str, b_end: str) -> bool:
    a = _span(a_start, a_end)
    b = _span(b_start, b_end)
    if a is None or b is None:
        return False
    return a[0] < b[1] and b[0] < a[1]


def contains(outer_start: str, outer_end: str, inner_start: str, inner_end: str) -> bool:
    """True when the inner window lies entirely inside the outer one.

    Either window may wrap past midnight. An early-morning inner window is
    also tested one day later so it can sit inside the tail of an overnight
    outer window.
    """
    outer = _span(outer_start, outer_end)
    inner = _span(inner_start, inner_end)
    if outer is None or inner is None:
        return False
    for shift in (0, MINUTES_PER_DAY):
        if outer[0] <= inner[0] + shift and inner[1] + shift <= outer[1]:
            return True
    return False


def window_hours(start: str, end: str) -> float:
    span = _span(start, end)
    if span is None:
        return 0.0
    return (span[1] - span[0]) / 60.0


def classify(start_time: str) -> ShiftCategory:
    minute = to_minutes(start_time)
    for category, lower, upper in CATEGORY_BOUNDARIES:
        if lower <= minute < upper:
            return category
    return "Graveyard"


def day_of_week(value: date) -> int:
    """Sunday-based weekday index (0=Sunday..6=Saturday)."""
    return (value.weekday() + 1) % 7
