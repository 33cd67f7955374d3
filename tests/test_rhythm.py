from datetime import date

import pytest

from app.services.rhythm import is_publication_day, planned_days, would_have_mission_on

# 2025-03-03 is a Monday
WEEK = [date(2025, 3, 3 + offset) for offset in range(7)]


@pytest.mark.parametrize("rhythm, expected", [
    ("daily", [True, True, True, True, True, True, True]),
    ("five_week", [True, True, True, True, True, False, False]),
    ("three_week", [True, False, True, False, True, False, False]),
    ("once_week", [True, False, False, False, False, False, False]),
    (None, [True] * 7),
    ("whenever", [True] * 7),
])
def test_publication_days_per_rhythm(rhythm, expected):
    assert [is_publication_day(rhythm, day) for day in WEEK] == expected


def test_forecast_uses_same_rule():
    for day in WEEK:
        assert would_have_mission_on("three_week", day) == is_publication_day("three_week", day)


def test_planned_days_excludes_start():
    days = planned_days("three_week", date(2025, 3, 3), days_ahead=7)
    assert days == [date(2025, 3, 5), date(2025, 3, 7), date(2025, 3, 10)]


def test_planned_days_once_week():
    days = planned_days("once_week", date(2025, 3, 3), days_ahead=30)
    assert all(day.isoweekday() == 1 for day in days)
    assert len(days) == 4
