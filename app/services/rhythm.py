"""Publication rhythm rules (pure, no I/O)."""
from datetime import date, timedelta
from typing import Optional

from app.models.restaurant import PublicationRhythm

# ISO weekdays (1 = Monday ... 7 = Sunday) that count as publication days
RHYTHM_WEEKDAYS = {
    PublicationRhythm.DAILY.value: {1, 2, 3, 4, 5, 6, 7},
    PublicationRhythm.FIVE_WEEK.value: {1, 2, 3, 4, 5},
    PublicationRhythm.THREE_WEEK.value: {1, 3, 5},
    PublicationRhythm.ONCE_WEEK.value: {1},
}


def is_publication_day(rhythm: Optional[str], day: date) -> bool:
    """
    Whether `day` is a publication day for the rhythm.

    Unknown or missing rhythms count every day as a publication day.
    """
    weekdays = RHYTHM_WEEKDAYS.get(rhythm or "")
    if weekdays is None:
        return True
    return day.isoweekday() in weekdays


# Forecasting future days uses the very same rule
would_have_mission_on = is_publication_day


def planned_days(rhythm: Optional[str], start: date, days_ahead: int = 30) -> list[date]:
    """Publication days among the `days_ahead` days following `start` (exclusive)."""
    days = (start + timedelta(days=offset) for offset in range(1, days_ahead + 1))
    return [day for day in days if would_have_mission_on(rhythm, day)]
