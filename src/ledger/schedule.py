"""
Close-trigger policy.

The week closes on the boundary weekday (Sunday by default), but only once
the open week is at least `min_age` old, so a week opened on a Sunday is not
closed again the same day.
"""

from datetime import datetime, timedelta

from src.models.ledger import WeekData

SUNDAY = 6
MIN_WEEK_AGE = timedelta(days=1)


def is_close_due(
    week: WeekData,
    now: datetime,
    boundary_weekday: int = SUNDAY,
    min_age: timedelta = MIN_WEEK_AGE,
) -> bool:
    """True if `week` should be closed at `now` (weekday: 0 = Monday)."""
    if week.is_closed:
        return False
    if now.weekday() != boundary_weekday:
        return False
    return now - week.start_date >= min_age
