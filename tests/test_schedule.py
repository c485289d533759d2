"""Tests for the close-trigger policy."""

import pytest
from datetime import datetime, timedelta

from src.ledger import is_close_due
from src.models.ledger import WeekData


def week_started(start, is_closed=False):
    return WeekData(id=start.isoformat(), start_date=start, is_closed=is_closed)


class TestIsCloseDue:
    """Tests for is_close_due."""

    def test_due_on_sunday_after_a_full_day(self):
        """Test the normal weekly close."""
        week = week_started(datetime(2025, 3, 10, 8, 0))
        assert is_close_due(week, datetime(2025, 3, 16, 9, 0)) is True

    def test_not_due_on_other_weekdays(self):
        """Test that only the boundary weekday triggers."""
        week = week_started(datetime(2025, 3, 3, 8, 0))
        assert is_close_due(week, datetime(2025, 3, 15, 9, 0)) is False

    def test_week_opened_on_sunday_waits(self):
        """Test that a week opened earlier the same Sunday is not closed again."""
        week = week_started(datetime(2025, 3, 16, 8, 0))
        assert is_close_due(week, datetime(2025, 3, 16, 23, 0)) is False

    def test_exactly_one_day_old_is_due(self):
        """Test the minimum-age boundary."""
        week = week_started(datetime(2025, 3, 15, 9, 0))
        assert is_close_due(week, datetime(2025, 3, 16, 9, 0)) is True

    def test_closed_week_never_due(self):
        """Test that archived weeks are ignored."""
        week = week_started(datetime(2025, 3, 10, 8, 0), is_closed=True)
        assert is_close_due(week, datetime(2025, 3, 16, 9, 0)) is False

    def test_custom_boundary_and_age(self):
        """Test a Saturday boundary with a two-day minimum age."""
        week = week_started(datetime(2025, 3, 14, 12, 0))
        saturday = datetime(2025, 3, 15, 12, 0)
        assert is_close_due(week, saturday, boundary_weekday=5, min_age=timedelta(days=2)) is False
        assert is_close_due(week, saturday, boundary_weekday=5, min_age=timedelta(hours=12)) is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
