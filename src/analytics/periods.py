"""
Period Aggregation

Rolls weeks up into the month and year views of the statistics screen.

A week belongs to a period by its start_date alone: a week that starts on
31 March and ends in April counts towards March.
"""

import calendar
from datetime import datetime
from decimal import Decimal
from typing import Optional

from src.analytics.metrics import (
    category_totals,
    spending_breakdown,
    summarize,
    timeline_buckets,
)
from src.models.ledger import (
    AppState,
    PeriodMode,
    PeriodStatistics,
    TimelineGranularity,
    WeekData,
)

GRANULARITY_BY_MODE = {
    PeriodMode.WEEK: TimelineGranularity.DAY_OF_WEEK,
    PeriodMode.MONTH: TimelineGranularity.DAY_OF_MONTH,
    PeriodMode.YEAR: TimelineGranularity.MONTH_OF_YEAR,
}


def _in_period(mode: PeriodMode, moment: datetime, cursor: datetime) -> bool:
    if mode == PeriodMode.YEAR:
        return moment.year == cursor.year
    return moment.year == cursor.year and moment.month == cursor.month


def aggregate(
    mode: PeriodMode,
    cursor: datetime,
    current_week: WeekData,
    history: list[WeekData],
) -> WeekData:
    """
    Merge the weeks of the cursor's month or year into one read-only record.

    In week mode the current week is returned unchanged. Otherwise the
    selected weeks (current first, then history in archive order) are
    concatenated and their incomes summed.
    """
    mode = PeriodMode(mode)
    if mode == PeriodMode.WEEK:
        return current_week

    selected = [
        week for week in [current_week, *history]
        if _in_period(mode, week.start_date, cursor)
    ]

    return WeekData(
        id=f"agg-{mode.value}-{int(cursor.timestamp() * 1000)}",
        start_date=min((week.start_date for week in selected), default=cursor),
        end_date=None,
        income=sum((week.income for week in selected), Decimal("0")),
        transactions=[tx for week in selected for tx in week.transactions],
        is_closed=False,
    )


def shift_cursor(mode: PeriodMode, cursor: datetime, direction: int) -> datetime:
    """
    Move the cursor by `direction` months (month mode) or years (year mode).

    The day is clamped to the target month, so 31 March minus one month
    is 28/29 February. Week mode has nothing to navigate.
    """
    mode = PeriodMode(mode)
    if mode == PeriodMode.WEEK or direction == 0:
        return cursor

    if mode == PeriodMode.MONTH:
        year, month_index = divmod(cursor.year * 12 + cursor.month - 1 + direction, 12)
        month = month_index + 1
    else:
        year, month = cursor.year + direction, cursor.month

    day = min(cursor.day, calendar.monthrange(year, month)[1])
    return cursor.replace(year=year, month=month, day=day)


def build_statistics(
    state: AppState,
    mode: PeriodMode = PeriodMode.WEEK,
    cursor: Optional[datetime] = None,
) -> PeriodStatistics:
    """Everything the statistics view shows for one period."""
    mode = PeriodMode(mode)
    cursor = cursor or datetime.now()
    week = aggregate(mode, cursor, state.current_week, state.history)

    return PeriodStatistics(
        mode=mode,
        cursor=cursor,
        week=week,
        summary=summarize(week.income, week.transactions),
        categories=category_totals(week.transactions),
        timeline=timeline_buckets(GRANULARITY_BY_MODE[mode], week.transactions, cursor),
        breakdown=spending_breakdown(week.income, week.transactions),
    )
