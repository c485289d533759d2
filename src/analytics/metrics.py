"""
Ledger Aggregator

Pure derived metrics over (income, transactions). Nothing here is stored:
every figure is recomputed from the snapshot whenever it is needed.

Headline formulas:
    total_planned     = Σ planned and not confirmed
    total_spent       = Σ confirmed or actual
    savings_this_week = Σ saving
    available_funds   = income - total_spent - total_planned - savings_this_week

NOTE: Savings are confirmed at creation, so total_spent as written also
counts them and available_funds subtracts a saving twice. The headline
figure keeps that formula. spending_breakdown is the statistics split,
where spent is only actual plus confirmed planned.
"""

import calendar
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from src.models.ledger import (
    AppState,
    BreakdownSlice,
    Category,
    CategoryTotal,
    LedgerSummary,
    TimelineBucket,
    TimelineGranularity,
    Transaction,
    TransactionGroups,
    TransactionType,
    WeekData,
    WeekOverview,
)

ZERO = Decimal("0")

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Fixed order used to break ties in category_totals
CATEGORY_ORDER = (
    Category.OBLIGATIONS,
    Category.NECESSITIES,
    Category.PLEASURES,
    Category.NONE,
)


def _sum(transactions: Iterable[Transaction], predicate: Callable[[Transaction], bool]) -> Decimal:
    return sum((tx.amount for tx in transactions if predicate(tx)), ZERO)


def total_planned(transactions: Iterable[Transaction]) -> Decimal:
    return _sum(transactions, lambda tx: tx.is_pending)


def total_spent(transactions: Iterable[Transaction]) -> Decimal:
    return _sum(transactions, lambda tx: tx.counts_as_spent)


def savings_this_week(transactions: Iterable[Transaction]) -> Decimal:
    return _sum(transactions, lambda tx: tx.type == TransactionType.SAVING)


def available_funds(income: Decimal, transactions: Iterable[Transaction]) -> Decimal:
    """May be negative; a negative figure is shown as critical, never rejected."""
    transactions = list(transactions)
    return (
        income
        - total_spent(transactions)
        - total_planned(transactions)
        - savings_this_week(transactions)
    )


def summarize(income: Decimal, transactions: Iterable[Transaction]) -> LedgerSummary:
    transactions = list(transactions)
    return LedgerSummary(
        income=income,
        total_planned=total_planned(transactions),
        total_spent=total_spent(transactions),
        savings_this_week=savings_this_week(transactions),
        available_funds=available_funds(income, transactions),
    )


def category_totals(transactions: Iterable[Transaction]) -> list[CategoryTotal]:
    """
    Non-saving amounts per category, largest first.

    The three spending categories are always listed; `none` only when
    something uncategorized was spent.
    """
    totals = {category: ZERO for category in CATEGORY_ORDER}
    for tx in transactions:
        if tx.type != TransactionType.SAVING:
            totals[tx.category] += tx.amount

    rows = [
        CategoryTotal(category=category, amount=totals[category])
        for category in CATEGORY_ORDER
        if category != Category.NONE or totals[category] != 0
    ]
    # sorted() is stable, so equal sums keep CATEGORY_ORDER
    return sorted(rows, key=lambda row: row.amount, reverse=True)


def _counts_in_timeline(tx: Transaction) -> bool:
    return tx.counts_as_spent and tx.type != TransactionType.SAVING


_BUCKET_KEYS: dict[TimelineGranularity, Callable[[Transaction], int]] = {
    TimelineGranularity.DAY_OF_WEEK: lambda tx: tx.date.weekday(),
    TimelineGranularity.DAY_OF_MONTH: lambda tx: tx.date.day,
    TimelineGranularity.MONTH_OF_YEAR: lambda tx: tx.date.month - 1,
}


def timeline_buckets(
    granularity: TimelineGranularity,
    transactions: Iterable[Transaction],
    cursor: Optional[datetime] = None,
) -> list[TimelineBucket]:
    """
    Spent amounts bucketed by time.

    - day-of-week: Mon..Sun (keys 0..6)
    - day-of-month: 1..N where N is the length of the cursor's month
    - month-of-year: keys 0..11
    """
    granularity = TimelineGranularity(granularity)
    spent = [tx for tx in transactions if _counts_in_timeline(tx)]

    if granularity == TimelineGranularity.DAY_OF_WEEK:
        keys = list(range(7))
        labels = list(WEEKDAY_LABELS)
    elif granularity == TimelineGranularity.DAY_OF_MONTH:
        cursor = cursor or datetime.now()
        days_in_month = calendar.monthrange(cursor.year, cursor.month)[1]
        keys = list(range(1, days_in_month + 1))
        labels = [str(day) for day in keys]
    else:
        keys = list(range(12))
        labels = list(MONTH_LABELS)
    key_of = _BUCKET_KEYS[granularity]

    amounts = {key: ZERO for key in keys}
    for tx in spent:
        key = key_of(tx)
        if key in amounts:
            amounts[key] += tx.amount

    return [
        TimelineBucket(key=key, label=label, amount=amounts[key])
        for key, label in zip(keys, labels)
    ]


def spending_breakdown(income: Decimal, transactions: Iterable[Transaction]) -> list[BreakdownSlice]:
    """
    Split of the income into spent / planned / saved / available.

    Empty slices are left out; available never goes below zero here.
    """
    transactions = list(transactions)
    spent = _sum(
        transactions,
        lambda tx: tx.type == TransactionType.ACTUAL
        or (tx.type == TransactionType.PLANNED and tx.is_confirmed),
    )
    planned = total_planned(transactions)
    saved = savings_this_week(transactions)
    available = max(ZERO, income - spent - planned - saved)

    slices = [
        BreakdownSlice(name="spent", amount=spent),
        BreakdownSlice(name="planned", amount=planned),
        BreakdownSlice(name="saved", amount=saved),
        BreakdownSlice(name="available", amount=available),
    ]
    return [s for s in slices if s.amount > 0]


def split_by_status(
    transactions: Iterable[Transaction],
    category: Optional[Category] = None,
    type_filter: Optional[TransactionType] = None,
) -> TransactionGroups:
    """
    The planned / done / savings lists of a week.

    `category` narrows planned and done. `type_filter` PLANNED hides done,
    ACTUAL hides planned. Done is ordered newest first.
    """
    transactions = list(transactions)
    planned = [tx for tx in transactions if tx.is_pending]
    done = [
        tx for tx in transactions
        if tx.type == TransactionType.ACTUAL
        or (tx.type == TransactionType.PLANNED and tx.is_confirmed)
    ]
    savings = [tx for tx in transactions if tx.type == TransactionType.SAVING]

    if category is not None:
        planned = [tx for tx in planned if tx.category == category]
        done = [tx for tx in done if tx.category == category]

    if type_filter == TransactionType.PLANNED:
        done = []
    elif type_filter == TransactionType.ACTUAL:
        planned = []

    done.sort(key=lambda tx: tx.date, reverse=True)
    return TransactionGroups(planned=planned, done=done, savings=savings)


def week_overview(week: WeekData) -> WeekOverview:
    """Archive summary of one week."""
    transactions = week.transactions
    return WeekOverview(
        week_id=week.id,
        start_date=week.start_date,
        end_date=week.end_date,
        income=week.income,
        planned=_sum(transactions, lambda tx: tx.type == TransactionType.PLANNED),
        spent=total_spent(transactions),
        saved=savings_this_week(transactions),
        expenses=_sum(transactions, lambda tx: tx.type != TransactionType.SAVING),
    )


def known_titles(state: AppState) -> list[str]:
    """Every title used so far, sorted, for autocomplete."""
    return sorted({tx.title for week in state.all_weeks() for tx in week.transactions})
