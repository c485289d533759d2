"""
Analytics Package

Derived metrics over weeks and their month/year rollups. Read-only:
nothing in this package changes AppState.
"""

from src.analytics.metrics import (
    available_funds,
    category_totals,
    known_titles,
    savings_this_week,
    spending_breakdown,
    split_by_status,
    summarize,
    timeline_buckets,
    total_planned,
    total_spent,
    week_overview,
)
from src.analytics.periods import aggregate, build_statistics, shift_cursor

__all__ = [
    # Metrics
    "available_funds",
    "category_totals",
    "known_titles",
    "savings_this_week",
    "spending_breakdown",
    "split_by_status",
    "summarize",
    "timeline_buckets",
    "total_planned",
    "total_spent",
    "week_overview",
    # Periods
    "aggregate",
    "build_statistics",
    "shift_cursor",
]
