"""
Data Models Package

This package contains all Pydantic models used in Weekly Wallet.
Everything that is persisted or shown to the user conforms to these schemas.
"""

from src.models.ledger import (
    BASE_CURRENCY,
    DEFAULT_PRESETS,
    FALLBACK_RATE,
    SECONDARY_CURRENCY,
    AmountSource,
    AppState,
    BreakdownSlice,
    Category,
    CategoryTotal,
    ConvertedAmount,
    Currency,
    DirectAmount,
    LedgerSummary,
    PeriodMode,
    PeriodStatistics,
    TimelineBucket,
    TimelineGranularity,
    Transaction,
    TransactionGroups,
    TransactionType,
    WeekData,
    WeekOverview,
    new_app_state,
    new_week,
)
from src.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerSeverity,
)

__all__ = [
    # Ledger models
    "BASE_CURRENCY",
    "DEFAULT_PRESETS",
    "FALLBACK_RATE",
    "SECONDARY_CURRENCY",
    "AmountSource",
    "AppState",
    "BreakdownSlice",
    "Category",
    "CategoryTotal",
    "ConvertedAmount",
    "Currency",
    "DirectAmount",
    "LedgerSummary",
    "PeriodMode",
    "PeriodStatistics",
    "TimelineBucket",
    "TimelineGranularity",
    "Transaction",
    "TransactionGroups",
    "TransactionType",
    "WeekData",
    "WeekOverview",
    "new_app_state",
    "new_week",
    # Event models
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
    "LedgerSeverity",
]
