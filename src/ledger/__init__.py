"""
Ledger Core

Pure week lifecycle operations over AppState plus the close-trigger policy.
"""

from src.ledger.schedule import MIN_WEEK_AGE, SUNDAY, is_close_due
from src.ledger.weeks import (
    add_preset,
    add_transaction,
    close_week,
    delete_transaction,
    recompute_total_savings,
    remove_preset,
    set_income,
    toggle_confirmed,
    touch_last_opened,
    update_transaction,
)

__all__ = [
    # Lifecycle
    "add_preset",
    "add_transaction",
    "close_week",
    "delete_transaction",
    "recompute_total_savings",
    "remove_preset",
    "set_income",
    "toggle_confirmed",
    "touch_last_opened",
    "update_transaction",
    # Schedule
    "MIN_WEEK_AGE",
    "SUNDAY",
    "is_close_due",
]
