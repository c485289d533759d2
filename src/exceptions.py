"""
Ledger Exceptions

Raised by the ledger core and surfaced to the caller synchronously.
An operation that raises one of these has not been applied: the AppState
the caller holds is still the current one.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError, ValueError):
    """User input was rejected (bad amount, empty title, bad income)."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NotFoundError(LedgerError, LookupError):
    """Update/delete/toggle target is not in the current week."""

    def __init__(self, transaction_id: str, message: Optional[str] = None):
        self.transaction_id = transaction_id
        super().__init__(message or f"Transaction not found in current week: {transaction_id}")


class WeekClosedError(LedgerError):
    """A mutation was attempted against a week that is already archived."""
    pass
