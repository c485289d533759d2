"""
Ledger Event Models

Every ledger mutation and every collaborator failure is described by a
LedgerEvent and written to the structured local log.

DESIGN DECISION: Events are log records only. Nothing here is persisted,
replayed or used to rebuild state - the snapshot is the single source of truth.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events we log."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_TOGGLED = "transaction_toggled"
    VALIDATION_FAILED = "validation_failed"

    # Week lifecycle
    INCOME_SET = "income_set"
    WEEK_CLOSED = "week_closed"

    # Presets
    PRESET_ADDED = "preset_added"
    PRESET_REMOVED = "preset_removed"

    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_LOAD_FALLBACK = "state_load_fallback"
    STATE_SAVED = "state_saved"
    SAVE_FAILED = "save_failed"

    # Collaborators
    RATE_FETCHED = "rate_fetched"
    RATE_FALLBACK = "rate_fallback"
    REPORT_FAILED = "report_failed"


class LedgerSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.now)

    event_type: LedgerEventType
    severity: LedgerSeverity = LedgerSeverity.INFO

    # What the event is about
    week_id: Optional[str] = None
    transaction_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "week_id": self.week_id,
            "transaction_id": self.transaction_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.transaction_added(week_id, tx_id, "saving", amount)
        event = LedgerEventBuilder.save_failed(error)
    """

    @staticmethod
    def transaction_added(
        week_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        total_savings: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            week_id=week_id,
            transaction_id=transaction_id,
            description=f"Added {transaction_type} transaction of {amount:.2f}",
            details={
                "type": transaction_type,
                "amount": str(amount),
                "total_savings": str(total_savings),
            },
        )

    @staticmethod
    def transaction_updated(
        week_id: str,
        transaction_id: str,
        savings_delta: Decimal,
        total_savings: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_UPDATED,
            week_id=week_id,
            transaction_id=transaction_id,
            description="Transaction updated",
            details={
                "savings_delta": str(savings_delta),
                "total_savings": str(total_savings),
            },
        )

    @staticmethod
    def transaction_deleted(
        week_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        total_savings: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            week_id=week_id,
            transaction_id=transaction_id,
            description=f"Deleted {transaction_type} transaction of {amount:.2f}",
            details={
                "type": transaction_type,
                "amount": str(amount),
                "total_savings": str(total_savings),
            },
        )

    @staticmethod
    def transaction_toggled(
        week_id: str,
        transaction_id: str,
        is_confirmed: bool,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_TOGGLED,
            week_id=week_id,
            transaction_id=transaction_id,
            description="Planned transaction confirmed" if is_confirmed
            else "Planned transaction reopened",
            details={"is_confirmed": is_confirmed},
        )

    @staticmethod
    def validation_failed(field: str, message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_FAILED,
            severity=LedgerSeverity.WARNING,
            description=f"Rejected input for {field}",
            details={"field": field},
            error_message=message,
        )

    @staticmethod
    def income_set(week_id: str, income: Decimal) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.INCOME_SET,
            week_id=week_id,
            description=f"Weekly income set to {income:.2f}",
            details={"income": str(income)},
        )

    @staticmethod
    def week_closed(
        closed_week_id: str,
        new_week_id: str,
        transaction_count: int,
        new_income: Decimal,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.WEEK_CLOSED,
            week_id=closed_week_id,
            description=f"Week archived with {transaction_count} transactions",
            details={
                "new_week_id": new_week_id,
                "transaction_count": transaction_count,
                "new_income": str(new_income),
            },
        )

    @staticmethod
    def preset_changed(title: str, added: bool) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PRESET_ADDED if added else LedgerEventType.PRESET_REMOVED,
            description=f"Preset {'added' if added else 'removed'}: {title[:100]}",
            details={"title": title},
        )

    @staticmethod
    def state_loaded(source: str, week_id: str, history_length: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_LOADED,
            week_id=week_id,
            description=f"Wallet loaded from {source}",
            details={"source": source, "history_length": history_length},
        )

    @staticmethod
    def state_load_fallback(source: str, error_message: str, backup_path: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_LOAD_FALLBACK,
            severity=LedgerSeverity.WARNING,
            description="Stored wallet unreadable, starting from the default snapshot",
            details={"source": source, "backup_path": backup_path},
            error_message=error_message,
        )

    @staticmethod
    def state_saved(week_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_SAVED,
            severity=LedgerSeverity.DEBUG,
            week_id=week_id,
            description="Wallet saved",
        )

    @staticmethod
    def save_failed(week_id: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SAVE_FAILED,
            severity=LedgerSeverity.ERROR,
            week_id=week_id,
            description="Wallet could not be saved; in-memory state kept",
            error_message=error_message,
        )

    @staticmethod
    def rate_fetched(rate: Decimal, source: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RATE_FETCHED,
            description=f"Exchange rate {rate} from {source}",
            details={"rate": str(rate), "source": source},
        )

    @staticmethod
    def rate_fallback(rate: Decimal, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RATE_FALLBACK,
            severity=LedgerSeverity.WARNING,
            description=f"Exchange rate unavailable, using fallback {rate}",
            details={"rate": str(rate)},
            error_message=error_message,
        )

    @staticmethod
    def report_failed(week_id: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.REPORT_FAILED,
            severity=LedgerSeverity.WARNING,
            week_id=week_id,
            description="Weekly report could not be generated",
            error_message=error_message,
        )
