"""
Ledger Logger

Every ledger mutation and every collaborator failure is logged locally
as one structured `ledger_event` record.

The ledger logger:
- Is synchronous, like the ledger itself
- Keeps nothing: there is no persisted audit trail
"""

import logging
from decimal import Decimal
from typing import Optional

import structlog

from src.models.events import LedgerEvent, LedgerEventBuilder, LedgerSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


def get_logger(name: Optional[str] = None):
    return structlog.get_logger(name)


class LedgerLogger:
    """
    Central ledger event logger.

    Wraps LedgerEventBuilder so call sites read as what happened:
        logger.log_transaction_added(week_id, tx_id, "saving", amount, total)
    """

    def __init__(self, name: str = "weekly_wallet"):
        self._logger = structlog.get_logger(name)

    def log(self, event: LedgerEvent) -> None:
        """Log a ledger event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == LedgerSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

    def log_transaction_added(
        self,
        week_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        total_savings: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_added(
            week_id=week_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            total_savings=total_savings,
        ))

    def log_transaction_updated(
        self,
        week_id: str,
        transaction_id: str,
        savings_delta: Decimal,
        total_savings: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_updated(
            week_id=week_id,
            transaction_id=transaction_id,
            savings_delta=savings_delta,
            total_savings=total_savings,
        ))

    def log_transaction_deleted(
        self,
        week_id: str,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        total_savings: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_deleted(
            week_id=week_id,
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            total_savings=total_savings,
        ))

    def log_transaction_toggled(
        self,
        week_id: str,
        transaction_id: str,
        is_confirmed: bool,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_toggled(
            week_id=week_id,
            transaction_id=transaction_id,
            is_confirmed=is_confirmed,
        ))

    def log_validation_failed(self, field: str, message: str) -> None:
        self.log(LedgerEventBuilder.validation_failed(field=field, message=message))

    def log_income_set(self, week_id: str, income: Decimal) -> None:
        self.log(LedgerEventBuilder.income_set(week_id=week_id, income=income))

    def log_week_closed(
        self,
        closed_week_id: str,
        new_week_id: str,
        transaction_count: int,
        new_income: Decimal,
    ) -> None:
        self.log(LedgerEventBuilder.week_closed(
            closed_week_id=closed_week_id,
            new_week_id=new_week_id,
            transaction_count=transaction_count,
            new_income=new_income,
        ))

    def log_preset_changed(self, title: str, added: bool) -> None:
        self.log(LedgerEventBuilder.preset_changed(title=title, added=added))

    def log_state_loaded(self, source: str, week_id: str, history_length: int) -> None:
        self.log(LedgerEventBuilder.state_loaded(
            source=source,
            week_id=week_id,
            history_length=history_length,
        ))

    def log_state_load_fallback(self, source: str, error_message: str, backup_path: str) -> None:
        self.log(LedgerEventBuilder.state_load_fallback(
            source=source,
            error_message=error_message,
            backup_path=backup_path,
        ))

    def log_state_saved(self, week_id: str) -> None:
        self.log(LedgerEventBuilder.state_saved(week_id=week_id))

    def log_save_failed(self, week_id: str, error_message: str) -> None:
        self.log(LedgerEventBuilder.save_failed(week_id=week_id, error_message=error_message))

    def log_rate_fetched(self, rate: Decimal, source: str) -> None:
        self.log(LedgerEventBuilder.rate_fetched(rate=rate, source=source))

    def log_rate_fallback(self, rate: Decimal, error_message: str) -> None:
        self.log(LedgerEventBuilder.rate_fallback(rate=rate, error_message=error_message))

    def log_report_failed(self, week_id: str, error_message: str) -> None:
        self.log(LedgerEventBuilder.report_failed(week_id=week_id, error_message=error_message))
