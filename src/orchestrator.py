"""
Wallet Session

Ties the pure ledger core to its collaborators and defines the end-to-end
flow of every user action:

    input → validate → ledger operation → new AppState → save → log

DESIGN DECISION: The session is the only place that holds the current
AppState. Ledger operations never see storage, and storage never sees a
half-applied operation:
- A rejected operation (ValidationError, NotFoundError, WeekClosedError)
  raises before anything changes
- An accepted operation always replaces the in-memory state, even when
  saving fails; the failure is reported in the MutationResult, never rolled back
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional, Union

from pydantic import BaseModel

from src.agents import WeeklyReportAgent
from src.analytics import (
    build_statistics,
    known_titles,
    split_by_status,
    summarize,
    week_overview,
)
from src.config import LedgerSettings, get_settings
from src.exceptions import NotFoundError, ValidationError
from src.ledger import weeks
from src.ledger.schedule import is_close_due
from src.logs import LedgerLogger, configure_logging
from src.models.ledger import (
    AppState,
    Category,
    LedgerSummary,
    PeriodMode,
    PeriodStatistics,
    Transaction,
    TransactionGroups,
    TransactionType,
    WeekData,
    WeekOverview,
)
from src.services.rates import FixedRateProvider, NbpRateProvider, RateProvider
from src.services.storage import (
    JsonFileStateStorage,
    PersistenceError,
    StateStorageInterface,
)
from src.validation import (
    TransactionDraft,
    TransactionEdit,
    parse_income,
    update_transaction as apply_edit,
)


class MutationResult(BaseModel):
    """Outcome of an accepted operation."""

    state: AppState
    persisted: bool = True
    save_error: Optional[str] = None


class WalletSession:
    """
    Holds the current AppState for one user and applies operations to it.

    Flow per mutation:
    1. Validate raw input (rejections are logged and re-raised)
    2. Apply the pure ledger operation
    3. Replace the in-memory state
    4. Save, reporting (not reverting) a failed save
    5. Log the ledger event
    """

    def __init__(
        self,
        storage: StateStorageInterface,
        rate_provider: Optional[RateProvider] = None,
        report_agent: Optional[WeeklyReportAgent] = None,
        logger: Optional[LedgerLogger] = None,
        ledger_settings: Optional[LedgerSettings] = None,
    ):
        self._settings = ledger_settings or get_settings().ledger
        self._storage = storage
        self._logger = logger or LedgerLogger()
        self._rate_provider = rate_provider or FixedRateProvider(self._settings.fallback_rate)
        self._report_agent = report_agent
        self._rate = self._settings.fallback_rate
        self._state: Optional[AppState] = None

    @property
    def state(self) -> AppState:
        if self._state is None:
            raise RuntimeError("Session not started; call start() first")
        return self._state

    @property
    def rate(self) -> Decimal:
        """Secondary-per-base rate used for new entries."""
        return self._rate

    # =========================================================================
    # Startup
    # =========================================================================

    def start(self, now: Optional[datetime] = None) -> MutationResult:
        """Load the stored wallet and stamp last_opened."""
        loaded = self._storage.load()
        self._logger.log_state_loaded(
            source=self._storage.description,
            week_id=loaded.current_week.id,
            history_length=len(loaded.history),
        )
        return self._commit(weeks.touch_last_opened(loaded, now))

    def refresh_rate(self) -> Decimal:
        """Ask the rate provider for a fresh rate. Never raises."""
        self._rate = self._rate_provider.fetch_rate()
        return self._rate

    # =========================================================================
    # Transactions
    # =========================================================================

    def add_transaction(
        self,
        draft: TransactionDraft,
        now: Optional[datetime] = None,
    ) -> MutationResult:
        new_state = self._apply(weeks.add_transaction, draft, rate=self._rate, now=now)
        tx = new_state.current_week.transactions[0]
        result = self._commit(new_state)
        self._logger.log_transaction_added(
            week_id=new_state.current_week.id,
            transaction_id=tx.id,
            transaction_type=tx.type.value,
            amount=tx.amount,
            total_savings=new_state.total_savings,
        )
        return result

    def edit_transaction(self, transaction_id: str, edit: TransactionEdit) -> MutationResult:
        """
        Apply an edit form to a transaction of the current week.

        Raises:
            NotFoundError: If the id is not in the current week
            ValidationError: If the edited title or amount is rejected
        """
        existing = self._require_transaction(transaction_id)
        updated = self._validated(apply_edit, existing, edit, rate=self._rate)
        savings_before = self.state.total_savings
        new_state = self._apply(weeks.update_transaction, updated)

        result = self._commit(new_state)
        self._logger.log_transaction_updated(
            week_id=new_state.current_week.id,
            transaction_id=transaction_id,
            savings_delta=new_state.total_savings - savings_before,
            total_savings=new_state.total_savings,
        )
        return result

    def delete_transaction(self, transaction_id: str) -> MutationResult:
        """
        Remove a transaction; its stored type and amount drive the savings update.

        Raises:
            NotFoundError: If the id is not in the current week
        """
        existing = self._require_transaction(transaction_id)
        new_state = self._apply(
            weeks.delete_transaction,
            transaction_id,
            existing.type,
            existing.amount,
        )
        result = self._commit(new_state)
        self._logger.log_transaction_deleted(
            week_id=new_state.current_week.id,
            transaction_id=transaction_id,
            transaction_type=existing.type.value,
            amount=existing.amount,
            total_savings=new_state.total_savings,
        )
        return result

    def toggle_transaction(self, transaction_id: str) -> MutationResult:
        new_state = self._apply(weeks.toggle_confirmed, transaction_id)
        toggled = new_state.current_week.find_transaction(transaction_id)
        result = self._commit(new_state)
        self._logger.log_transaction_toggled(
            week_id=new_state.current_week.id,
            transaction_id=transaction_id,
            is_confirmed=toggled.is_confirmed,
        )
        return result

    # =========================================================================
    # Week lifecycle
    # =========================================================================

    def set_income(self, raw_income: Union[str, Decimal]) -> MutationResult:
        """
        Raises:
            ValidationError: If the income is not a non-negative number
        """
        income = self._validated(parse_income, raw_income)
        new_state = self._apply(weeks.set_income, income)
        result = self._commit(new_state)
        self._logger.log_income_set(week_id=new_state.current_week.id, income=income)
        return result

    def is_close_due(self, now: Optional[datetime] = None) -> bool:
        return is_close_due(
            self.state.current_week,
            now or datetime.now(),
            boundary_weekday=self._settings.week_boundary_weekday,
            min_age=timedelta(hours=self._settings.min_week_age_hours),
        )

    def close_week(
        self,
        new_income: Union[str, Decimal, None] = None,
        now: Optional[datetime] = None,
    ) -> MutationResult:
        """Archive the current week unconditionally and open a new one."""
        closing = self.state.current_week
        new_state = self._apply(weeks.close_week, new_income, now=now)
        result = self._commit(new_state)
        self._logger.log_week_closed(
            closed_week_id=closing.id,
            new_week_id=new_state.current_week.id,
            transaction_count=len(closing.transactions),
            new_income=new_state.current_week.income,
        )
        return result

    def close_week_if_due(
        self,
        new_income: Union[str, Decimal, None] = None,
        now: Optional[datetime] = None,
    ) -> Optional[MutationResult]:
        """Close the week only when the close-trigger policy says so."""
        now = now or datetime.now()
        if not self.is_close_due(now):
            return None
        return self.close_week(new_income, now=now)

    # =========================================================================
    # Presets
    # =========================================================================

    def add_preset(self, title: str) -> MutationResult:
        new_state = self._apply(weeks.add_preset, title)
        result = self._commit(new_state)
        self._logger.log_preset_changed(title=title.strip(), added=True)
        return result

    def remove_preset(self, title: str) -> MutationResult:
        new_state = self._apply(weeks.remove_preset, title)
        result = self._commit(new_state)
        self._logger.log_preset_changed(title=title.strip(), added=False)
        return result

    # =========================================================================
    # Read-only views
    # =========================================================================

    def summary(self) -> LedgerSummary:
        week = self.state.current_week
        return summarize(week.income, week.transactions)

    def groups(
        self,
        category: Optional[Category] = None,
        type_filter: Optional[TransactionType] = None,
    ) -> TransactionGroups:
        return split_by_status(self.state.current_week.transactions, category, type_filter)

    def statistics(
        self,
        mode: PeriodMode = PeriodMode.WEEK,
        cursor: Optional[datetime] = None,
    ) -> PeriodStatistics:
        return build_statistics(self.state, mode, cursor)

    def history_overview(self) -> list[WeekOverview]:
        """Archived weeks, most recent first."""
        return [week_overview(week) for week in reversed(self.state.history)]

    def titles(self) -> list[str]:
        return known_titles(self.state)

    async def generate_report(self, week_id: Optional[str] = None) -> str:
        """
        Gemini summary of an archived week (or the current one by default).

        Raises:
            LookupError: If no week has `week_id`
        """
        week = self._find_week(week_id)
        agent = self._report_agent or WeeklyReportAgent(logger=self._logger)
        return await agent.generate_report(week)

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_transaction(self, transaction_id: str) -> Transaction:
        tx = self.state.current_week.find_transaction(transaction_id)
        if tx is None:
            raise NotFoundError(transaction_id)
        return tx

    def _find_week(self, week_id: Optional[str]) -> WeekData:
        if week_id is None:
            return self.state.current_week
        for week in self.state.all_weeks():
            if week.id == week_id:
                return week
        raise LookupError(f"Week not found: {week_id}")

    def _validated(self, parse: Callable, *args, **kwargs):
        try:
            return parse(*args, **kwargs)
        except ValidationError as e:
            self._logger.log_validation_failed(field=e.field, message=e.message)
            raise

    def _apply(self, operation: Callable[..., AppState], *args, **kwargs) -> AppState:
        return self._validated(operation, self.state, *args, **kwargs)

    def _commit(self, new_state: AppState) -> MutationResult:
        self._state = new_state
        try:
            self._storage.save(new_state)
        except PersistenceError as e:
            self._logger.log_save_failed(week_id=new_state.current_week.id, error_message=str(e))
            return MutationResult(state=new_state, persisted=False, save_error=str(e))

        self._logger.log_state_saved(week_id=new_state.current_week.id)
        return MutationResult(state=new_state)


def create_session(
    state_path: Optional[str] = None,
    offline: bool = False,
) -> WalletSession:
    """
    Factory function to create a session wired to the configured collaborators.

    Args:
        state_path: Override for the snapshot file location.
        offline: Use the fallback rate instead of querying NBP.

    Returns:
        A session that still needs start()
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    logger = LedgerLogger()

    storage = JsonFileStateStorage(
        path=state_path,
        default_presets=settings.ledger.default_presets_list,
        logger=logger,
    )

    if offline:
        rate_provider: RateProvider = FixedRateProvider(settings.ledger.fallback_rate)
    else:
        rate_provider = NbpRateProvider(logger=logger)

    return WalletSession(
        storage=storage,
        rate_provider=rate_provider,
        report_agent=WeeklyReportAgent(logger=logger),
        logger=logger,
        ledger_settings=settings.ledger,
    )
