"""
Week Lifecycle Manager

Every operation here takes the current AppState and returns a new one.
Nothing is mutated in place and nothing is persisted: the session decides
when to save.

State machine over WeekData.is_closed:

    OPEN ──close_week──▶ CLOSED (archived in history, terminal)

CRITICAL INVARIANT: total_savings equals the sum of every saving amount in
the current week and in history. Each operation that adds, edits or removes
a saving adjusts it by the exact delta; recompute_total_savings is the
reference the invariant is checked against.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from src.exceptions import NotFoundError, ValidationError, WeekClosedError
from src.models.ledger import (
    FALLBACK_RATE,
    AppState,
    Transaction,
    TransactionType,
    WeekData,
    new_week,
)
from src.validation import (
    TransactionDraft,
    coerce_income,
    create_from_draft,
    toggle_confirmation,
)


def _require_open(state: AppState) -> WeekData:
    week = state.current_week
    if week.is_closed:
        raise WeekClosedError(f"Week {week.id} is closed")
    return week


def _index_of(week: WeekData, transaction_id: str) -> int:
    for index, tx in enumerate(week.transactions):
        if tx.id == transaction_id:
            return index
    raise NotFoundError(transaction_id)


def _with_transactions(
    state: AppState,
    week: WeekData,
    transactions: list[Transaction],
    total_savings: Optional[Decimal] = None,
) -> AppState:
    update = {"current_week": week.model_copy(update={"transactions": transactions})}
    if total_savings is not None:
        update["total_savings"] = total_savings
    return state.model_copy(update=update)


def add_transaction(
    state: AppState,
    draft: Union[TransactionDraft, Transaction],
    rate: Decimal = FALLBACK_RATE,
    now: Optional[datetime] = None,
) -> AppState:
    """
    Record a new transaction at the top of the current week.

    A draft is validated and converted first; an already built Transaction
    is taken as is. Adding a saving increments total_savings.

    Raises:
        ValidationError: If the draft is rejected
        WeekClosedError: If the current week is closed
    """
    week = _require_open(state)
    tx = draft if isinstance(draft, Transaction) else create_from_draft(draft, rate=rate, now=now)

    total_savings = state.total_savings
    if tx.type == TransactionType.SAVING:
        total_savings += tx.amount

    return _with_transactions(state, week, [tx, *week.transactions], total_savings)


def update_transaction(state: AppState, updated: Transaction) -> AppState:
    """
    Replace a transaction of the current week, keeping its position.

    For savings, total_savings moves by (updated.amount - stored.amount).

    Raises:
        NotFoundError: If no transaction with updated.id is in the current week
        ValidationError: If the edit tries to change the transaction type
        WeekClosedError: If the current week is closed
    """
    week = _require_open(state)
    index = _index_of(week, updated.id)
    existing = week.transactions[index]

    if updated.type != existing.type:
        raise ValidationError(
            "type",
            f"Transaction type is fixed at creation ({existing.type.value})",
        )

    total_savings = state.total_savings
    if existing.type == TransactionType.SAVING:
        total_savings += updated.amount - existing.amount

    transactions = list(week.transactions)
    transactions[index] = updated
    return _with_transactions(state, week, transactions, total_savings)


def delete_transaction(
    state: AppState,
    transaction_id: str,
    transaction_type: TransactionType,
    amount: Decimal,
) -> AppState:
    """
    Remove a transaction from the current week.

    `transaction_type` and `amount` describe the record as it was before
    deletion; a saving decrements total_savings by that amount.

    Raises:
        NotFoundError: If the id is not in the current week (savings untouched)
        WeekClosedError: If the current week is closed
    """
    week = _require_open(state)
    index = _index_of(week, transaction_id)

    total_savings = state.total_savings
    if TransactionType(transaction_type) == TransactionType.SAVING:
        total_savings -= Decimal(str(amount))

    transactions = week.transactions[:index] + week.transactions[index + 1:]
    return _with_transactions(state, week, transactions, total_savings)


def toggle_confirmed(state: AppState, transaction_id: str) -> AppState:
    """
    Flip the confirmation of a planned transaction (no savings effect).

    Raises:
        NotFoundError: If the id is not in the current week
        WeekClosedError: If the current week is closed
    """
    week = _require_open(state)
    index = _index_of(week, transaction_id)

    transactions = list(week.transactions)
    transactions[index] = toggle_confirmation(transactions[index])
    return _with_transactions(state, week, transactions)


def set_income(state: AppState, income: Decimal) -> AppState:
    """
    Set the weekly allowance of the current week.

    Callers pass an already validated, non-negative amount (see parse_income).
    """
    week = _require_open(state)
    return state.model_copy(update={
        "current_week": week.model_copy(update={"income": Decimal(str(income))}),
    })


def close_week(
    state: AppState,
    new_income: Union[str, Decimal, None] = None,
    now: Optional[datetime] = None,
) -> AppState:
    """
    Archive the current week and open a fresh one.

    - the current week gets end_date=now, is_closed=True and is appended to history
    - the new week starts at `now` with the coerced income and no transactions
    - total_savings is unchanged

    Not idempotent: every call archives one more week. Whether the week is
    due is decided by the caller (see schedule.is_close_due).
    """
    now = now or datetime.now()
    closed = state.current_week.model_copy(update={"end_date": now, "is_closed": True})

    return state.model_copy(update={
        "current_week": new_week(coerce_income(new_income), now),
        "history": [*state.history, closed],
    })


def _clean_preset(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title", "Preset title cannot be empty")
    return cleaned


def add_preset(state: AppState, title: str) -> AppState:
    """Add a quick-entry title. Adding an existing title changes nothing."""
    cleaned = _clean_preset(title)
    if cleaned in state.presets:
        return state
    return state.model_copy(update={"presets": [*state.presets, cleaned]})


def remove_preset(state: AppState, title: str) -> AppState:
    cleaned = _clean_preset(title)
    return state.model_copy(update={"presets": [p for p in state.presets if p != cleaned]})


def touch_last_opened(state: AppState, now: Optional[datetime] = None) -> AppState:
    return state.model_copy(update={"last_opened": now or datetime.now()})


def recompute_total_savings(state: AppState) -> Decimal:
    """Sum every saving in the current week and history from scratch."""
    return sum(
        (
            tx.amount
            for week in state.all_weeks()
            for tx in week.transactions
            if tx.type == TransactionType.SAVING
        ),
        Decimal("0"),
    )
