"""
Transaction Entity Rules

Validation, construction and update of a single transaction record.

Validation rules:
- Title must be non-empty after trimming
- Amount accepts "," or "." as the decimal separator and must be a
  finite number greater than zero
- Income must be a finite number greater than or equal to zero

IMPORTANT: Validation NEVER silently fixes bad input. It raises
ValidationError and the caller shows the message next to the field.
The one deliberate exception is coerce_income, used at week close where
a missing or unreadable allowance means "start the week at zero".
"""

import re
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel

from src.exceptions import ValidationError
from src.models.ledger import (
    BASE_CURRENCY,
    FALLBACK_RATE,
    Category,
    Currency,
    Transaction,
    TransactionType,
)
from src.services.currency import to_base

# Digits with an optional fraction; "," is normalized to "." first
PLAIN_DECIMAL = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)$")

_last_issued_id = 0


class TransactionDraft(BaseModel):
    """Raw user input for a new transaction, exactly as typed."""

    title: str
    raw_amount: str
    currency: Currency = BASE_CURRENCY
    type: TransactionType = TransactionType.PLANNED
    category: Category = Category.NECESSITIES


class TransactionEdit(BaseModel):
    """
    Raw user input for editing an existing transaction.

    Leaving currency or category unset keeps the stored record's value.
    """

    title: str
    raw_amount: str
    currency: Optional[Currency] = None
    category: Optional[Category] = None


def new_transaction_id() -> str:
    """
    Microsecond timestamp, strictly increasing within the process.

    Sorting ids as integers follows creation order.
    """
    global _last_issued_id
    candidate = time.time_ns() // 1000
    _last_issued_id = max(candidate, _last_issued_id + 1)
    return str(_last_issued_id)


def _parse_decimal(raw: Union[str, Decimal, int, float, None], field: str) -> Decimal:
    if raw is None:
        raise ValidationError(field, "Enter an amount, e.g. 12.99")

    text = str(raw).strip().replace(",", ".")
    if not text:
        raise ValidationError(field, "Enter an amount, e.g. 12.99")

    # Typed input must look like 12.99; numeric values are taken as they are
    if isinstance(raw, str) and not PLAIN_DECIMAL.match(text):
        raise ValidationError(field, f"'{raw}' is not a number")

    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValidationError(field, f"'{raw}' is not a number")

    if not value.is_finite():
        raise ValidationError(field, f"'{raw}' is not a finite number")
    return value


def parse_amount(raw: Union[str, Decimal, int, float, None]) -> Decimal:
    """
    Parse a user-typed amount.

    Raises:
        ValidationError: If the amount is empty, unparsable or not > 0
    """
    value = _parse_decimal(raw, "amount")
    if value <= 0:
        raise ValidationError("amount", "Amount must be greater than zero")
    return value


def parse_income(raw: Union[str, Decimal, int, float, None]) -> Decimal:
    """
    Validate a weekly income before it reaches set_income.

    Raises:
        ValidationError: If the income is empty, unparsable or negative
    """
    value = _parse_decimal(raw, "income")
    if value < 0:
        raise ValidationError("income", "Income cannot be negative")
    return value


def coerce_income(raw: Union[str, Decimal, int, float, None]) -> Decimal:
    """Lenient income parsing for week close: absent or invalid means zero."""
    try:
        return parse_income(raw)
    except ValidationError:
        return Decimal("0")


def _validate_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title", "Title cannot be empty")
    return cleaned


def create_transaction(
    title: str,
    raw_amount: Union[str, Decimal, None],
    currency: Currency,
    transaction_type: TransactionType,
    category: Category,
    rate: Decimal = FALLBACK_RATE,
    now: Optional[datetime] = None,
) -> Transaction:
    """
    Build a new transaction from raw input.

    - amount is converted to the base currency
    - actual and saving transactions are confirmed at creation
    - saving transactions are never categorized

    Raises:
        ValidationError: On empty title or bad amount
    """
    cleaned_title = _validate_title(title)
    entered = parse_amount(raw_amount)
    source = to_base(entered, currency, rate)

    transaction_type = TransactionType(transaction_type)
    if transaction_type == TransactionType.SAVING:
        category = Category.NONE

    return Transaction(
        id=new_transaction_id(),
        title=cleaned_title,
        amount=source.base_amount,
        source=source,
        type=transaction_type,
        category=category,
        is_confirmed=transaction_type in (TransactionType.ACTUAL, TransactionType.SAVING),
        date=now or datetime.now(),
    )


def create_from_draft(
    draft: TransactionDraft,
    rate: Decimal = FALLBACK_RATE,
    now: Optional[datetime] = None,
) -> Transaction:
    return create_transaction(
        title=draft.title,
        raw_amount=draft.raw_amount,
        currency=draft.currency,
        transaction_type=draft.type,
        category=draft.category,
        rate=rate,
        now=now,
    )


def update_transaction(
    existing: Transaction,
    edit: TransactionEdit,
    rate: Decimal = FALLBACK_RATE,
) -> Transaction:
    """
    Apply an edit to an existing transaction.

    id, type, date and confirmation status are preserved; amount and its
    source are recomputed. Does NOT touch total_savings - the week lifecycle
    computes the savings delta against the stored record.

    Raises:
        ValidationError: On empty title or bad amount
    """
    cleaned_title = _validate_title(edit.title)
    entered = parse_amount(edit.raw_amount)
    currency = edit.currency if edit.currency is not None else existing.original_currency
    source = to_base(entered, currency, rate)

    category = edit.category if edit.category is not None else existing.category
    if existing.type == TransactionType.SAVING:
        category = Category.NONE

    return Transaction(
        id=existing.id,
        title=cleaned_title,
        amount=source.base_amount,
        source=source,
        type=existing.type,
        category=category,
        is_confirmed=existing.is_confirmed,
        date=existing.date,
    )


def toggle_confirmation(transaction: Transaction) -> Transaction:
    """Flip is_confirmed on a planned transaction; anything else comes back unchanged."""
    if transaction.type != TransactionType.PLANNED:
        return transaction
    return transaction.model_copy(update={"is_confirmed": not transaction.is_confirmed})
