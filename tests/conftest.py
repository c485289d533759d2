"""Shared fixtures for the wallet tests."""

from datetime import datetime
from decimal import Decimal

import pytest

from src.models.ledger import (
    Category,
    Transaction,
    TransactionType,
    new_app_state,
)
from src.validation import new_transaction_id


@pytest.fixture
def now():
    """Wednesday, 12 March 2025, 10:00 local time."""
    return datetime(2025, 3, 12, 10, 0)


@pytest.fixture
def fresh_state(now):
    return new_app_state(now=now)


@pytest.fixture
def make_tx(now):
    """Build a base-currency transaction directly, bypassing input parsing."""

    def _make(
        amount="10",
        transaction_type=TransactionType.ACTUAL,
        category=Category.NECESSITIES,
        is_confirmed=None,
        title="Item",
        date=None,
    ):
        transaction_type = TransactionType(transaction_type)
        if transaction_type == TransactionType.SAVING:
            category = Category.NONE
        if is_confirmed is None:
            is_confirmed = transaction_type != TransactionType.PLANNED
        return Transaction(
            id=new_transaction_id(),
            title=title,
            amount=Decimal(amount),
            type=transaction_type,
            category=category,
            is_confirmed=is_confirmed,
            date=date or now,
        )

    return _make
