"""Transaction validation package."""

from src.validation.validator import (
    TransactionDraft,
    TransactionEdit,
    coerce_income,
    create_from_draft,
    create_transaction,
    new_transaction_id,
    parse_amount,
    parse_income,
    toggle_confirmation,
    update_transaction,
)

__all__ = [
    "TransactionDraft",
    "TransactionEdit",
    "coerce_income",
    "create_from_draft",
    "create_transaction",
    "new_transaction_id",
    "parse_amount",
    "parse_income",
    "toggle_confirmation",
    "update_transaction",
]
