"""
Currency Conversion

Turns an amount entered by the user into the ledger's base currency.

DESIGN DECISION: Conversion never fetches rates. The caller supplies one
(live from the rate provider, or FALLBACK_RATE) so this stays a pure function.
"""

from decimal import Decimal

from src.exceptions import ValidationError
from src.models.ledger import (
    BASE_CURRENCY,
    AmountSource,
    ConvertedAmount,
    Currency,
    DirectAmount,
)


def to_base(amount: Decimal, currency: Currency, rate: Decimal) -> AmountSource:
    """
    Describe how `amount` entered in `currency` maps onto the base currency.

    Returns DirectAmount for base-currency input (no original-amount metadata),
    ConvertedAmount otherwise; `.base_amount` is `amount / rate`.

    Raises:
        ValidationError: If rate is not positive
    """
    if rate is None:
        raise ValidationError("rate", "Exchange rate is required")
    rate = Decimal(str(rate))
    if not rate.is_finite() or rate <= 0:
        raise ValidationError("rate", f"Exchange rate must be positive, got {rate}")

    if Currency(currency) == BASE_CURRENCY:
        return DirectAmount(amount=amount)

    return ConvertedAmount(
        entered_amount=amount,
        entered_currency=currency,
        rate=rate,
    )
