"""
Core Data Models for Weekly Wallet

These models define the strict schemas for the persisted ledger snapshot.
They are designed to:
1. Enforce the ledger's structural invariants at construction time
2. Be serializable to a single JSON snapshot (camelCase keys)
3. Load snapshots written by older versions of the wallet

DESIGN DECISION: Ledger models are frozen. Every ledger operation returns a
new AppState instead of mutating the one it was given.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """Currencies the wallet understands. EUR is the ledger's base."""
    EUR = "EUR"
    PLN = "PLN"


BASE_CURRENCY = Currency.EUR
SECONDARY_CURRENCY = Currency.PLN

# Secondary-per-base rate used whenever no live rate is available
FALLBACK_RATE = Decimal("4.30")

DEFAULT_PRESETS = ("Groceries", "Dining out", "Subscriptions")


class TransactionType(str, Enum):
    """
    Transaction classification, fixed at creation.

    PLANNED is a forecast; ACTUAL and SAVING are facts and are
    confirmed from the moment they are recorded.
    """
    PLANNED = "planned"
    ACTUAL = "actual"
    SAVING = "saving"


class Category(str, Enum):
    """Spending categories. Savings are never categorized."""
    OBLIGATIONS = "obligations"
    NECESSITIES = "necessities"
    PLEASURES = "pleasures"
    NONE = "none"


class PeriodMode(str, Enum):
    """Analytics views."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TimelineGranularity(str, Enum):
    """Bucketing used by the spending timeline."""
    DAY_OF_WEEK = "day-of-week"
    DAY_OF_MONTH = "day-of-month"
    MONTH_OF_YEAR = "month-of-year"


def _as_local_naive(value: datetime) -> datetime:
    """Older snapshots carry UTC 'Z' timestamps; the ledger works in local time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


LocalDatetime = Annotated[datetime, AfterValidator(_as_local_naive)]


class LedgerModel(BaseModel):
    """Base for everything that is persisted in the snapshot."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# AMOUNT SOURCE - how an amount was entered
# =============================================================================

class DirectAmount(LedgerModel):
    """Amount entered directly in the base currency."""

    kind: Literal["direct"] = "direct"
    amount: Decimal = Field(..., gt=0)

    @property
    def base_amount(self) -> Decimal:
        return self.amount

    @property
    def original_amount(self) -> Optional[Decimal]:
        return None

    @property
    def original_currency(self) -> Currency:
        return BASE_CURRENCY


class ConvertedAmount(LedgerModel):
    """Amount entered in the secondary currency and converted at `rate`."""

    kind: Literal["converted"] = "converted"
    entered_amount: Decimal = Field(..., gt=0)
    entered_currency: Currency
    rate: Decimal = Field(..., gt=0, description="Entered-currency units per base unit")

    @property
    def base_amount(self) -> Decimal:
        return self.entered_amount / self.rate

    @property
    def original_amount(self) -> Optional[Decimal]:
        return self.entered_amount

    @property
    def original_currency(self) -> Currency:
        return self.entered_currency


AmountSource = Annotated[
    Union[DirectAmount, ConvertedAmount],
    Field(discriminator="kind"),
]


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Transaction(LedgerModel):
    """
    One financial event.

    CRITICAL: `amount` is always in the base currency. The original
    amount/currency pair is display metadata derived from `source`
    and must never be used in aggregate math.
    """

    id: str = Field(..., min_length=1)
    title: str = Field(..., description="Non-empty at creation; stored records are taken as is")
    amount: Decimal = Field(..., gt=0, description="Amount in base currency")
    source: AmountSource
    type: TransactionType
    category: Category = Category.NONE
    is_confirmed: bool
    date: LocalDatetime = Field(..., description="Creation timestamp (immutable)")

    @model_validator(mode='before')
    @classmethod
    def reconstruct_source(cls, data: Any) -> Any:
        """Snapshots from before the tagged source only carry originalAmount/originalCurrency."""
        if not isinstance(data, dict) or "source" in data:
            return data

        data = dict(data)
        amount = data.get("amount")
        original_amount = data.get("originalAmount", data.get("original_amount"))
        original_currency = data.get("originalCurrency", data.get("original_currency"))

        if (
            original_amount is not None
            and amount
            and original_currency not in (None, BASE_CURRENCY.value, BASE_CURRENCY)
        ):
            entered = Decimal(str(original_amount))
            data["source"] = {
                "kind": "converted",
                "entered_amount": entered,
                "entered_currency": original_currency,
                "rate": entered / Decimal(str(amount)),
            }
        else:
            data["source"] = {"kind": "direct", "amount": amount}
        return data

    @model_validator(mode='after')
    def validate_saving_category(self) -> 'Transaction':
        if self.type == TransactionType.SAVING and self.category != Category.NONE:
            raise ValueError("Saving transactions cannot be categorized")
        return self

    @computed_field(alias="originalAmount")
    @property
    def original_amount(self) -> Optional[Decimal]:
        return self.source.original_amount

    @computed_field(alias="originalCurrency")
    @property
    def original_currency(self) -> Currency:
        return self.source.original_currency

    @property
    def counts_as_spent(self) -> bool:
        """Confirmed or actual - the ledger's 'spent' bucket."""
        return self.is_confirmed or self.type == TransactionType.ACTUAL

    @property
    def is_pending(self) -> bool:
        return self.type == TransactionType.PLANNED and not self.is_confirmed


class WeekData(LedgerModel):
    """One weekly budgeting period."""

    id: str = Field(..., min_length=1)
    start_date: LocalDatetime
    end_date: Optional[LocalDatetime] = None
    income: Decimal = Field(default=Decimal("0"), description="Weekly allowance in base currency")
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Newest first"
    )
    is_closed: bool = False

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for tx in self.transactions:
            if tx.id == transaction_id:
                return tx
        return None


class AppState(LedgerModel):
    """
    The whole persisted snapshot.

    `total_savings` is a materialized aggregate: it must always equal the
    sum of every saving amount in the current week and in history.
    """

    current_week: WeekData
    history: list[WeekData] = Field(
        default_factory=list,
        description="Closed weeks, append-only"
    )
    total_savings: Decimal = Decimal("0")
    last_opened: LocalDatetime
    presets: list[str] = Field(default_factory=lambda: list(DEFAULT_PRESETS))

    @field_validator('presets')
    @classmethod
    def dedupe_presets(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(p for p in v if p))

    def all_weeks(self) -> list[WeekData]:
        """Current week first, then history in archive order."""
        return [self.current_week, *self.history]


def new_week(income: Decimal, now: datetime) -> WeekData:
    """A fresh open week starting at `now`."""
    return WeekData(
        id=now.isoformat(),
        start_date=now,
        income=income,
    )


def new_app_state(
    now: Optional[datetime] = None,
    presets: Optional[list[str]] = None,
) -> AppState:
    """The first-run snapshot: zero-income open week, no history, no savings."""
    now = now or datetime.now()
    return AppState(
        current_week=new_week(Decimal("0"), now),
        last_opened=now,
        presets=list(DEFAULT_PRESETS) if presets is None else presets,
    )


# =============================================================================
# DERIVED VIEW MODELS - computed, never persisted
# =============================================================================

class LedgerSummary(BaseModel):
    """Headline figures for a set of transactions against an income."""

    income: Decimal
    total_planned: Decimal
    total_spent: Decimal
    savings_this_week: Decimal
    available_funds: Decimal

    @property
    def is_critical(self) -> bool:
        """Negative available funds are flagged, not rejected."""
        return self.available_funds < 0


class CategoryTotal(BaseModel):
    category: Category
    amount: Decimal


class TimelineBucket(BaseModel):
    """One bar of the spending timeline."""

    key: int
    label: str
    amount: Decimal


class BreakdownSlice(BaseModel):
    """One slice of the income split (spent / planned / saved / available)."""

    name: str
    amount: Decimal


class TransactionGroups(BaseModel):
    """The three lists shown for a week."""

    planned: list[Transaction] = Field(default_factory=list)
    done: list[Transaction] = Field(default_factory=list)
    savings: list[Transaction] = Field(default_factory=list)


class WeekOverview(BaseModel):
    """Summary line for one archived week."""

    week_id: str
    start_date: LocalDatetime
    end_date: Optional[LocalDatetime] = None
    income: Decimal
    planned: Decimal
    spent: Decimal
    saved: Decimal
    expenses: Decimal = Field(description="Every non-saving amount")


class PeriodStatistics(BaseModel):
    """Everything the analytics view needs for one period."""

    mode: PeriodMode
    cursor: datetime
    week: WeekData
    summary: LedgerSummary
    categories: list[CategoryTotal]
    timeline: list[TimelineBucket]
    breakdown: list[BreakdownSlice]
