"""Data models for ``cashflow_forecast``.

Two families live here:

- Computed values (raw records, transactions, schedules, resolution statuses,
  projections) are frozen ``dataclass`` records. They are rebuilt wholesale on
  every call and never mutated in place.
- User-declared inputs (bills, pending commissions, per-transaction overrides)
  are Pydantic models so values restored from a host store are validated on
  the way in.

Money is ``Decimal`` throughout; calendar values are ``datetime.date``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .categories import Category

# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawTransactionRecord:
    """One row from an export, before identity/category/balance are assigned.

    ``posting_date`` keeps the locale-formatted string exactly as exported
    (e.g. ``"10/03/2026"``). ``amount`` is signed as the source wrote it.
    """

    description: str
    posting_date: str
    amount: Decimal
    type: str
    balance: Decimal | None = None
    category_hint: str | None = None
    details: str | None = None


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Records parsed from one file plus diagnostics.

    ``formats`` lists the detected section formats in file order (one entry
    per header found), e.g. ``("bank", "accounting")`` for a merged file.
    """

    records: list[RawTransactionRecord]
    skipped_rows: int = 0
    formats: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Transaction:
    """The canonical transaction produced by :func:`process_transactions`.

    ``id`` is a pure function of (date, amount, type, description, category
    hint, occurrence index among exact duplicates) so re-ingesting identical
    content yields identical ids.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    type: str
    category: Category
    is_recurring: bool
    running_balance: Decimal
    pay_period_impact: bool
    source_balance: Decimal | None = None


# ---------------------------------------------------------------------------
# User-declared inputs
# ---------------------------------------------------------------------------

BillType = Literal["recurring", "one-time"]


class Bill(BaseModel):
    """A user-declared recurring or one-time obligation."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    id: str
    vendor: str
    amount: Decimal = Field(ge=0)
    due_day: int = Field(ge=1, le=31)
    category: str = Category.MISCELLANEOUS.value
    active: bool = True
    type: BillType = "recurring"
    notes: str | None = None

    @field_validator("vendor")
    @classmethod
    def _vendor_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("vendor must be non-empty")
        return v


class PendingCommission(BaseModel):
    """One expected commission deposit."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    id: str
    amount: Decimal = Field(ge=0)
    expected_date: date
    cutoff_label: str = ""


class TransactionOverride(BaseModel):
    """Sparse user patch for one transaction, keyed externally by transaction id.

    ``None`` means "not overridden"; only the two user-editable fields exist.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: Category | None = None
    is_recurring: bool | None = None


Overrides: TypeAlias = Mapping[str, TransactionOverride]


# ---------------------------------------------------------------------------
# Schedule and forecasting outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PaymentPeriod:
    """A contractual cutoff and the payment date it produces."""

    cutoff_date: date
    payment_date: date
    period_label: str


@dataclass(frozen=True, slots=True)
class PaydayInfo:
    """The payday that closes the current bill window."""

    payday_date: date
    is_from_commission: bool
    period_label: str


@dataclass(frozen=True, slots=True)
class BillResolutionStatus:
    bill_id: str
    vendor: str
    is_resolved: bool
    matching_transaction_id: str | None = None
    matching_transaction_date: date | None = None
    matching_transaction_amount: Decimal | None = None


@dataclass(frozen=True, slots=True)
class BillWithStatus:
    """An active bill placed on the calendar with its resolution status."""

    bill: Bill
    expected_date: date
    is_resolved: bool
    match: BillResolutionStatus | None = None


@dataclass(frozen=True, slots=True)
class BillSuggestion:
    """A vendor seen as an expense two or more times that is not yet a bill."""

    vendor: str
    vendor_key: str
    average_amount: Decimal
    occurrences: int
    last_seen: date
    suggested_due_day: int
    category: Category


@dataclass(frozen=True, slots=True)
class FinancialProjection:
    amount_to_keep: Decimal
    liquidity_balance: Decimal
    safe_to_spend: Decimal
    projected_balance: Decimal
    commission_for_projection: Decimal
    commission_applied_today: bool
    resolved_count: int
    pending_count: int
    coverage_percent: int
    is_short: bool
    shortfall: Decimal


@dataclass(frozen=True, slots=True)
class CashFlowForecast:
    """Everything a dashboard needs for one reference day."""

    today: date
    payday: PaydayInfo
    next_commission: PendingCommission | None
    resolutions: dict[str, BillResolutionStatus]
    bills_before_payday: list[BillWithStatus]
    projection: FinancialProjection


@dataclass(frozen=True, slots=True)
class CommissionStatus:
    upcoming: list[PendingCommission]
    expired: list[PendingCommission]
    next_commission: PendingCommission | None

    @property
    def has_expired(self) -> bool:
        return bool(self.expired)


@dataclass(frozen=True, slots=True)
class CommissionBreakdown:
    gross_profit: Decimal
    gross_revenue: Decimal
    commission_rate: Decimal
    raw_commission: Decimal
    bad_debt_reserve: Decimal
    bad_debt_reserve_rate: Decimal
    net_payout: Decimal

    @property
    def commission_rate_percent(self) -> int:
        return int(self.commission_rate * 100)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MonthSummary:
    month: str  # YYYY-MM
    total_expenses: Decimal
    total_income: Decimal
    recurring_expenses: Decimal
    ending_balance: Decimal
    transaction_count: int
    recurring_transactions: list[Transaction] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RecurringVendorSummary:
    vendor_key: str
    label: str
    count: int
    total: Decimal
    average: Decimal
    cadence: str | None


__all__ = [
    "RawTransactionRecord",
    "ParseResult",
    "Transaction",
    "BillType",
    "Bill",
    "PendingCommission",
    "TransactionOverride",
    "Overrides",
    "PaymentPeriod",
    "PaydayInfo",
    "BillResolutionStatus",
    "BillWithStatus",
    "BillSuggestion",
    "FinancialProjection",
    "CashFlowForecast",
    "CommissionStatus",
    "CommissionBreakdown",
    "MonthSummary",
    "RecurringVendorSummary",
]
