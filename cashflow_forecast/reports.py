"""Flat CSV export and per-month summaries of processed transactions."""

from __future__ import annotations

import csv
import io
from collections import defaultdict
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from .models import MonthSummary, Transaction

EXPORT_HEADERS: tuple[str, ...] = (
    "Date",
    "Description",
    "Amount",
    "Type",
    "Recurring",
    "Category",
    "Pay Period Impact",
    "Running Balance",
)


def _money(value: Decimal) -> str:
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def month_key(tx: Transaction) -> str:
    return f"{tx.date.year:04d}-{tx.date.month:02d}"


def export_to_csv(transactions: Sequence[Transaction]) -> str:
    """Serialize transactions (in the given order) to a delimited table.

    Quoting is left to :mod:`csv`, so descriptions containing commas or
    quotes survive a round trip through spreadsheet tools.
    """

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for tx in transactions:
        writer.writerow(
            [
                tx.date.isoformat(),
                tx.description,
                _money(tx.amount),
                tx.type,
                _yes_no(tx.is_recurring),
                tx.category.value,
                _yes_no(tx.pay_period_impact),
                _money(tx.running_balance),
            ]
        )
    return buf.getvalue()


def unique_months(transactions: Sequence[Transaction]) -> list[str]:
    """Distinct ``YYYY-MM`` keys, newest first."""

    return sorted({month_key(tx) for tx in transactions}, reverse=True)


def generate_month_summaries(transactions: Sequence[Transaction]) -> list[MonthSummary]:
    """Per-month totals, newest month first.

    Expenses and recurring expenses are sums of negative amounts (so they are
    negative or zero). The ending balance is the running balance of the
    newest transaction in the month.
    """

    by_month: dict[str, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        by_month[month_key(tx)].append(tx)

    summaries: list[MonthSummary] = []
    for key in sorted(by_month, reverse=True):
        txs = by_month[key]
        recurring = [tx for tx in txs if tx.is_recurring and tx.amount < 0]
        newest = max(txs, key=lambda tx: tx.date)
        summaries.append(
            MonthSummary(
                month=key,
                total_expenses=sum((tx.amount for tx in txs if tx.amount < 0), Decimal(0)),
                total_income=sum((tx.amount for tx in txs if tx.amount > 0), Decimal(0)),
                recurring_expenses=sum((tx.amount for tx in recurring), Decimal(0)),
                ending_balance=newest.running_balance,
                transaction_count=len(txs),
                recurring_transactions=recurring,
            )
        )
    return summaries


__all__ = [
    "EXPORT_HEADERS",
    "export_to_csv",
    "generate_month_summaries",
    "month_key",
    "unique_months",
]
