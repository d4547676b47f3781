"""Bill resolution against observed transactions, and bill calendar placement.

A bill is *resolved* for the reference month when at least one expense
transaction dated in that month shares the bill's vendor key. Each bill is
matched independently: one transaction may resolve several bills.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from .business_days import add_months, clamp_day_of_month
from .logging_setup import get_logger
from .models import (
    Bill,
    BillResolutionStatus,
    BillSuggestion,
    BillWithStatus,
    Transaction,
)
from .vendors import extract_vendor_name, transaction_vendor_key

_logger = get_logger("cashflow_forecast.bills")


def is_expense(tx: Transaction) -> bool:
    """Negative amounts, or positive amounts whose type label says debit."""

    return tx.amount < 0 or (tx.amount > 0 and "debit" in (tx.type or "").lower())


def _month_expenses_by_vendor(
    transactions: Iterable[Transaction], *, today: date
) -> dict[str, list[Transaction]]:
    by_vendor: dict[str, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        if tx.date.year != today.year or tx.date.month != today.month:
            continue
        if is_expense(tx):
            by_vendor[transaction_vendor_key(tx.description)].append(tx)
    return by_vendor


def resolve_bills(
    bills: Sequence[Bill], transactions: Sequence[Transaction], *, today: date
) -> dict[str, BillResolutionStatus]:
    """Return a resolution status for every active bill, keyed by bill id.

    Among same-vendor expenses the one whose absolute amount is closest to the
    bill amount wins; ties keep the first encountered in ``transactions``.
    """

    by_vendor = _month_expenses_by_vendor(transactions, today=today)
    statuses: dict[str, BillResolutionStatus] = {}
    for bill in bills:
        if not bill.active:
            continue
        best: Transaction | None = None
        best_diff: Decimal | None = None
        for tx in by_vendor.get(transaction_vendor_key(bill.vendor), ()):
            diff = abs(abs(tx.amount) - bill.amount)
            if best_diff is None or diff < best_diff:
                best, best_diff = tx, diff
        statuses[bill.id] = BillResolutionStatus(
            bill_id=bill.id,
            vendor=bill.vendor,
            is_resolved=best is not None,
            matching_transaction_id=best.id if best is not None else None,
            matching_transaction_date=best.date if best is not None else None,
            matching_transaction_amount=abs(best.amount) if best is not None else None,
        )
    _logger.debug(
        "bills:resolved month=%04d-%02d resolved=%d of %d",
        today.year,
        today.month,
        sum(1 for s in statuses.values() if s.is_resolved),
        len(statuses),
    )
    return statuses


def expected_due_date(bill: Bill, today: date) -> date:
    """Place ``bill`` on the calendar relative to ``today``.

    The due day is clamped to this month's length. A recurring bill whose date
    has already passed rolls to next month (clamped again); one-time bills
    never roll.
    """

    expected = clamp_day_of_month(today.year, today.month, bill.due_day)
    if expected < today and bill.type != "one-time":
        year, month = add_months(today.year, today.month, 1)
        expected = clamp_day_of_month(year, month, bill.due_day)
    return expected


def bills_before_payday(
    bills: Sequence[Bill],
    transactions: Sequence[Transaction],
    payday: date,
    *,
    today: date,
    resolutions: Mapping[str, BillResolutionStatus] | None = None,
) -> list[BillWithStatus]:
    """Active bills expected in ``[today, payday]``, earliest first."""

    if resolutions is None:
        resolutions = resolve_bills(bills, transactions, today=today)
    window: list[BillWithStatus] = []
    for bill in bills:
        if not bill.active:
            continue
        expected = expected_due_date(bill, today)
        if not today <= expected <= payday:
            continue
        match = resolutions.get(bill.id)
        window.append(
            BillWithStatus(
                bill=bill,
                expected_date=expected,
                is_resolved=match.is_resolved if match is not None else False,
                match=match,
            )
        )
    window.sort(key=lambda b: b.expected_date)
    return window


def unpaid_bills(
    bills: Sequence[Bill], statuses: Mapping[str, BillResolutionStatus]
) -> list[Bill]:
    """Active bills with no resolved status."""

    out: list[Bill] = []
    for bill in bills:
        if not bill.active:
            continue
        status = statuses.get(bill.id)
        if status is None or not status.is_resolved:
            out.append(bill)
    return out


def suggest_bills(
    transactions: Sequence[Transaction],
    bills: Sequence[Bill],
    *,
    ignored_vendor_keys: Iterable[str] = (),
) -> list[BillSuggestion]:
    """Suggest vendors seen as expenses two or more times that are not yet bills.

    Ordered by occurrences, then average amount, both descending. The
    suggested due day is the most common day of month (earliest day wins a
    tie); the category is the newest transaction's.
    """

    existing = {transaction_vendor_key(b.vendor) for b in bills}
    skip = existing | set(ignored_vendor_keys)

    groups: dict[str, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        if not is_expense(tx):
            continue
        key = transaction_vendor_key(tx.description)
        if key in skip:
            continue
        groups[key].append(tx)

    suggestions: list[BillSuggestion] = []
    for key, members in groups.items():
        if len(members) < 2:
            continue
        total = sum((abs(m.amount) for m in members), Decimal(0))
        newest = max(members, key=lambda m: m.date)
        day_counts = Counter(m.date.day for m in members)
        due_day = min(day_counts, key=lambda day: (-day_counts[day], day))
        suggestions.append(
            BillSuggestion(
                vendor=extract_vendor_name(newest.description),
                vendor_key=key,
                average_amount=(total / len(members)).quantize(
                    Decimal("0.01"), rounding=ROUND_HALF_UP
                ),
                occurrences=len(members),
                last_seen=newest.date,
                suggested_due_day=due_day,
                category=newest.category,
            )
        )
    suggestions.sort(key=lambda s: (-s.occurrences, -s.average_amount, s.vendor_key))
    return suggestions


def bill_from_transaction(tx: Transaction, *, bill_id: str) -> Bill | None:
    """Build a recurring bill mirroring an expense transaction.

    Returns ``None`` for non-expense transactions.
    """

    if not is_expense(tx):
        return None
    return Bill(
        id=bill_id,
        vendor=extract_vendor_name(tx.description) or tx.description,
        amount=abs(tx.amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        due_day=tx.date.day,
        category=tx.category.value,
    )


__all__ = [
    "bill_from_transaction",
    "bills_before_payday",
    "expected_due_date",
    "is_expense",
    "resolve_bills",
    "suggest_bills",
    "unpaid_bills",
]
