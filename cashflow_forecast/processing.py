"""Turn raw export records into canonical, identity-stable transactions.

Steps, in order: parse dates and sort newest first with deterministic
tie-breaks, assign content-derived ids, classify categories, flag recurring
expenses, accumulate running balances oldest to newest, and mark pay-period
impact. The result is rebuilt wholesale on every call; user edits are merged
afterwards with :func:`apply_overrides`.
"""

from __future__ import annotations

import hashlib
import json
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from .business_days import HolidayCalendar, parse_posting_date
from .categories import classify_category
from .logging_setup import get_logger
from .models import Overrides, RawTransactionRecord, Transaction
from .recurring import detect_recurring
from .schedule import determine_pay_period_impact

_logger = get_logger("cashflow_forecast.processing")

# Bump only when the id payload shape changes; doing so detaches stored overrides.
_ID_SEED: str = "cashflow-forecast/tx/v1"
_ID_HEX_CHARS: int = 16


def _amount_2dp(amount: Decimal) -> str:
    return f"{amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def _identity_fields(
    posting_date: date, record: RawTransactionRecord
) -> tuple[str, str, str, str, str | None]:
    return (
        posting_date.isoformat(),
        _amount_2dp(record.amount),
        record.type,
        record.description,
        record.category_hint,
    )


def compute_transaction_id(
    *,
    posting_date: date,
    amount: Decimal,
    type: str,
    description: str,
    category_hint: str | None,
    occurrence: int,
) -> str:
    """Return ``tx_<16 hex>`` from a seeded SHA-256 over the identity fields.

    ``occurrence`` is the 0-based ordinal among records whose other identity
    fields are equal, so exact duplicates still receive distinct ids.
    """

    payload = {
        "seed": _ID_SEED,
        "date": posting_date.isoformat(),
        "amount": _amount_2dp(amount),
        "type": type,
        "description": description,
        "category_hint": category_hint,
        "occurrence": occurrence,
    }
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return "tx_" + hashlib.sha256(data.encode("utf-8")).hexdigest()[:_ID_HEX_CHARS]


def _sorted_with_dates(
    records: Iterable[RawTransactionRecord],
) -> list[tuple[date, RawTransactionRecord]]:
    dated: list[tuple[date, RawTransactionRecord]] = []
    dropped = 0
    for rec in records:
        d = parse_posting_date(rec.posting_date)
        if d is None:
            dropped += 1
            continue
        dated.append((d, rec))
    if dropped:
        _logger.debug("processing:dropped_unparseable_dates count=%d", dropped)

    # Two stable passes: tie-breaks ascending, then date descending.
    dated.sort(
        key=lambda item: (
            item[1].description,
            item[1].amount,
            item[1].type,
            item[1].category_hint or "",
        )
    )
    dated.sort(key=lambda item: item[0], reverse=True)
    return dated


def process_transactions(
    raw: Sequence[RawTransactionRecord],
    starting_balance: Decimal = Decimal(0),
    *,
    holidays: HolidayCalendar | None = None,
) -> list[Transaction]:
    """Return canonical transactions, newest first.

    ``running_balance`` of the oldest transaction is ``starting_balance`` plus
    its amount; each later one adds its own amount to its predecessor's.
    """

    dated = _sorted_with_dates(raw)

    seen: Counter[tuple[str, str, str, str, str | None]] = Counter()
    impact_by_date: dict[date, bool] = {}
    base: list[Transaction] = []
    for d, rec in dated:
        fields = _identity_fields(d, rec)
        occurrence = seen[fields]
        seen[fields] += 1
        if d not in impact_by_date:
            impact_by_date[d] = determine_pay_period_impact(d, holidays)
        base.append(
            Transaction(
                id=compute_transaction_id(
                    posting_date=d,
                    amount=rec.amount,
                    type=rec.type,
                    description=rec.description,
                    category_hint=rec.category_hint,
                    occurrence=occurrence,
                ),
                date=d,
                description=rec.description,
                amount=rec.amount,
                type=rec.type,
                category=classify_category(
                    rec.description, rec.type, rec.amount, rec.category_hint
                ),
                is_recurring=False,
                running_balance=Decimal(0),
                pay_period_impact=impact_by_date[d],
                source_balance=rec.balance,
            )
        )

    recurring = detect_recurring(base)

    balances: list[Decimal] = [Decimal(0)] * len(base)
    balance = Decimal(starting_balance)
    for i in range(len(base) - 1, -1, -1):
        balance += base[i].amount
        balances[i] = balance

    out = [
        replace(tx, is_recurring=recurring[tx.id], running_balance=balances[i])
        for i, tx in enumerate(base)
    ]
    _logger.debug(
        "processing:done transactions=%d recurring=%d",
        len(out),
        sum(1 for tx in out if tx.is_recurring),
    )
    return out


def apply_overrides(
    transactions: Sequence[Transaction], overrides: Overrides
) -> list[Transaction]:
    """Merge a sparse ``{id: TransactionOverride}`` layer onto fresh transactions.

    Returns new objects; inputs are untouched. Ids with no matching
    transaction are ignored.
    """

    out: list[Transaction] = []
    for tx in transactions:
        patch = overrides.get(tx.id)
        if patch is None:
            out.append(tx)
            continue
        changes: dict[str, object] = {}
        if patch.category is not None:
            changes["category"] = patch.category
        if patch.is_recurring is not None:
            changes["is_recurring"] = patch.is_recurring
        out.append(replace(tx, **changes) if changes else tx)
    return out


__all__ = ["apply_overrides", "compute_transaction_id", "process_transactions"]
