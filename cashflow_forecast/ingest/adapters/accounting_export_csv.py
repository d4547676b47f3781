"""Adapter for accounting "Transaction List by Date" exports.

Header (as exported, usually preceded by a report title and date range)::

    Date,Transaction type,Num,Posting,Name,Memo/Description,Account name,Account full name,Amount

Amounts are quoted with thousands separators (``"-1,234.56"``). The export has
no running balance, so ``balance`` is ``None``. The type label is derived from
the sign: positive deposits become ``ACH_CREDIT``, other positive rows
``CREDIT``, negative rows ``DEBIT``. ``Account name`` (the chart-of-accounts
line, e.g. ``Office supplies`` or ``Owner's Investment``) is the category
hint.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from ...models import RawTransactionRecord
from ..fields import cell, date_and_amount, header_index, is_blank

FORMAT_NAME = "accounting"


def matches_header(line: str) -> bool:
    s = line.strip().lower()
    return "transaction type" in s and "account name" in s


def _type_label(transaction_type: str, amount: Decimal) -> str:
    if amount > 0:
        return "ACH_CREDIT" if "deposit" in transaction_type.lower() else "CREDIT"
    return "DEBIT"


def to_raw_records(rows: Sequence[Sequence[str]]) -> tuple[list[RawTransactionRecord], int]:
    """Convert tokenized rows (header first) into raw records.

    Report footers (``TOTAL``, blank-amount subtotal rows) have no date or no
    amount and are counted as skipped.
    """

    if not rows:
        return [], 0
    idx = header_index(rows[0])
    records: list[RawTransactionRecord] = []
    skipped = 0

    for row in rows[1:]:
        if is_blank(row):
            continue
        parsed = date_and_amount(row, idx, "date")
        if parsed is None:
            skipped += 1
            continue
        posting_date, amount = parsed

        transaction_type = cell(row, idx, "transaction type") or ""
        description = (
            cell(row, idx, "memo/description", "memo", "description")
            or cell(row, idx, "name")
            or transaction_type
        )

        records.append(
            RawTransactionRecord(
                description=description,
                posting_date=posting_date,
                amount=amount,
                type=_type_label(transaction_type, amount),
                balance=None,
                category_hint=cell(row, idx, "account name", "account full name"),
                details=transaction_type or None,
            )
        )

    return records, skipped


__all__ = ["FORMAT_NAME", "matches_header", "to_raw_records"]
