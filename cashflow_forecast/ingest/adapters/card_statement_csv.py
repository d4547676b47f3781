"""Adapter for credit-card statement exports.

Header (as exported)::

    Transaction Date,Post Date,Description,Category,Type,Amount,Memo

Purchases are already negative and payments/returns positive. The card's own
``Category`` column travels as the category hint so the keyword table can map
labels such as ``Gas`` or ``Travel`` before looking at the description.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...models import RawTransactionRecord
from ..fields import cell, date_and_amount, header_index, is_blank

FORMAT_NAME = "card"


def matches_header(line: str) -> bool:
    s = line.strip().lower().replace('"', "")
    return "transaction date" in s and "post date" in s and "amount" in s


def to_raw_records(rows: Sequence[Sequence[str]]) -> tuple[list[RawTransactionRecord], int]:
    """Convert tokenized rows (header first) into raw records.

    The posting date prefers ``Post Date`` and falls back to
    ``Transaction Date``.
    """

    if not rows:
        return [], 0
    idx = header_index(rows[0])
    records: list[RawTransactionRecord] = []
    skipped = 0

    for row in rows[1:]:
        if is_blank(row):
            continue
        parsed = date_and_amount(row, idx, "post date", "transaction date")
        if parsed is None:
            skipped += 1
            continue
        posting_date, amount = parsed

        records.append(
            RawTransactionRecord(
                description=cell(row, idx, "description") or "",
                posting_date=posting_date,
                amount=amount,
                type=cell(row, idx, "type") or "",
                balance=None,
                category_hint=cell(row, idx, "category"),
                details=cell(row, idx, "memo"),
            )
        )

    return records, skipped


__all__ = ["FORMAT_NAME", "matches_header", "to_raw_records"]
