"""Adapter for checking-account statement exports.

Header (as exported)::

    Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #

``Details`` is the coarse direction (DEBIT/CREDIT/CHECK/DSLIP), ``Type`` the
finer label (ACH_DEBIT, DEBIT_CARD, ACCT_XFER, ...). ``Balance`` is the
bank's own running balance and may be blank. Data rows often carry a trailing
empty cell; columns are looked up by header name so that is harmless.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...models import RawTransactionRecord
from ..fields import cell, date_and_amount, header_index, is_blank, to_decimal

FORMAT_NAME = "bank"


def matches_header(line: str) -> bool:
    s = line.strip().lower().replace('"', "")
    return s.startswith("details,") and "posting date" in s


def to_raw_records(rows: Sequence[Sequence[str]]) -> tuple[list[RawTransactionRecord], int]:
    """Convert tokenized rows (header first) into raw records.

    Returns ``(records, skipped)`` where ``skipped`` counts non-blank rows
    dropped for a missing/unparseable date, a non-numeric amount, or a zero
    amount.
    """

    if not rows:
        return [], 0
    idx = header_index(rows[0])
    records: list[RawTransactionRecord] = []
    skipped = 0

    for row in rows[1:]:
        if is_blank(row):
            continue
        parsed = date_and_amount(row, idx, "posting date")
        if parsed is None:
            skipped += 1
            continue
        posting_date, amount = parsed

        balance = None
        raw_balance = cell(row, idx, "balance")
        if raw_balance is not None:
            try:
                balance = to_decimal(raw_balance)
            except ValueError:
                balance = None

        records.append(
            RawTransactionRecord(
                description=cell(row, idx, "description") or "",
                posting_date=posting_date,
                amount=amount,
                type=cell(row, idx, "type") or "",
                balance=balance,
                category_hint=None,
                details=cell(row, idx, "details"),
            )
        )

    return records, skipped


__all__ = ["FORMAT_NAME", "matches_header", "to_raw_records"]
