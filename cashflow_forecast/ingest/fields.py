"""Cell-level helpers shared by the export adapters.

Tokenizing runs the stdlib :mod:`csv` reader over one physical line at a
time. It is quote-aware: a quoted field containing the delimiter
(``"1,234.56"``) or a doubled quote stays one cell.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Sequence
from decimal import Decimal, InvalidOperation

from ..business_days import parse_posting_date
from ..logging_setup import get_logger

_logger = get_logger("cashflow_forecast.ingest")


def to_decimal(raw: str | None) -> Decimal:
    """Parse an exported amount string into a signed ``Decimal``.

    Handles surrounding quotes, a leading ``+``/``-``, a ``$`` symbol,
    accounting-style parentheses for negatives, and thousands separators, in
    any order (``"-$1,234.56"``, ``"($45.00)"``). Raises ``ValueError`` when
    the value is empty or not numeric.
    """

    if raw is None:
        raise ValueError("amount is required")
    s = raw.strip().strip('"').strip()
    if not s:
        raise ValueError("amount is empty")
    negative = False

    while True:
        changed = False
        if s.startswith("+"):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if not changed:
            break

    s = s.replace(",", "").strip()
    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    return -abs(d) if negative else d


def split_csv_line(line: str) -> list[str]:
    """Tokenize a single delimited line, honoring double quotes."""

    return next(csv.reader([line]), [])


def _quote_open(text: str) -> bool:
    return text.count('"') % 2 == 1


def _looks_like_row(line: str, width: int | None) -> bool:
    if width is None or _quote_open(line):
        return False
    return len(split_csv_line(line)) >= width


def _tokenize(chunk: list[str]) -> list[str]:
    try:
        row = next(csv.reader(chunk), [])
    except csv.Error:
        _logger.warning("ingest:row_unreadable lines=%d", len(chunk), exc_info=True)
        # Kept as one opaque cell so the adapter counts it as skipped.
        return ["".join(chunk).strip()]
    return [c.strip() for c in row]


def read_rows(lines: Iterable[str]) -> list[list[str]]:
    """Tokenize section lines (header first) into stripped cells.

    Each physical line is its own row. A line that leaves a quote open is
    joined with the following lines until the quote closes, so a memo with an
    embedded line break stays one cell. A following line that is itself a
    complete row (quotes balanced, at least as many cells as the header) is
    never absorbed: the unterminated line is tokenized alone and the adapter
    skips it.
    """

    rows: list[list[str]] = []
    width: int | None = None
    pending: list[str] = []

    for line in lines:
        if pending:
            if not _looks_like_row(line, width):
                pending.append(line)
                if not _quote_open("".join(pending)):
                    rows.append(_tokenize(pending))
                    pending = []
                continue
            rows.append(_tokenize(pending))
            pending = []
        if _quote_open(line):
            pending = [line]
            continue
        rows.append(_tokenize([line]))
        if width is None:
            width = len(rows[-1])

    if pending:
        rows.append(_tokenize(pending))
    return rows


def header_index(header: Sequence[str]) -> dict[str, int]:
    """Map lower-cased header names to their column positions (first wins)."""

    index: dict[str, int] = {}
    for pos, name in enumerate(header):
        index.setdefault(name.strip().strip('"').lower(), pos)
    return index


def cell(row: Sequence[str], index: dict[str, int], *names: str) -> str | None:
    """Return the first non-empty cell among ``names`` (header names, lower-case)."""

    for name in names:
        pos = index.get(name)
        if pos is None or pos >= len(row):
            continue
        value = row[pos].strip()
        if value:
            return value
    return None


def is_blank(row: Sequence[str]) -> bool:
    return all(not c.strip() for c in row)


def date_and_amount(
    row: Sequence[str], index: dict[str, int], *date_names: str
) -> tuple[str, Decimal] | None:
    """Return the posting date string and signed amount of a data row.

    ``None`` when the date is missing or unparseable, or the amount is
    missing, non-numeric or zero. Adapters count such rows as skipped.
    """

    posting_date = cell(row, index, *date_names)
    raw_amount = cell(row, index, "amount")
    if posting_date is None or raw_amount is None or parse_posting_date(posting_date) is None:
        return None
    try:
        amount = to_decimal(raw_amount)
    except ValueError:
        return None
    if amount == 0:
        return None
    return posting_date, amount


__all__ = [
    "cell",
    "date_and_amount",
    "header_index",
    "is_blank",
    "read_rows",
    "split_csv_line",
    "to_decimal",
]
