"""Recurring-expense detection.

Expense transactions are grouped by :func:`transaction_vendor_key`. A group of
two or more is recurring when its amounts cluster around the group mean and
its day gaps follow a cadence:

- the median gap falls inside a known band and at least 70% of all gaps sit
  in that same band, or
- failing a band, the median gap is at least five days and at least 70% of
  gaps fall within 25% of it (``Cadence.IRREGULAR``).
"""

from __future__ import annotations

import statistics
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from .logging_setup import get_logger
from .models import RecurringVendorSummary, Transaction
from .vendors import extract_vendor_name, transaction_vendor_key

_logger = get_logger("cashflow_forecast.recurring")

_AMOUNT_TOLERANCE_RATIO = Decimal("0.20")
_AMOUNT_TOLERANCE_FLOOR = Decimal("15")
_GAP_SHARE_REQUIRED: float = 0.70
_MEDIAN_TOLERANCE_RATIO: float = 0.25
_MIN_FALLBACK_MEDIAN_DAYS: int = 5


class Cadence(StrEnum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    IRREGULAR = "irregular"


# Inclusive day-gap bands, evaluated in order.
CADENCE_BANDS: tuple[tuple[Cadence, int, int], ...] = (
    (Cadence.WEEKLY, 5, 9),
    (Cadence.BIWEEKLY, 12, 16),
    (Cadence.MONTHLY, 25, 35),
    (Cadence.BIMONTHLY, 55, 65),
    (Cadence.QUARTERLY, 85, 100),
    (Cadence.ANNUAL, 350, 380),
)


def amounts_cluster(amounts: Sequence[Decimal]) -> bool:
    """True when every absolute amount is within max(20% of mean, $15) of the mean."""

    if not amounts:
        return False
    values = [abs(a) for a in amounts]
    mean = sum(values, Decimal(0)) / len(values)
    tolerance = max(mean * _AMOUNT_TOLERANCE_RATIO, _AMOUNT_TOLERANCE_FLOOR)
    return all(abs(v - mean) <= tolerance for v in values)


def _share(gaps: Sequence[int], lo: float, hi: float) -> float:
    return sum(1 for g in gaps if lo <= g <= hi) / len(gaps)


def classify_gaps(gaps: Sequence[int]) -> Cadence | None:
    if not gaps:
        return None
    median = statistics.median(gaps)
    for cadence, lo, hi in CADENCE_BANDS:
        if lo <= median <= hi and _share(gaps, lo, hi) >= _GAP_SHARE_REQUIRED:
            return cadence
    if median < _MIN_FALLBACK_MEDIAN_DAYS:
        return None
    spread = median * _MEDIAN_TOLERANCE_RATIO
    if _share(gaps, median - spread, median + spread) >= _GAP_SHARE_REQUIRED:
        return Cadence.IRREGULAR
    return None


def detect_cadence(dates: Sequence[date], amounts: Sequence[Decimal]) -> Cadence | None:
    """Return the cadence of one vendor group, or ``None`` when not recurring."""

    if len(dates) < 2 or not amounts_cluster(amounts):
        return None
    ordered = sorted(dates)
    gaps = [(b - a).days for a, b in zip(ordered, ordered[1:], strict=False)]
    return classify_gaps(gaps)


def _expense_groups(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    groups: dict[str, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        if tx.amount < 0:
            groups[transaction_vendor_key(tx.description)].append(tx)
    return groups


def detect_recurring(transactions: Sequence[Transaction]) -> dict[str, bool]:
    """Map every transaction id to its recurring flag."""

    flags = {tx.id: False for tx in transactions}
    for key, members in _expense_groups(transactions).items():
        if len(members) < 2:
            continue
        cadence = detect_cadence([m.date for m in members], [m.amount for m in members])
        if cadence is None:
            continue
        _logger.debug("recurring:group key=%s members=%d cadence=%s", key, len(members), cadence)
        for m in members:
            flags[m.id] = True
    return flags


def summarize_recurring(transactions: Sequence[Transaction]) -> list[RecurringVendorSummary]:
    """Summarize recurring expenses per vendor, largest average first."""

    groups = _expense_groups(tx for tx in transactions if tx.is_recurring)
    out: list[RecurringVendorSummary] = []
    for key, members in groups.items():
        total = sum((abs(m.amount) for m in members), Decimal(0))
        average = (total / len(members)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        newest = max(members, key=lambda m: m.date)
        cadence = detect_cadence([m.date for m in members], [m.amount for m in members])
        out.append(
            RecurringVendorSummary(
                vendor_key=key,
                label=extract_vendor_name(newest.description),
                count=len(members),
                total=total,
                average=average,
                cadence=cadence.value if cadence is not None else None,
            )
        )
    out.sort(key=lambda s: (-s.average, s.vendor_key))
    return out


__all__ = [
    "CADENCE_BANDS",
    "Cadence",
    "amounts_cluster",
    "classify_gaps",
    "detect_cadence",
    "detect_recurring",
    "summarize_recurring",
]
