"""Calendar arithmetic for the contractual payment schedule.

Business days exclude Saturdays, Sundays, and US bank holidays. Holidays come
from three sources, unioned:

- ``KNOWN_BANK_HOLIDAYS``: the curated literal table (2025-2027).
- :func:`us_bank_holidays`: observed-holiday rules, so years past the curated
  table keep excluding holidays instead of silently treating them as business
  days.
- Caller-supplied extra dates on a :class:`HolidayCalendar`.

Observed rule for fixed-date holidays: Saturday moves to the preceding
Friday, Sunday to the following Monday; an observed date that would leave the
holiday's own year is dropped (New Year's Day on a Saturday is not observed on
December 31).
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from functools import lru_cache

KNOWN_BANK_HOLIDAYS: frozenset[date] = frozenset(
    date.fromisoformat(s)
    for s in (
        # 2025
        "2025-01-01",
        "2025-01-20",
        "2025-02-17",
        "2025-05-26",
        "2025-06-19",
        "2025-07-04",
        "2025-09-01",
        "2025-10-13",
        "2025-11-11",
        "2025-11-27",
        "2025-12-25",
        # 2026
        "2026-01-01",
        "2026-01-19",
        "2026-02-16",
        "2026-05-25",
        "2026-06-19",
        "2026-07-03",  # Independence Day (observed)
        "2026-09-07",
        "2026-10-12",
        "2026-11-11",
        "2026-11-26",
        "2026-12-25",
        # 2027
        "2027-01-01",
        "2027-01-18",
        "2027-02-15",
        "2027-05-31",
        "2027-06-18",  # Juneteenth (observed)
        "2027-07-05",  # Independence Day (observed)
        "2027-09-06",
        "2027-10-11",
        "2027-11-11",
        "2027-11-25",
        "2027-12-24",  # Christmas (observed)
    )
)

# (month, day) holidays that shift to a weekday when they land on a weekend
_FIXED_DATE_HOLIDAYS: tuple[tuple[int, int], ...] = (
    (1, 1),  # New Year's Day
    (6, 19),  # Juneteenth
    (7, 4),  # Independence Day
    (11, 11),  # Veterans Day
    (12, 25),  # Christmas Day
)

# (month, weekday, n) for "nth <weekday> of month"; n == -1 means "last"
_NTH_WEEKDAY_HOLIDAYS: tuple[tuple[int, int, int], ...] = (
    (1, calendar.MONDAY, 3),  # Martin Luther King Jr. Day
    (2, calendar.MONDAY, 3),  # Presidents Day
    (5, calendar.MONDAY, -1),  # Memorial Day
    (9, calendar.MONDAY, 1),  # Labor Day
    (10, calendar.MONDAY, 2),  # Columbus Day
    (11, calendar.THURSDAY, 4),  # Thanksgiving
)


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def clamp_day_of_month(year: int, month: int, day: int) -> date:
    """Return ``date(year, month, day)`` with ``day`` clamped to the month length."""

    last = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(day, last)))


def add_months(year: int, month: int, offset: int) -> tuple[int, int]:
    """Return ``(year, month)`` shifted by ``offset`` months (may be negative)."""

    idx = year * 12 + (month - 1) + offset
    return idx // 12, idx % 12 + 1


def _nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    if n == -1:
        d = last_day_of_month(year, month)
        return d - timedelta(days=(d.weekday() - weekday) % 7)
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


def _observed(d: date) -> date:
    if d.weekday() == calendar.SATURDAY:
        return d - timedelta(days=1)
    if d.weekday() == calendar.SUNDAY:
        return d + timedelta(days=1)
    return d


@lru_cache(maxsize=64)
def us_bank_holidays(year: int) -> frozenset[date]:
    """Return the observed US bank holidays for ``year`` derived from rules."""

    days: set[date] = set()
    for month, day in _FIXED_DATE_HOLIDAYS:
        obs = _observed(date(year, month, day))
        if obs.year == year:
            days.add(obs)
    for month, weekday, n in _NTH_WEEKDAY_HOLIDAYS:
        days.add(_nth_weekday(year, month, weekday, n))
    return frozenset(days)


class HolidayCalendar:
    """Holiday lookup combining the curated table, rules, and extra dates.

    Parameters
    ----------
    extra:
        Additional non-business dates (e.g., a one-off bank closure).
    use_rules:
        When ``False``, only the curated table and ``extra`` are consulted.
    """

    def __init__(self, extra: Iterable[date] = (), *, use_rules: bool = True) -> None:
        self._extra: frozenset[date] = frozenset(extra)
        self._use_rules = use_rules

    def is_holiday(self, d: date) -> bool:
        if d in KNOWN_BANK_HOLIDAYS or d in self._extra:
            return True
        return self._use_rules and d in us_bank_holidays(d.year)


DEFAULT_CALENDAR = HolidayCalendar()


def is_business_day(d: date, holidays: HolidayCalendar | None = None) -> bool:
    if d.weekday() >= calendar.SATURDAY:
        return False
    return not (holidays or DEFAULT_CALENDAR).is_holiday(d)


def get_nth_business_day_after(
    start: date, n: int, holidays: HolidayCalendar | None = None
) -> date:
    """Walk forward from ``start`` (exclusive) until ``n`` business days are counted.

    ``n == 0`` returns ``start`` unchanged.
    """

    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    cal = holidays or DEFAULT_CALENDAR
    current = start
    counted = 0
    while counted < n:
        current += timedelta(days=1)
        if is_business_day(current, cal):
            counted += 1
    return current


# ---------------------------------------------------------------------------
# Posting-date parsing
# ---------------------------------------------------------------------------

_SLASH_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")


def parse_posting_date(raw: str | None) -> date | None:
    """Parse an exported posting date into a ``date``.

    Accepts ``MM/DD/YYYY``, ``M/D/YY`` (two-digit years map to 2000-2099) and
    ISO ``YYYY-MM-DD`` (a trailing time component is ignored). Returns
    ``None`` for anything else.
    """

    if raw is None:
        return None
    s = raw.strip().strip('"')
    if not s:
        return None
    first = s.split()[0]
    m = _SLASH_DATE_RE.match(first)
    try:
        if m:
            month, day, year = (int(g) for g in m.groups())
            if year < 100:
                year += 2000
            return date(year, month, day)
        return datetime.strptime(first.split("T", 1)[0], "%Y-%m-%d").date()
    except ValueError:
        return None


__all__ = [
    "KNOWN_BANK_HOLIDAYS",
    "DEFAULT_CALENDAR",
    "HolidayCalendar",
    "add_months",
    "clamp_day_of_month",
    "get_nth_business_day_after",
    "is_business_day",
    "last_day_of_month",
    "parse_posting_date",
    "us_bank_holidays",
]
