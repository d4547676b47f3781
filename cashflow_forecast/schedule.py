"""Contractual payment schedule.

Cutoffs fall on the 15th and on the last calendar day of each month. Each
cutoff is paid on the 4th business day after it. "Next scheduled payment"
always returns a payment strictly after the reference day: when the reference
day is itself a payment date the result bridges to the following payment,
which payday-window logic downstream relies on.
"""

from __future__ import annotations

from datetime import date

from .business_days import (
    HolidayCalendar,
    add_months,
    get_nth_business_day_after,
    last_day_of_month,
)
from .models import PaymentPeriod

_MID_MONTH_CUTOFF_DAY: int = 15
_PAYMENT_BUSINESS_DAYS: int = 4
# Current month plus the following two; always contains a future payment.
_LOOKAHEAD_MONTHS: int = 2


def get_contract_pay_periods(
    year: int, month: int, holidays: HolidayCalendar | None = None
) -> list[PaymentPeriod]:
    """Return the two pay periods (mid-month, end-of-month) for ``year``/``month``."""

    mon = date(year, month, 1).strftime("%b")
    first_cutoff = date(year, month, _MID_MONTH_CUTOFF_DAY)
    last_cutoff = last_day_of_month(year, month)
    return [
        PaymentPeriod(
            cutoff_date=first_cutoff,
            payment_date=get_nth_business_day_after(
                first_cutoff, _PAYMENT_BUSINESS_DAYS, holidays
            ),
            period_label=f"Early {mon}",
        ),
        PaymentPeriod(
            cutoff_date=last_cutoff,
            payment_date=get_nth_business_day_after(
                last_cutoff, _PAYMENT_BUSINESS_DAYS, holidays
            ),
            period_label=f"Late {mon}",
        ),
    ]


def get_next_scheduled_payment(
    today: date, holidays: HolidayCalendar | None = None
) -> PaymentPeriod:
    """Return the first pay period whose payment date is strictly after ``today``."""

    for offset in range(_LOOKAHEAD_MONTHS + 1):
        year, month = add_months(today.year, today.month, offset)
        for period in get_contract_pay_periods(year, month, holidays):
            if period.payment_date > today:
                return period
    raise RuntimeError(
        f"no scheduled payment within {_LOOKAHEAD_MONTHS} months of {today.isoformat()}"
    )


def get_next_scheduled_payment_date(
    today: date, holidays: HolidayCalendar | None = None
) -> date:
    return get_next_scheduled_payment(today, holidays).payment_date


def is_payment_date(d: date, holidays: HolidayCalendar | None = None) -> bool:
    """True when ``d`` is the payment date of a cutoff in its own or the previous month."""

    for offset in (0, -1):
        year, month = add_months(d.year, d.month, offset)
        if any(p.payment_date == d for p in get_contract_pay_periods(year, month, holidays)):
            return True
    return False


def _following_cutoff(cutoff: date) -> date:
    if cutoff.day == _MID_MONTH_CUTOFF_DAY:
        return last_day_of_month(cutoff.year, cutoff.month)
    year, month = add_months(cutoff.year, cutoff.month, 1)
    return date(year, month, _MID_MONTH_CUTOFF_DAY)


def determine_pay_period_impact(d: date, holidays: HolidayCalendar | None = None) -> bool:
    """True when ``d`` falls between a payment's arrival and the next cutoff.

    The most recent payment on or before ``d`` is found among the previous and
    current month's periods; ``d`` impacts the pay period when it is strictly
    before the cutoff that follows that payment's own cutoff.
    """

    latest: PaymentPeriod | None = None
    for offset in (-1, 0):
        year, month = add_months(d.year, d.month, offset)
        for period in get_contract_pay_periods(year, month, holidays):
            if period.payment_date <= d and (
                latest is None or period.payment_date > latest.payment_date
            ):
                latest = period
    if latest is None:
        return False
    return d < _following_cutoff(latest.cutoff_date)


__all__ = [
    "determine_pay_period_impact",
    "get_contract_pay_periods",
    "get_next_scheduled_payment",
    "get_next_scheduled_payment_date",
    "is_payment_date",
]
