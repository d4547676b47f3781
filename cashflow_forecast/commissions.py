"""Pending-commission bookkeeping and the contract's payout formula."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from .models import CommissionBreakdown, CommissionStatus, PaymentPeriod, PendingCommission

# Contract terms
_GP_THRESHOLD = Decimal("50000")
_LOW_TIER_RATE = Decimal("0.70")
_HIGH_TIER_RATE = Decimal("0.75")
_BAD_DEBT_RATE = Decimal("0.01")


def commission_status(commissions: Sequence[PendingCommission], today: date) -> CommissionStatus:
    """Split commissions into upcoming (today or later) and expired.

    ``upcoming`` is ordered by expected date (input order among equal dates);
    its first entry is the next commission.
    """

    upcoming = [c for c in commissions if c.expected_date >= today]
    expired = [c for c in commissions if c.expected_date < today]
    upcoming.sort(key=lambda c: c.expected_date)
    return CommissionStatus(
        upcoming=upcoming,
        expired=expired,
        next_commission=upcoming[0] if upcoming else None,
    )


def commission_rate(gross_profit: Decimal) -> Decimal:
    """70% up to and including the gross-profit threshold, 75% above it."""

    return _LOW_TIER_RATE if gross_profit <= _GP_THRESHOLD else _HIGH_TIER_RATE


def calculate_commission(gross_profit: Decimal, gross_revenue: Decimal) -> CommissionBreakdown:
    """Net payout is the tiered commission less a 1% bad-debt reserve, floored at 0."""

    rate = commission_rate(gross_profit)
    raw = gross_profit * rate
    reserve = gross_revenue * _BAD_DEBT_RATE
    return CommissionBreakdown(
        gross_profit=gross_profit,
        gross_revenue=gross_revenue,
        commission_rate=rate,
        raw_commission=raw,
        bad_debt_reserve=reserve,
        bad_debt_reserve_rate=_BAD_DEBT_RATE,
        net_payout=max(Decimal(0), raw - reserve),
    )


def cutoff_description(period: PaymentPeriod) -> str:
    """Label for a commission earned through ``period``'s cutoff, e.g. ``Through Oct 15, 2026``."""

    d = period.cutoff_date
    return f"Through {d.strftime('%b')} {d.day}, {d.year}"


__all__ = [
    "calculate_commission",
    "commission_rate",
    "commission_status",
    "cutoff_description",
]
