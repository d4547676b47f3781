"""Next payday, and the reserve / safe-to-spend projection for the bill window.

Every function takes the reference day explicitly; only :func:`build_forecast`
falls back to the local clock, and only when the caller passes nothing.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from .bills import bills_before_payday, resolve_bills
from .business_days import HolidayCalendar
from .commissions import commission_status
from .logging_setup import get_logger
from .models import (
    Bill,
    BillWithStatus,
    CashFlowForecast,
    FinancialProjection,
    PaydayInfo,
    PendingCommission,
    Transaction,
)
from .schedule import get_next_scheduled_payment

_logger = get_logger("cashflow_forecast.projection")

_COMMISSION_LABEL = "Expected Commission"


def next_payday(
    next_commission: PendingCommission | None,
    today: date,
    holidays: HolidayCalendar | None = None,
) -> PaydayInfo:
    """Return the payday that closes the bill window.

    A commission expected today is already money in hand, so the window
    bridges to the next scheduled payment. A future commission date is used
    as-is. Past or missing commissions fall back to the schedule.
    """

    scheduled = get_next_scheduled_payment(today, holidays)
    if next_commission is not None and next_commission.expected_date > today:
        return PaydayInfo(
            payday_date=next_commission.expected_date,
            is_from_commission=True,
            period_label=_COMMISSION_LABEL,
        )
    return PaydayInfo(
        payday_date=scheduled.payment_date,
        is_from_commission=False,
        period_label=scheduled.period_label,
    )


def compute_projection(
    bills_in_window: Sequence[BillWithStatus],
    current_balance: Decimal,
    next_commission: PendingCommission | None,
    *,
    today: date,
) -> FinancialProjection:
    """Reserve and spending figures over the bills due before payday.

    Resolved bills are presumed paid and left out of ``amount_to_keep``. A
    commission expected today is folded into liquidity and not counted again
    in the projected balance.
    """

    unresolved = [b for b in bills_in_window if not b.is_resolved]
    resolved_count = len(bills_in_window) - len(unresolved)
    amount_to_keep = sum((b.bill.amount for b in unresolved), Decimal(0))

    commission_amount = next_commission.amount if next_commission is not None else Decimal(0)
    applied_today = next_commission is not None and next_commission.expected_date == today

    liquidity = current_balance + (commission_amount if applied_today else Decimal(0))
    safe_to_spend = liquidity - amount_to_keep
    commission_for_projection = Decimal(0) if applied_today else commission_amount
    shortfall = max(Decimal(0), amount_to_keep - liquidity)

    if amount_to_keep <= 0 or liquidity >= amount_to_keep:
        coverage = 100
    elif liquidity <= 0:
        coverage = 0
    else:
        coverage = int(
            (Decimal(100) * liquidity / amount_to_keep).quantize(
                Decimal(1), rounding=ROUND_HALF_UP
            )
        )

    return FinancialProjection(
        amount_to_keep=amount_to_keep,
        liquidity_balance=liquidity,
        safe_to_spend=safe_to_spend,
        projected_balance=safe_to_spend + commission_for_projection,
        commission_for_projection=commission_for_projection,
        commission_applied_today=applied_today,
        resolved_count=resolved_count,
        pending_count=len(unresolved),
        coverage_percent=coverage,
        is_short=shortfall > 0,
        shortfall=shortfall,
    )


def build_forecast(
    bills: Sequence[Bill],
    transactions: Sequence[Transaction],
    current_balance: Decimal,
    commissions: Sequence[PendingCommission] = (),
    *,
    today: date | None = None,
    holidays: HolidayCalendar | None = None,
) -> CashFlowForecast:
    """Compose commission status, payday, bill resolution and projection for one day."""

    if today is None:
        today = date.today()

    status = commission_status(commissions, today)
    payday = next_payday(status.next_commission, today, holidays)
    resolutions = resolve_bills(bills, transactions, today=today)
    window = bills_before_payday(
        bills, transactions, payday.payday_date, today=today, resolutions=resolutions
    )
    projection = compute_projection(window, current_balance, status.next_commission, today=today)
    _logger.debug(
        "forecast:computed today=%s payday=%s window_bills=%d keep=%s",
        today.isoformat(),
        payday.payday_date.isoformat(),
        len(window),
        projection.amount_to_keep,
    )
    return CashFlowForecast(
        today=today,
        payday=payday,
        next_commission=status.next_commission,
        resolutions=resolutions,
        bills_before_payday=window,
        projection=projection,
    )


__all__ = ["build_forecast", "compute_projection", "next_payday"]
