from datetime import date
from decimal import Decimal

import pytest

from cashflow_forecast.commissions import (
    calculate_commission,
    commission_rate,
    commission_status,
    cutoff_description,
)
from cashflow_forecast.models import PaymentPeriod, PendingCommission


@pytest.mark.parametrize(
    ("gross_profit", "rate"),
    [
        ("0", "0.70"),
        ("50000", "0.70"),
        ("50000.01", "0.75"),
        ("120000", "0.75"),
    ],
)
def test_commission_rate_tiers(gross_profit: str, rate: str):
    assert commission_rate(Decimal(gross_profit)) == Decimal(rate)


def test_calculate_commission_breakdown():
    b = calculate_commission(Decimal("60000"), Decimal("200000"))

    assert b.commission_rate == Decimal("0.75")
    assert b.raw_commission == Decimal("45000")
    assert b.bad_debt_reserve == Decimal("2000")
    assert b.bad_debt_reserve_rate == Decimal("0.01")
    assert b.net_payout == Decimal("43000")


def test_net_payout_floors_at_zero():
    b = calculate_commission(Decimal("1000"), Decimal("500000"))
    assert b.raw_commission == Decimal("700")
    assert b.net_payout == Decimal(0)


def test_commission_status_splits_and_orders():
    today = date(2026, 10, 19)
    items = [
        PendingCommission(id="b", amount=Decimal("2"), expected_date=date(2026, 11, 5)),
        PendingCommission(id="x", amount=Decimal("9"), expected_date=date(2026, 10, 18)),
        PendingCommission(id="a", amount=Decimal("1"), expected_date=date(2026, 10, 19)),
        PendingCommission(id="c", amount=Decimal("3"), expected_date=date(2026, 11, 5)),
    ]

    status = commission_status(items, today)

    assert [c.id for c in status.upcoming] == ["a", "b", "c"]
    assert [c.id for c in status.expired] == ["x"]
    assert status.has_expired
    assert status.next_commission is not None and status.next_commission.id == "a"
    empty = commission_status([], today)
    assert empty.next_commission is None
    assert not empty.has_expired


def test_cutoff_description():
    period = PaymentPeriod(
        cutoff_date=date(2026, 10, 15),
        payment_date=date(2026, 10, 21),
        period_label="Early Oct",
    )
    assert cutoff_description(period) == "Through Oct 15, 2026"
