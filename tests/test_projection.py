from datetime import date
from decimal import Decimal

from cashflow_forecast.models import PendingCommission
from cashflow_forecast.projection import build_forecast, compute_projection, next_payday
from tests.helpers.factories import in_window, make_bill, make_tx


def _commission(amount: str, on: str) -> PendingCommission:
    return PendingCommission(id="c1", amount=Decimal(amount), expected_date=date.fromisoformat(on))


def test_shortfall_when_balance_cannot_cover_bills():
    today = date(2026, 10, 19)
    window = [
        in_window(make_bill("a", "Rent", "200", 20), "2026-10-20"),
        in_window(make_bill("b", "Phone", "150", 25), "2026-10-25"),
    ]

    p = compute_projection(window, Decimal("200"), None, today=today)

    assert p.amount_to_keep == Decimal("350")
    assert p.safe_to_spend == Decimal("-150")
    assert p.is_short
    assert p.shortfall == Decimal("150")
    assert p.coverage_percent == 57
    assert p.pending_count == 2
    assert p.resolved_count == 0


def test_commission_expected_today_counts_as_liquidity_once():
    today = date(2026, 10, 21)
    window = [in_window(make_bill("a", "Rent", "600", 25), "2026-10-25")]

    p = compute_projection(window, Decimal("100"), _commission("1000", "2026-10-21"), today=today)

    assert p.commission_applied_today
    assert p.liquidity_balance == Decimal("1100")
    assert p.commission_for_projection == Decimal(0)
    assert p.safe_to_spend == Decimal("500")
    assert p.projected_balance == Decimal("500")
    assert p.coverage_percent == 100
    assert not p.is_short


def test_future_commission_only_lifts_projected_balance():
    today = date(2026, 10, 19)
    window = [in_window(make_bill("a", "Rent", "600", 25), "2026-10-25")]

    p = compute_projection(window, Decimal("100"), _commission("1000", "2026-10-30"), today=today)

    assert not p.commission_applied_today
    assert p.liquidity_balance == Decimal("100")
    assert p.safe_to_spend == Decimal("-500")
    assert p.projected_balance == Decimal("500")
    assert p.shortfall == Decimal("500")
    assert p.coverage_percent == 17


def test_resolved_bills_are_not_reserved_and_coverage_bounds():
    today = date(2026, 10, 19)
    window = [
        in_window(make_bill("a", "Rent", "600", 25), "2026-10-25", resolved=True),
    ]

    p = compute_projection(window, Decimal("-20"), None, today=today)
    assert p.amount_to_keep == Decimal(0)
    assert p.coverage_percent == 100
    assert p.resolved_count == 1
    assert not p.is_short

    pending = [in_window(make_bill("b", "Phone", "80", 25), "2026-10-25")]
    assert compute_projection(pending, Decimal("-20"), None, today=today).coverage_percent == 0
    assert compute_projection(pending, Decimal("0"), None, today=today).coverage_percent == 0
    assert compute_projection(pending, Decimal("79.99"), None, today=today).coverage_percent == 100


def test_next_payday_bridges_commission_paid_today():
    today = date(2026, 10, 21)

    info = next_payday(_commission("1000", "2026-10-21"), today)

    assert info.payday_date == date(2026, 11, 5)
    assert not info.is_from_commission
    assert info.period_label == "Late Oct"


def test_next_payday_uses_future_commission_and_ignores_past_ones():
    today = date(2026, 10, 19)

    future = next_payday(_commission("1000", "2026-10-30"), today)
    assert future.payday_date == date(2026, 10, 30)
    assert future.is_from_commission
    assert future.period_label == "Expected Commission"

    past = next_payday(_commission("1000", "2026-10-01"), today)
    assert past.payday_date == date(2026, 10, 21)
    assert not past.is_from_commission

    assert next_payday(None, today).payday_date == date(2026, 10, 21)


def test_build_forecast_resolves_paid_internet_bill():
    today = date(2026, 10, 3)
    bills = [make_bill("b1", "Internet", "50", 5), make_bill("b2", "Phone", "80", 6)]
    txs = [make_tx("t1", "2026-10-02", "-50.00", "POS DEBIT INTERNET 10/02")]

    fc = build_forecast(bills, txs, Decimal("500"), today=today)

    assert fc.today == today
    # Only the current and later months are scanned, so Late Sep (Oct 6) is not a candidate.
    assert fc.payday.payday_date == date(2026, 10, 21)
    assert fc.payday.period_label == "Early Oct"
    assert fc.resolutions["b1"].is_resolved
    assert not fc.resolutions["b2"].is_resolved
    assert [(w.bill.id, w.is_resolved) for w in fc.bills_before_payday] == [
        ("b1", True),
        ("b2", False),
    ]
    assert fc.projection.amount_to_keep == Decimal("80")
    assert fc.projection.safe_to_spend == Decimal("420")
    assert fc.next_commission is None


def test_build_forecast_picks_earliest_upcoming_commission():
    today = date(2026, 10, 19)
    commissions = [
        PendingCommission(id="late", amount=Decimal("900"), expected_date=date(2026, 11, 1)),
        PendingCommission(id="old", amount=Decimal("100"), expected_date=date(2026, 10, 1)),
        PendingCommission(id="soon", amount=Decimal("400"), expected_date=date(2026, 10, 28)),
    ]

    fc = build_forecast([], [], Decimal("0"), commissions, today=today)

    assert fc.next_commission is not None and fc.next_commission.id == "soon"
    assert fc.payday.payday_date == date(2026, 10, 28)
    assert fc.projection.projected_balance == Decimal("400")
