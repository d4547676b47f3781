import textwrap
from decimal import Decimal
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cashflow_forecast.categories import Category
from cashflow_forecast.cli import app
from cashflow_forecast.store import load_state

runner = CliRunner()

BANK = textwrap.dedent(
    """\
    Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #
    DEBIT,10/05/2026,"POS DEBIT INTERNET 10/05",-50.00,DEBIT_CARD,1450.00,,
    CREDIT,10/01/2026,"MARGIN FREIGHT LLC PAYROLL",1500.00,ACH_CREDIT,1500.00,,
    DEBIT,not-a-date,"BROKEN ROW",-1.00,DEBIT_CARD,,,
    """
)


@pytest.fixture
def export_file(tmp_path: Path) -> Path:
    path = tmp_path / "export.csv"
    path.write_text(BANK, encoding="utf-8")
    return path


def test_next_payday():
    result = runner.invoke(app, ["next-payday", "--today", "2026-10-21"])
    assert result.exit_code == 0, result.output
    assert "2026-11-05\tLate Oct\tThrough Oct 31, 2026" in result.output


def test_next_payday_rejects_bad_date():
    result = runner.invoke(app, ["next-payday", "--today", "10/21/2026"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_bill_add_list_remove():
    added = runner.invoke(
        app, ["bill-add", "--vendor", "Phone", "--amount", "80", "--due-day", "20"]
    )
    assert added.exit_code == 0, added.output
    bill_id = added.output.strip()
    assert bill_id.startswith("bill_")

    listed = runner.invoke(app, ["bill-list"])
    assert listed.exit_code == 0
    assert f"{bill_id}\tPhone\t80.00\t20\trecurring\tMiscellaneous\tactive" in listed.output

    assert runner.invoke(app, ["bill-remove", bill_id]).exit_code == 0
    assert load_state().bills == []
    assert runner.invoke(app, ["bill-remove", bill_id]).exit_code == 1


def test_bill_add_rejects_unknown_category():
    result = runner.invoke(
        app,
        ["bill-add", "--vendor", "X", "--amount", "1", "--due-day", "3", "--category", "Snacks"],
    )
    assert result.exit_code == 1
    assert "unknown category" in result.output
    assert load_state().bills == []


def test_transactions_listing(export_file: Path):
    result = runner.invoke(
        app, ["transactions", "--file", str(export_file), "--starting-balance", "0"]
    )
    assert result.exit_code == 0, result.output
    assert "Parsed 2 transactions (1 rows skipped)" in result.output
    assert "2026-10-05\t-50.00\t" in result.output
    assert "1,450.00\tPOS DEBIT INTERNET 10/05" in result.output


def test_export_writes_csv(export_file: Path, tmp_path: Path):
    out = tmp_path / "out.csv"
    result = runner.invoke(app, ["export", "--file", str(export_file), "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8").startswith("Date,Description,Amount")
    assert "Wrote 2 transactions" in result.output


def test_forecast(export_file: Path):
    runner.invoke(app, ["bill-add", "--vendor", "Phone", "--amount", "80", "--due-day", "20"])
    runner.invoke(app, ["bill-add", "--vendor", "Internet", "--amount", "50", "--due-day", "5"])

    result = runner.invoke(
        app,
        ["forecast", "--file", str(export_file), "--balance", "500", "--today", "2026-10-19"],
    )

    assert result.exit_code == 0, result.output
    assert "Payday:\t2026-10-21\tEarly Oct" in result.output
    assert "2026-10-20\tPhone\t80.00\tdue" in result.output
    assert "Internet" not in result.output
    assert "Amount to keep:\t80.00" in result.output
    assert "Safe to spend:\t420.00" in result.output
    assert "Coverage:\t100%" in result.output
    assert "Shortfall" not in result.output


def test_forecast_missing_file(tmp_path: Path):
    missing = tmp_path / "nope.csv"
    result = runner.invoke(app, ["forecast", "--file", str(missing), "--balance", "1"])
    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_commission_add_and_calc():
    added = runner.invoke(app, ["commission-add", "--amount", "1200", "--date", "2026-11-05"])
    assert added.exit_code == 0, added.output
    (commission,) = load_state().commissions
    assert commission.amount == Decimal("1200")

    calc = runner.invoke(
        app, ["commission-calc", "--gross-profit", "60000", "--gross-revenue", "200000"]
    )
    assert calc.exit_code == 0
    assert "Commission rate:\t75%" in calc.output
    assert "Net payout:\t43,000.00" in calc.output


def test_override_merges_and_clears():
    tx_id = "tx_0123456789abcdef"
    assert runner.invoke(app, ["override", tx_id, "--category", "software"]).exit_code == 0
    assert runner.invoke(app, ["override", tx_id, "--not-recurring"]).exit_code == 0

    patch = load_state().overrides[tx_id]
    assert patch.category == Category.SOFTWARE
    assert patch.is_recurring is False

    assert runner.invoke(app, ["override", tx_id]).exit_code == 1
    assert runner.invoke(app, ["override", tx_id, "--clear"]).exit_code == 0
    assert load_state().overrides == {}


GYM_BANK = textwrap.dedent(
    """\
    Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #
    DEBIT,10/10/2026,CITY GYM,-40.00,DEBIT_CARD,,,
    DEBIT,09/10/2026,CITY GYM,-40.00,DEBIT_CARD,,,
    """
)


def test_suggest_dismiss_and_restore(tmp_path: Path):
    path = tmp_path / "gym.csv"
    path.write_text(GYM_BANK, encoding="utf-8")
    suggest = ["suggest-bills", "--file", str(path)]

    shown = runner.invoke(app, suggest)
    assert shown.exit_code == 0, shown.output
    assert "CITY GYM\tCity Gym\t40.00\tx2\tday 10" in shown.output

    assert runner.invoke(app, ["suggest-dismiss", "city  gym"]).exit_code == 0
    assert load_state().ignored_vendor_keys == ["CITY GYM"]
    # Dismissing twice keeps one entry.
    assert runner.invoke(app, ["suggest-dismiss", "CITY GYM"]).exit_code == 0
    assert load_state().ignored_vendor_keys == ["CITY GYM"]
    assert "CITY GYM" not in runner.invoke(app, suggest).output

    restored = runner.invoke(app, ["suggest-restore"])
    assert restored.exit_code == 0
    assert "Restored 1 dismissed vendors" in restored.output
    assert load_state().ignored_vendor_keys == []
    assert "CITY GYM\tCity Gym" in runner.invoke(app, suggest).output


def test_suggest_dismiss_rejects_blank_key():
    result = runner.invoke(app, ["suggest-dismiss", "   "])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_forecast_warns_about_expired_commissions(export_file: Path):
    runner.invoke(app, ["commission-add", "--amount", "300", "--date", "2026-10-01"])

    result = runner.invoke(
        app,
        ["forecast", "--file", str(export_file), "--balance", "500", "--today", "2026-10-19"],
    )

    assert result.exit_code == 0, result.output
    assert "has passed; remove or update it." in result.output
