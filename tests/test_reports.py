import csv
import io
from decimal import Decimal

from cashflow_forecast.reports import (
    EXPORT_HEADERS,
    export_to_csv,
    generate_month_summaries,
    unique_months,
)
from tests.helpers.factories import make_tx


def _txs():
    return [
        make_tx("t4", "2026-10-05", "-50.00", "INTERNET", is_recurring=True, running_balance="900"),
        make_tx("t3", "2026-10-01", "1500", "PAYROLL", type="ACH_CREDIT", running_balance="950"),
        make_tx("t2", "2026-09-20", "-12.5", "COFFEE, BEANS & CO", running_balance="-550"),
        make_tx(
            "t1", "2026-09-05", "-50.00", "INTERNET", is_recurring=True, running_balance="-537.5"
        ),
    ]


def test_export_header_and_rows():
    text = export_to_csv(_txs())
    rows = list(csv.reader(io.StringIO(text)))

    assert tuple(rows[0]) == EXPORT_HEADERS
    assert rows[1] == [
        "2026-10-05",
        "INTERNET",
        "-50.00",
        "DEBIT_CARD",
        "Yes",
        "Miscellaneous",
        "No",
        "900.00",
    ]
    assert rows[3][1] == "COFFEE, BEANS & CO"
    assert rows[3][2] == "-12.50"
    assert len(rows) == 5


def test_export_quotes_descriptions_with_commas():
    text = export_to_csv(_txs())
    assert '"COFFEE, BEANS & CO"' in text
    assert text.endswith("\n")


def test_export_of_nothing_is_just_the_header():
    assert export_to_csv([]) == ",".join(EXPORT_HEADERS) + "\n"


def test_unique_months_newest_first():
    assert unique_months(_txs()) == ["2026-10", "2026-09"]
    assert unique_months([]) == []


def test_month_summaries():
    october, september = generate_month_summaries(_txs())

    assert october.month == "2026-10"
    assert october.total_expenses == Decimal("-50.00")
    assert october.total_income == Decimal("1500")
    assert october.recurring_expenses == Decimal("-50.00")
    assert october.ending_balance == Decimal("900")
    assert october.transaction_count == 2
    assert [tx.id for tx in october.recurring_transactions] == ["t4"]

    assert september.total_expenses == Decimal("-62.50")
    assert september.total_income == Decimal(0)
    assert september.ending_balance == Decimal("-550")
