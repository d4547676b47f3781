"""CLI for the ``cashflow_forecast`` package.

This module exposes callable command handlers (``cmd_*``, each returning a
process exit code) and a Typer-based console interface over them.
Environment variables (``CASHFLOW_STATE_DIR``, ``CASHFLOW_FORECAST_LOG_LEVEL``)
are loaded from a local ``.env`` using ``python-dotenv`` before any command
runs. Business logic lives in the library modules; this is the only place
that reads the clock, touches the state file, or prints.
"""

from __future__ import annotations

import sys
import uuid
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .bills import suggest_bills
from .categories import Category
from .commissions import calculate_commission, commission_status, cutoff_description
from .ingest import load_export_file
from .ingest.fields import to_decimal
from .logging_setup import configure_logging
from .models import Bill, PendingCommission, Transaction, TransactionOverride
from .processing import apply_overrides, process_transactions
from .projection import build_forecast
from .reports import export_to_csv, month_key
from .schedule import get_next_scheduled_payment
from .store import AppState, load_state, save_state

# ---- Small module-level helpers used by CLI commands -------------------------


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _parse_today(raw: str | None) -> date:
    """Resolve ``--today``; the local clock is read here and nowhere else."""

    if raw is None or not raw.strip():
        return date.today()
    try:
        return date.fromisoformat(raw.strip())
    except ValueError as e:
        raise ValueError(f"invalid date {raw!r}; expected YYYY-MM-DD") from e


def _parse_money(raw: str, *, what: str) -> Decimal:
    try:
        return to_decimal(raw)
    except ValueError as e:
        raise ValueError(f"invalid {what}: {raw!r}") from e


def _parse_category(raw: str) -> Category:
    s = raw.strip()
    for cat in Category:
        if s.lower() in (cat.value.lower(), cat.name.lower()):
            return cat
    choices = ", ".join(c.value for c in Category)
    raise ValueError(f"unknown category {raw!r}; choose one of: {choices}")


def _fmt(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def _load_transactions(
    path: Path, starting_balance: Decimal, state: AppState
) -> list[Transaction]:
    result = load_export_file(path)
    print(
        f"Parsed {len(result.records)} transactions ({result.skipped_rows} rows skipped)",
        file=sys.stderr,
    )
    transactions = process_transactions(result.records, starting_balance)
    return apply_overrides(transactions, state.overrides)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


# ---- Command handlers --------------------------------------------------------


def cmd_transactions(
    csv_path: Path, *, starting_balance: str | None = None, month: str | None = None
) -> int:
    """Print processed transactions, newest first, one tab-separated line each.

    Columns: id, date, amount, category, recurring flag (``R`` or empty),
    running balance, description.
    """

    try:
        state = load_state()
        balance = (
            _parse_money(starting_balance, what="starting balance")
            if starting_balance is not None
            else state.starting_balance
        )
        transactions = _load_transactions(csv_path, balance, state)
    except FileNotFoundError:
        return _error(f"File not found: {csv_path}")
    except PermissionError:
        return _error(f"Permission denied: {csv_path}")
    except (ValueError, ValidationError) as e:
        return _error(str(e))

    for tx in transactions:
        if month and month_key(tx) != month:
            continue
        print(
            "\t".join(
                [
                    tx.id,
                    tx.date.isoformat(),
                    _fmt(tx.amount),
                    tx.category.value,
                    "R" if tx.is_recurring else "",
                    _fmt(tx.running_balance),
                    tx.description,
                ]
            )
        )
    return 0


def cmd_export(csv_path: Path, out_path: Path, *, starting_balance: str | None = None) -> int:
    try:
        state = load_state()
        balance = (
            _parse_money(starting_balance, what="starting balance")
            if starting_balance is not None
            else state.starting_balance
        )
        transactions = _load_transactions(csv_path, balance, state)
        out_path.write_text(export_to_csv(transactions), encoding="utf-8")
    except FileNotFoundError as e:
        return _error(f"File not found: {e.filename or csv_path}")
    except PermissionError as e:
        return _error(f"Permission denied: {e.filename or csv_path}")
    except (ValueError, ValidationError) as e:
        return _error(str(e))

    print(f"Wrote {len(transactions)} transactions to {out_path}")
    return 0


def cmd_next_payday(*, today: str | None = None) -> int:
    try:
        ref = _parse_today(today)
    except ValueError as e:
        return _error(str(e))
    period = get_next_scheduled_payment(ref)
    print(f"{period.payment_date.isoformat()}\t{period.period_label}\t{cutoff_description(period)}")
    return 0


def cmd_forecast(csv_path: Path, *, balance: str, today: str | None = None) -> int:
    """Print payday, the bills due before it, and the reserve projection."""

    try:
        ref = _parse_today(today)
        current = _parse_money(balance, what="balance")
        state = load_state()
        transactions = _load_transactions(csv_path, state.starting_balance, state)
    except FileNotFoundError:
        return _error(f"File not found: {csv_path}")
    except PermissionError:
        return _error(f"Permission denied: {csv_path}")
    except (ValueError, ValidationError) as e:
        return _error(str(e))

    status = commission_status(state.commissions, ref)
    if status.has_expired:
        for expired in status.expired:
            print(
                f"Warning: commission {expired.id} expected {expired.expected_date.isoformat()} "
                "has passed; remove or update it.",
                file=sys.stderr,
            )

    forecast = build_forecast(
        state.bills, transactions, current, state.commissions, today=ref
    )
    p = forecast.projection
    print(f"Payday:\t{forecast.payday.payday_date.isoformat()}\t{forecast.payday.period_label}")
    for item in forecast.bills_before_payday:
        flag = "paid" if item.is_resolved else "due"
        print(
            f"  {item.expected_date.isoformat()}\t{item.bill.vendor}\t"
            f"{_fmt(item.bill.amount)}\t{flag}"
        )
    print(f"Amount to keep:\t{_fmt(p.amount_to_keep)}")
    print(f"Liquidity:\t{_fmt(p.liquidity_balance)}")
    print(f"Safe to spend:\t{_fmt(p.safe_to_spend)}")
    print(f"Projected:\t{_fmt(p.projected_balance)}")
    print(f"Coverage:\t{p.coverage_percent}%")
    if p.is_short:
        print(f"Shortfall:\t{_fmt(p.shortfall)}")
    return 0


def cmd_bill_add(
    vendor: str,
    amount: str,
    due_day: int,
    *,
    category: str | None = None,
    one_time: bool = False,
    notes: str | None = None,
) -> int:
    try:
        state = load_state()
        bill = Bill(
            id=_new_id("bill"),
            vendor=vendor,
            amount=_parse_money(amount, what="amount"),
            due_day=due_day,
            category=(
                _parse_category(category).value if category else Category.MISCELLANEOUS.value
            ),
            type="one-time" if one_time else "recurring",
            notes=notes,
        )
        state.bills.append(bill)
        save_state(state)
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    print(bill.id)
    return 0


def cmd_bill_list() -> int:
    try:
        state = load_state()
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    for bill in state.bills:
        print(
            "\t".join(
                [
                    bill.id,
                    bill.vendor,
                    _fmt(bill.amount),
                    str(bill.due_day),
                    bill.type,
                    bill.category,
                    "active" if bill.active else "inactive",
                ]
            )
        )
    return 0


def cmd_bill_remove(bill_id: str) -> int:
    try:
        state = load_state()
        remaining = [b for b in state.bills if b.id != bill_id]
        if len(remaining) == len(state.bills):
            return _error(f"No bill with id {bill_id!r}")
        state.bills = remaining
        save_state(state)
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    return 0


def cmd_commission_add(amount: str, expected_date: str, *, label: str | None = None) -> int:
    try:
        state = load_state()
        commission = PendingCommission(
            id=_new_id("comm"),
            amount=_parse_money(amount, what="amount"),
            expected_date=date.fromisoformat(expected_date.strip()),
            cutoff_label=label or "",
        )
        state.commissions.append(commission)
        save_state(state)
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    print(commission.id)
    return 0


def cmd_override(
    tx_id: str,
    *,
    category: str | None = None,
    recurring: bool | None = None,
    clear: bool = False,
) -> int:
    """Record (or clear) a sparse category / recurring patch for one transaction id."""

    try:
        state = load_state()
        if clear:
            state.overrides.pop(tx_id, None)
        else:
            if category is None and recurring is None:
                return _error("nothing to override; pass --category and/or --recurring")
            previous = state.overrides.get(tx_id, TransactionOverride())
            state.overrides[tx_id] = TransactionOverride(
                category=_parse_category(category) if category else previous.category,
                is_recurring=recurring if recurring is not None else previous.is_recurring,
            )
        save_state(state)
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    return 0


def cmd_commission_calc(gross_profit: str, gross_revenue: str) -> int:
    try:
        b = calculate_commission(
            _parse_money(gross_profit, what="gross profit"),
            _parse_money(gross_revenue, what="gross revenue"),
        )
    except ValueError as e:
        return _error(str(e))
    print(f"Commission rate:\t{b.commission_rate_percent}%")
    print(f"Raw commission:\t{_fmt(b.raw_commission)}")
    print(f"Bad debt reserve:\t{_fmt(b.bad_debt_reserve)}")
    print(f"Net payout:\t{_fmt(b.net_payout)}")
    return 0


def cmd_suggest_bills(csv_path: Path) -> int:
    try:
        state = load_state()
        transactions = _load_transactions(csv_path, state.starting_balance, state)
    except FileNotFoundError:
        return _error(f"File not found: {csv_path}")
    except PermissionError:
        return _error(f"Permission denied: {csv_path}")
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    for s in suggest_bills(
        transactions, state.bills, ignored_vendor_keys=state.ignored_vendor_keys
    ):
        print(
            f"{s.vendor_key}\t{s.vendor}\t{_fmt(s.average_amount)}\tx{s.occurrences}\t"
            f"day {s.suggested_due_day}\t{s.category.value}"
        )
    return 0


def cmd_suggest_dismiss(vendor_key: str) -> int:
    """Stop suggesting bills for ``vendor_key`` (as printed by ``suggest-bills``)."""

    key = " ".join(vendor_key.split()).upper()
    if not key:
        return _error("vendor key is empty")
    try:
        state = load_state()
        if key not in state.ignored_vendor_keys:
            state.ignored_vendor_keys.append(key)
            save_state(state)
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    return 0


def cmd_suggest_restore() -> int:
    """Forget every dismissed vendor key; prints how many were restored."""

    try:
        state = load_state()
        restored = len(state.ignored_vendor_keys)
        state.ignored_vendor_keys = []
        save_state(state)
    except (ValueError, ValidationError) as e:
        return _error(str(e))
    print(f"Restored {restored} dismissed vendors")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Ingest bank/card/accounting exports and forecast what is safe to spend "
        "before the next commission payday. Loads settings from a local .env."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
FILE_OPTION: OptionInfo = typer.Option(
    ...,
    "--file",
    help="Path to an export file (bank, card or accounting CSV; sections may be merged)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files
)
TODAY_OPTION: OptionInfo = typer.Option(
    "--today", help="Reference day (YYYY-MM-DD); defaults to the local date."
)
STARTING_BALANCE_OPTION: OptionInfo = typer.Option(
    "--starting-balance",
    help="Balance before the oldest transaction (defaults to the stored value).",
)


def _exit(code: int) -> None:
    raise typer.Exit(code)


@app.command("transactions")
def transactions_cmd(
    csv_path: Annotated[Path, FILE_OPTION],
    starting_balance: Annotated[str | None, STARTING_BALANCE_OPTION] = None,
    month: Annotated[str | None, typer.Option(help="Only show YYYY-MM.")] = None,
) -> None:
    """List processed transactions with overrides applied."""

    _exit(cmd_transactions(csv_path, starting_balance=starting_balance, month=month))


@app.command("export")
def export_cmd(
    csv_path: Annotated[Path, FILE_OPTION],
    out_path: Annotated[Path, typer.Option("--out", help="Destination CSV path.")],
    starting_balance: Annotated[str | None, STARTING_BALANCE_OPTION] = None,
) -> None:
    """Write the flat CSV export of processed transactions."""

    _exit(cmd_export(csv_path, out_path, starting_balance=starting_balance))


@app.command("next-payday")
def next_payday_cmd(today: Annotated[str | None, TODAY_OPTION] = None) -> None:
    """Print the next scheduled contract payment (never today)."""

    _exit(cmd_next_payday(today=today))


@app.command("forecast")
def forecast_cmd(
    csv_path: Annotated[Path, FILE_OPTION],
    balance: Annotated[str, typer.Option("--balance", help="Current account balance.")],
    today: Annotated[str | None, TODAY_OPTION] = None,
) -> None:
    """Compute the reserve and safe-to-spend figures until the next payday."""

    _exit(cmd_forecast(csv_path, balance=balance, today=today))


@app.command("bill-add")
def bill_add_cmd(
    vendor: Annotated[str, typer.Option("--vendor")],
    amount: Annotated[str, typer.Option("--amount")],
    due_day: Annotated[int, typer.Option("--due-day", min=1, max=31)],
    category: Annotated[str | None, typer.Option("--category")] = None,
    one_time: Annotated[
        bool, typer.Option("--one-time", help="Do not roll to next month.")
    ] = False,
    notes: Annotated[str | None, typer.Option("--notes")] = None,
) -> None:
    """Declare a bill; prints its id."""

    _exit(
        cmd_bill_add(
            vendor, amount, due_day, category=category, one_time=one_time, notes=notes
        )
    )


@app.command("bill-list")
def bill_list_cmd() -> None:
    _exit(cmd_bill_list())


@app.command("bill-remove")
def bill_remove_cmd(bill_id: Annotated[str, typer.Argument()]) -> None:
    _exit(cmd_bill_remove(bill_id))


@app.command("commission-add")
def commission_add_cmd(
    amount: Annotated[str, typer.Option("--amount")],
    expected_date: Annotated[str, typer.Option("--date", help="Expected deposit (YYYY-MM-DD).")],
    label: Annotated[str | None, typer.Option("--label")] = None,
) -> None:
    """Record an expected commission deposit; prints its id."""

    _exit(cmd_commission_add(amount, expected_date, label=label))


@app.command("override")
def override_cmd(
    tx_id: Annotated[str, typer.Argument(help="Transaction id (tx_...).")],
    category: Annotated[str | None, typer.Option("--category")] = None,
    recurring: Annotated[
        bool | None, typer.Option("--recurring/--not-recurring", show_default=False)
    ] = None,
    clear: Annotated[bool, typer.Option("--clear", help="Remove the override.")] = False,
) -> None:
    """Pin a transaction's category and/or recurring flag across re-imports."""

    _exit(cmd_override(tx_id, category=category, recurring=recurring, clear=clear))


@app.command("commission-calc")
def commission_calc_cmd(
    gross_profit: Annotated[str, typer.Option("--gross-profit")],
    gross_revenue: Annotated[str, typer.Option("--gross-revenue")],
) -> None:
    """Compute a commission payout from gross profit and revenue."""

    _exit(cmd_commission_calc(gross_profit, gross_revenue))


@app.command("suggest-bills")
def suggest_bills_cmd(csv_path: Annotated[Path, FILE_OPTION]) -> None:
    """List repeat expense vendors not yet declared as bills."""

    _exit(cmd_suggest_bills(csv_path))


@app.command("suggest-dismiss")
def suggest_dismiss_cmd(
    vendor_key: Annotated[str, typer.Argument(help="Vendor key from suggest-bills.")],
) -> None:
    """Hide a vendor from future bill suggestions."""

    _exit(cmd_suggest_dismiss(vendor_key))


@app.command("suggest-restore")
def suggest_restore_cmd() -> None:
    """Show every dismissed vendor in bill suggestions again."""

    _exit(cmd_suggest_restore())


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
