"""Public interface for the ``cashflow_forecast`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .bills import (
    bill_from_transaction,
    bills_before_payday,
    expected_due_date,
    resolve_bills,
    suggest_bills,
    unpaid_bills,
)
from .business_days import (
    KNOWN_BANK_HOLIDAYS,
    HolidayCalendar,
    get_nth_business_day_after,
    is_business_day,
)
from .categories import Category, classify_category
from .commissions import calculate_commission, commission_status
from .ingest import load_export_file, parse_export, parse_records
from .models import (
    Bill,
    BillResolutionStatus,
    BillSuggestion,
    BillWithStatus,
    CashFlowForecast,
    CommissionBreakdown,
    CommissionStatus,
    FinancialProjection,
    MonthSummary,
    ParseResult,
    PaydayInfo,
    PaymentPeriod,
    PendingCommission,
    RawTransactionRecord,
    RecurringVendorSummary,
    Transaction,
    TransactionOverride,
)
from .processing import apply_overrides, compute_transaction_id, process_transactions
from .projection import build_forecast, compute_projection, next_payday
from .recurring import Cadence, detect_cadence, detect_recurring, summarize_recurring
from .reports import export_to_csv, generate_month_summaries, unique_months
from .schedule import (
    determine_pay_period_impact,
    get_contract_pay_periods,
    get_next_scheduled_payment,
    get_next_scheduled_payment_date,
    is_payment_date,
)
from .vendors import (
    extract_vendor_name,
    normalize_vendor_key,
    transaction_vendor_key,
    vendor_display_label,
)

__all__ = [
    # Ingestion
    "parse_export",
    "parse_records",
    "load_export_file",
    # Processing
    "process_transactions",
    "compute_transaction_id",
    "apply_overrides",
    "classify_category",
    "detect_cadence",
    "detect_recurring",
    "summarize_recurring",
    # Vendors
    "normalize_vendor_key",
    "vendor_display_label",
    "extract_vendor_name",
    "transaction_vendor_key",
    # Calendar / schedule
    "KNOWN_BANK_HOLIDAYS",
    "HolidayCalendar",
    "is_business_day",
    "get_nth_business_day_after",
    "get_contract_pay_periods",
    "get_next_scheduled_payment",
    "get_next_scheduled_payment_date",
    "is_payment_date",
    "determine_pay_period_impact",
    # Bills / commissions / projection
    "resolve_bills",
    "expected_due_date",
    "bills_before_payday",
    "unpaid_bills",
    "suggest_bills",
    "bill_from_transaction",
    "commission_status",
    "calculate_commission",
    "next_payday",
    "compute_projection",
    "build_forecast",
    # Reports
    "export_to_csv",
    "generate_month_summaries",
    "unique_months",
    # Models / types
    "Category",
    "Cadence",
    "RawTransactionRecord",
    "ParseResult",
    "Transaction",
    "TransactionOverride",
    "Bill",
    "PendingCommission",
    "PaymentPeriod",
    "PaydayInfo",
    "BillResolutionStatus",
    "BillWithStatus",
    "BillSuggestion",
    "FinancialProjection",
    "CashFlowForecast",
    "CommissionStatus",
    "CommissionBreakdown",
    "MonthSummary",
    "RecurringVendorSummary",
]
