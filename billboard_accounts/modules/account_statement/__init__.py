"""
Customer account statement.

Pure ledger API only; the Qt controller/view live in `.controller` and
`.view` and are imported by `main` directly.
"""
from .entries import CustomerLedger, LedgerLine, LedgerSummary
from .ledger import (
    apply_chronology,
    build_customer_ledger,
    build_ledger_lines,
    filter_payments,
    summarize,
)
from .records import DateRange, StatementSources

__all__ = [
    "CustomerLedger",
    "LedgerLine",
    "LedgerSummary",
    "DateRange",
    "StatementSources",
    "apply_chronology",
    "build_customer_ledger",
    "build_ledger_lines",
    "filter_payments",
    "summarize",
]
