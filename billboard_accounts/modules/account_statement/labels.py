# billboard_accounts/modules/account_statement/labels.py
"""
Display labels for statement lines (Arabic, as printed for customers).

Only text lives here; no amounts are computed.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ...utils.helpers import parse_timestamp

# Ledger line kinds
CONTRACT = "contract"
DISCOUNT = "discount"
PRINT_INVOICE = "print_invoice"
COMPOSITE_TASK = "composite_task"
PURCHASE_INVOICE = "purchase_invoice"
SALES_INVOICE = "sales_invoice"
FRIEND_BILLBOARD_RENTAL = "friend_billboard_rental"
FRIEND_RENTAL_CONTRACT = "friend_rental_contract"
PAYMENT = "payment"

LINE_KINDS = (
    CONTRACT,
    DISCOUNT,
    PRINT_INVOICE,
    COMPOSITE_TASK,
    PURCHASE_INVOICE,
    SALES_INVOICE,
    FRIEND_BILLBOARD_RENTAL,
    FRIEND_RENTAL_CONTRACT,
    PAYMENT,
)

FRIEND_RENTAL_KINDS = frozenset({FRIEND_BILLBOARD_RENTAL, FRIEND_RENTAL_CONTRACT})

# Payment entry types that count as money received against a contract
CONTRACT_SETTLING_ENTRY_TYPES = frozenset({"receipt", "account_payment", "payment"})

NO_REFERENCE = "—"
UNSPECIFIED = "غير محدد"

_ENTRY_TYPE_LABELS = {
    "receipt": "إيصال",
    "invoice": "فاتورة",
    "debt": "دين سابق",
    "account_payment": "دفعة حساب",
    "composite_task": "مهمة مجمعة",
    "payment": "دفعة",
}

_KIND_LABELS = {
    CONTRACT: "عقد",
    DISCOUNT: "خصم",
    PRINT_INVOICE: "فاتورة طباعة",
    COMPOSITE_TASK: "مهمة مجمعة",
    PURCHASE_INVOICE: "فاتورة مشتريات",
    SALES_INVOICE: "فاتورة مبيعات",
    FRIEND_BILLBOARD_RENTAL: "إيجار لوحة (صديق)",
    FRIEND_RENTAL_CONTRACT: "إيجار لوحة صديقة",
}

_PRINT_INVOICE_TYPES = {
    "print_only": "طباعة فقط",
    "print_install": "طباعة وتركيب",
    "install_only": "تركيب فقط",
}

_TASK_TYPES = {
    "new_installation": "تركيب جديد",
    "reinstallation": "إعادة تركيب",
}


def payment_type_label(entry_type: Optional[str], distributed: bool = False) -> str:
    """Badge text for a payment entry type; distributed plain payments read 'دفعة موزعة'."""
    et = entry_type or "payment"
    if et == "payment" and distributed:
        return "دفعة موزعة"
    return _ENTRY_TYPE_LABELS.get(et, et or UNSPECIFIED)


def kind_label(kind: str, entry_type: Optional[str] = None, distributed: bool = False) -> str:
    """Badge text for any ledger line."""
    if kind == PAYMENT:
        return payment_type_label(entry_type, distributed)
    return _KIND_LABELS.get(kind, kind or UNSPECIFIED)


def print_invoice_type_suffix(invoice_type: Optional[str]) -> str:
    """' (طباعة فقط)' style suffix, '' for unknown types."""
    label = _PRINT_INVOICE_TYPES.get(invoice_type or "")
    return f" ({label})" if label else ""


def task_type_label(task_type: Optional[str]) -> str:
    return _TASK_TYPES.get(task_type or "", task_type or UNSPECIFIED)


def contract_status(end_date, now: Optional[datetime] = None) -> str:
    """
    'active' when the end date is today or later, 'expired' when it has passed,
    'unknown' when the contract has no (parseable) end date.
    """
    end = parse_timestamp(end_date)
    if end is None:
        return "unknown"
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return "active" if end >= now else "expired"
