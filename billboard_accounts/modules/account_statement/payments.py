# billboard_accounts/modules/account_statement/payments.py
"""
Payment lines: cross-referencing a customer payment against the documents it
settles.

A payment row may point at its target structurally (contract_number,
sales_invoice_id, printed_invoice_id, composite_task_id) or only textually,
through codes the distribution screen writes into the notes:

  - "PUR-<digits>"               purchase invoice a barter payment came from
  - "SALE-<digits>"              sales invoice a distributed payment went to
  - "توزيع على عقد #<n>"          contract a distributed payment went to
  - "عقد #<n>"                    contract an old debt entry belongs to

The payment's own item_remaining is left as None here; it depends on every
other payment against the same contract and is settled by the chronological
pass in ledger.apply_chronology().
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ...utils.helpers import fmt_amount
from .entries import LedgerLine
from .labels import (
    CONTRACT_SETTLING_ENTRY_TYPES,
    NO_REFERENCE,
    PAYMENT,
    payment_type_label,
)
from .records import (
    Contract,
    Payment,
    PrintedInvoice,
    PurchaseInvoice,
    SalesInvoice,
    contract_key,
)

PURCHASE_CODE_RE = re.compile(r"PUR-\d+")
SALE_CODE_RE = re.compile(r"SALE-\d+")
NOTE_CONTRACT_RE = re.compile(r"عقد\s*#?(\d+)")
DISTRIBUTED_CONTRACT_RE = re.compile(r"توزيع على عقد\s*#?(\d+)")

BARTER_NOTE = "مقايضة من فاتورة مشتريات"
BARTER_METHOD = "مقايضة"
SALES_INVOICE_NOTE = "فاتورة مبيعات"

__all__ = [
    "PaymentContext",
    "paid_against_contract",
    "distributed_target_contract",
    "build_payment_line",
]


def paid_against_contract(contract_number: Optional[str], payments: Iterable[Payment]) -> float:
    """Sum of receipts/account payments/payments recorded with this contract number."""
    if not contract_number:
        return 0.0
    return sum(
        p.amount
        for p in payments
        if p.contract_number == contract_number and p.entry_type in CONTRACT_SETTLING_ENTRY_TYPES
    )


def distributed_target_contract(notes: Optional[str]) -> Optional[str]:
    """Contract number out of a 'توزيع على عقد #N' note, if any."""
    if not notes:
        return None
    m = DISTRIBUTED_CONTRACT_RE.search(notes)
    return contract_key(m.group(1)) if m else None


@dataclass
class PaymentContext:
    """Lookups shared by all payment lines of one ledger build."""

    contracts: Dict[str, Contract] = field(default_factory=dict)
    payments: List[Payment] = field(default_factory=list)
    sales_invoices: Dict[str, SalesInvoice] = field(default_factory=dict)
    printed_invoices: Dict[str, PrintedInvoice] = field(default_factory=dict)
    purchase_invoices: Dict[str, PurchaseInvoice] = field(default_factory=dict)
    sales_by_number: Dict[str, SalesInvoice] = field(default_factory=dict)
    purchases_by_number: Dict[str, PurchaseInvoice] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        contracts: Iterable[Contract],
        payments: Iterable[Payment],
        sales_invoices: Iterable[SalesInvoice],
        printed_invoices: Iterable[PrintedInvoice],
        purchase_invoices: Iterable[PurchaseInvoice],
    ) -> "PaymentContext":
        ctx = cls(payments=list(payments))
        # first record wins on duplicate keys
        for c in contracts:
            if c.contract_number:
                ctx.contracts.setdefault(c.contract_number, c)
        for inv in sales_invoices:
            ctx.sales_invoices.setdefault(inv.id, inv)
            if inv.invoice_number:
                ctx.sales_by_number.setdefault(inv.invoice_number, inv)
        for inv in printed_invoices:
            ctx.printed_invoices.setdefault(inv.id, inv)
        for inv in purchase_invoices:
            ctx.purchase_invoices.setdefault(inv.id, inv)
            if inv.invoice_number:
                ctx.purchases_by_number.setdefault(inv.invoice_number, inv)
        return ctx


@dataclass
class _Detail:
    """Figures of the document a payment settles."""

    text: str
    total: float
    remaining: Optional[float] = None
    paid: Optional[float] = None
    ad_type: str = ""


# -----------------------------
# Step 1: target reference
# -----------------------------

def _target_reference(payment: Payment, ctx: PaymentContext) -> str:
    if payment.contract_number:
        return f"عقد-{payment.contract_number}"
    if payment.sales_invoice_id:
        inv = ctx.sales_invoices.get(payment.sales_invoice_id)
        if inv is not None:
            return inv.invoice_name or f"مبيعات-{inv.invoice_number or payment.sales_invoice_id}"
        return f"مبيعات-{payment.sales_invoice_id[:8]}"
    if payment.printed_invoice_id:
        return "فاتورة طباعة"
    if payment.composite_task_id:
        return "مهمة مجمعة"
    return NO_REFERENCE


# -----------------------------
# Step 2: barter source
# -----------------------------

def _resolve_purchase_invoice(payment: Payment, notes: str, ctx: PaymentContext) -> Optional[PurchaseInvoice]:
    if payment.purchase_invoice_id:
        inv = ctx.purchase_invoices.get(payment.purchase_invoice_id)
        if inv is not None:
            return inv
    m = PURCHASE_CODE_RE.search(notes or "")
    if m:
        return ctx.purchases_by_number.get(m.group(0))
    return None


def _purchase_title(inv: PurchaseInvoice) -> str:
    return inv.invoice_name or inv.invoice_number or inv.id


# -----------------------------
# Step 3: document details
# -----------------------------

def _purchase_detail(inv: PurchaseInvoice) -> _Detail:
    full = inv.total_amount
    used = inv.used_as_payment
    remaining = full - used
    return _Detail(
        text=f"القيمة: {fmt_amount(full)} | المستخدم: {fmt_amount(used)} | المتبقي: {fmt_amount(remaining)}",
        total=full,
        remaining=remaining,
        paid=used,
    )


def _contract_detail(contract_number: Optional[str], ctx: PaymentContext) -> Optional[_Detail]:
    contract = ctx.contracts.get(contract_number) if contract_number else None
    if contract is None:
        return None
    total = contract.total
    paid = paid_against_contract(contract_number, ctx.payments)
    remaining = max(0.0, total - paid)
    ad_type = contract.ad_type or ""
    text = f"الدين: {fmt_amount(total)} | المسدد: {fmt_amount(paid)} | المتبقي: {fmt_amount(remaining)}"
    if ad_type:
        text += f" | {ad_type}"
    return _Detail(text=text, total=total, remaining=remaining, paid=paid, ad_type=ad_type)


def _invoice_detail(total: float, paid: float, name: str = "") -> _Detail:
    remaining = total - paid
    text = f"الدين: {fmt_amount(total)} | المسدد: {fmt_amount(paid)} | المتبقي: {fmt_amount(remaining)}"
    if name:
        text += f" | {name}"
    return _Detail(text=text, total=total, remaining=remaining, paid=paid)


def _substitute_sales_code(notes: str, ctx: PaymentContext) -> Tuple[str, Optional[_Detail]]:
    """
    For 'فاتورة مبيعات SALE-0007' style notes: swap the code for the invoice
    name and return that invoice's figures.
    """
    if not notes or SALES_INVOICE_NOTE not in notes:
        return notes, None
    m = SALE_CODE_RE.search(notes)
    if not m:
        return notes, None
    inv = ctx.sales_by_number.get(m.group(0))
    if inv is None:
        return notes, None
    name = inv.invoice_name or m.group(0)
    detail = _invoice_detail(inv.total_amount, inv.paid_amount, name)
    return notes.replace(m.group(0), name, 1), detail


def _debt_contract_detail(notes: str, ctx: PaymentContext) -> Optional[_Detail]:
    m = NOTE_CONTRACT_RE.search(notes or "")
    if not m:
        return None
    contract = ctx.contracts.get(contract_key(m.group(1)))
    if contract is None:
        return None
    ad_type = contract.ad_type or ""
    text = f"الدين: {fmt_amount(contract.total)}"
    if ad_type:
        text += f" | {ad_type}"
    return _Detail(text=text, total=contract.total, remaining=contract.total, ad_type=ad_type)


def _document_detail(
    payment: Payment,
    purchase: Optional[PurchaseInvoice],
    notes: str,
    ctx: PaymentContext,
) -> Tuple[str, Optional[_Detail]]:
    """
    Figures for the settled document, first structured match wins:
    barter source of a distributed payment, contract, sales invoice,
    SALE- code in the notes, printed invoice, and for old debts a contract
    number written in the notes. The SALE- code is always replaced in the notes.
    """
    detail: Optional[_Detail] = None
    if payment.distributed_payment_id and purchase is not None:
        detail = _purchase_detail(purchase)
    if detail is None:
        detail = _contract_detail(payment.contract_number, ctx)
    if detail is None and payment.sales_invoice_id:
        inv = ctx.sales_invoices.get(payment.sales_invoice_id)
        if inv is not None:
            detail = _invoice_detail(inv.total_amount, inv.paid_amount, inv.invoice_name or "")

    notes, sale_detail = _substitute_sales_code(notes, ctx)
    if detail is None:
        detail = sale_detail

    if detail is None and payment.printed_invoice_id:
        inv = ctx.printed_invoices.get(payment.printed_invoice_id)
        if inv is not None:
            detail = _invoice_detail(inv.total_amount, inv.paid_amount)
    if detail is None and payment.entry_type == "debt":
        detail = _debt_contract_detail(notes, ctx)
    return notes, detail


# -----------------------------
# Line construction
# -----------------------------

def build_payment_line(payment: Payment, ctx: PaymentContext) -> LedgerLine:
    distributed = bool(payment.distributed_payment_id)
    label = payment_type_label(payment.entry_type, distributed)

    reference = _target_reference(payment, ctx)
    notes = payment.notes or NO_REFERENCE

    purchase = _resolve_purchase_invoice(payment, notes, ctx)
    purchase_title: Optional[str] = None
    if purchase is not None:
        purchase_title = _purchase_title(purchase)
        # old rows carry only the PUR- code in their note text
        if notes != NO_REFERENCE and (BARTER_NOTE in notes or payment.method == BARTER_METHOD):
            notes = f"{BARTER_NOTE} {purchase_title}"
        if reference == NO_REFERENCE:
            reference = purchase_title

    suffix = f"{BARTER_NOTE} {purchase_title}" if purchase_title else (payment.reference or "")
    description = f"{label} - {suffix}" if suffix else label

    notes, detail = _document_detail(payment, purchase, notes, ctx)
    item_total = detail.total if detail is not None else None
    ad_type = detail.ad_type if detail is not None else ""

    # a payment can be about a contract textually without being linked to it
    target = payment.contract_number or distributed_target_contract(notes)
    if not ad_type and target:
        contract = ctx.contracts.get(target)
        if contract is not None:
            ad_type = contract.ad_type or ""
            if not item_total:
                item_total = contract.total

    if target and ad_type and ad_type not in reference:
        reference = f"عقد-{target} ({ad_type})"
    if ad_type and ad_type not in notes:
        notes = f"{notes} | نوع: {ad_type}" if notes != NO_REFERENCE else f"نوع: {ad_type}"

    # refunds (negative amounts) add to the debt instead of reducing it
    amount = payment.amount
    debit, credit = (0.0, amount) if amount >= 0 else (-amount, 0.0)

    return LedgerLine(
        id=f"{PAYMENT}-{payment.id}",
        date=payment.paid_at,
        kind=PAYMENT,
        entry_type=payment.entry_type,
        description=description,
        debit=debit,
        credit=credit,
        reference=reference,
        notes=notes,
        details=detail.text if detail is not None else "",
        item_total=item_total,
        item_remaining=None,
        original_amount=detail.total if detail is not None else None,
        paid_amount=detail.paid if detail is not None else None,
        remaining_amount=detail.remaining if detail is not None else None,
        target_contract_number=target,
        ad_type=ad_type or None,
        source_invoice=purchase_title,
        method=payment.method,
        distributed_payment_id=payment.distributed_payment_id,
    )
