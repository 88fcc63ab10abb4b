# billboard_accounts/modules/account_statement/ledger.py
"""
Customer account statement (ledger) builder.

Exposes:
- build_customer_ledger(customer_id, customer_name, date_range,
                        exclude_friend_rentals, sources) -> CustomerLedger

The build runs in three stages, each usable on its own:

  1. build_ledger_lines()  one unordered line per financial event
  2. apply_chronology()    date sort, running balance, per-contract remaining
  3. summarize()           totals for the statement header/footer

Nothing is persisted and every call starts from empty trackers.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ...utils.helpers import fmt_amount, parse_timestamp, timestamp_key
from .entries import CustomerLedger, LedgerLine, LedgerSummary
from .labels import (
    COMPOSITE_TASK,
    CONTRACT,
    DISCOUNT,
    FRIEND_BILLBOARD_RENTAL,
    FRIEND_RENTAL_CONTRACT,
    FRIEND_RENTAL_KINDS,
    NO_REFERENCE,
    PRINT_INVOICE,
    PURCHASE_INVOICE,
    SALES_INVOICE,
    UNSPECIFIED,
    contract_status,
    print_invoice_type_suffix,
    task_type_label,
)
from .payments import PaymentContext, build_payment_line, paid_against_contract
from .records import (
    CompositeTask,
    Contract,
    DateRange,
    FriendBillboardRental,
    GeneralDiscount,
    Payment,
    PrintedInvoice,
    PurchaseInvoice,
    SalesInvoice,
    StatementSources,
)

_log = logging.getLogger(__name__)

__all__ = [
    "filter_payments",
    "build_ledger_lines",
    "apply_chronology",
    "summarize",
    "build_customer_ledger",
]


# =============================================================================
# Payment date filter
# =============================================================================

def filter_payments(payments: Iterable[Payment], date_range: Optional[DateRange]) -> List[Payment]:
    """
    Keep payments whose paid_at falls inside [start, end] (inclusive).

    A date-only bound is midnight of that day. Payments without a parseable
    date are dropped as soon as either bound is set.
    """
    payments = list(payments)
    if date_range is None or date_range.is_open:
        return payments
    start = parse_timestamp(date_range.start) if date_range.start else None
    end = parse_timestamp(date_range.end) if date_range.end else None
    kept: List[Payment] = []
    for p in payments:
        paid_at = parse_timestamp(p.paid_at)
        if paid_at is None:
            continue
        if start is not None and paid_at < start:
            continue
        if end is not None and paid_at > end:
            continue
        kept.append(p)
    return kept


# =============================================================================
# Stage 1: per-kind construction
# =============================================================================

def _contract_lines(contracts: Sequence[Contract], payments: Sequence[Payment]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for i, c in enumerate(contracts, start=1):
        total = c.total
        paid = paid_against_contract(c.contract_number, payments)
        remaining = max(0.0, total - paid)
        ad_type = c.ad_type or UNSPECIFIED
        number = c.contract_number or NO_REFERENCE
        # no contract number: not tracked, id kept unique by position
        line_id = c.contract_number or f"unnumbered-{i}"
        lines.append(
            LedgerLine(
                id=f"{CONTRACT}-{line_id}",
                date=c.contract_date,
                kind=CONTRACT,
                description=f"عقد رقم {number} - {ad_type}",
                debit=total,
                reference=f"عقد-{number} ({ad_type})",
                notes="",
                details=(
                    f"القيمة: {fmt_amount(total)} | المدفوع: {fmt_amount(paid)}"
                    f" | المتبقي: {fmt_amount(remaining)}"
                ),
                item_total=total,
                item_remaining=remaining,
                original_amount=total,
                paid_amount=paid,
                remaining_amount=remaining,
                contract_number=c.contract_number,
                ad_type=ad_type,
            )
        )
    return lines


def _discount_lines(discounts: Sequence[GeneralDiscount]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for d in discounts:
        if d.status != "active":
            continue
        amount = d.discount_value
        reason = d.reason or "خصم عام"
        if d.discount_type == "percentage":
            # informational: the percentage is not turned into an amount here
            description = f"خصم {fmt_amount(amount)}% - {reason}"
        else:
            description = f"خصم {fmt_amount(amount)} د.ل - {reason}"
        lines.append(
            LedgerLine(
                id=f"{DISCOUNT}-{d.id}",
                date=d.applied_date,
                kind=DISCOUNT,
                description=description,
                credit=amount if d.discount_type == "fixed" else 0.0,
                reference="خصم عام",
                notes=d.reason or NO_REFERENCE,
            )
        )
    return lines


def _printed_invoice_lines(invoices: Sequence[PrintedInvoice], rolled_up_ids: Set[str]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for inv in invoices:
        # already billed through its composite task
        if inv.id in rolled_up_ids:
            continue
        total = inv.total_amount
        paid = inv.paid_amount
        remaining = total - paid
        number = inv.invoice_number or inv.id
        lines.append(
            LedgerLine(
                id=f"{PRINT_INVOICE}-{inv.id}",
                date=inv.invoice_date or inv.created_at,
                kind=PRINT_INVOICE,
                description=f"فاتورة طباعة رقم {number}{print_invoice_type_suffix(inv.invoice_type)}",
                debit=total,
                reference=f"فاتورة-{number}",
                notes=inv.notes or NO_REFERENCE,
                details=(
                    f"القيمة: {fmt_amount(total)} | المدفوع: {fmt_amount(paid)}"
                    f" | المتبقي: {fmt_amount(remaining)}"
                ),
                item_total=total,
                item_remaining=max(0.0, remaining),
                original_amount=total,
                paid_amount=paid,
                remaining_amount=remaining,
            )
        )
    return lines


def _composite_task_lines(tasks: Sequence[CompositeTask]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for t in tasks:
        contract_ids = t.linked_contract_ids
        if contract_ids:
            reference = f"عقود: {', '.join(contract_ids)}"
        elif t.contract_id:
            reference = f"عقد-{t.contract_id}"
        else:
            reference = NO_REFERENCE
        lines.append(
            LedgerLine(
                id=f"{COMPOSITE_TASK}-{t.id}",
                date=t.invoice_date or t.created_at,
                kind=COMPOSITE_TASK,
                description=f"مهمة مجمعة - {task_type_label(t.task_type)}",
                debit=t.customer_total,
                reference=reference,
                # task notes hold cutting/installation costs; never shown to the customer
                notes=NO_REFERENCE,
            )
        )
    return lines


def _purchase_invoice_lines(invoices: Sequence[PurchaseInvoice]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for inv in invoices:
        total = inv.total_amount
        used = inv.used_as_payment
        remaining = total - used
        # fully consumed as a distributed payment: the payment lines carry it
        if remaining <= 0:
            continue
        if used > 0:
            notes = f"القيمة الكلية: {fmt_amount(total)} د.ل - مستخدم كدفعة: {fmt_amount(used)} د.ل"
        else:
            notes = f"القيمة الكلية: {fmt_amount(total)} د.ل" + (f" | {inv.notes}" if inv.notes else "")
        lines.append(
            LedgerLine(
                id=f"{PURCHASE_INVOICE}-{inv.id}",
                date=inv.invoice_date or inv.created_at,
                kind=PURCHASE_INVOICE,
                description=f"مقايضة - {inv.title}{' (جزئي)' if used > 0 else ''}",
                credit=remaining,
                reference=f"مشتريات-{inv.invoice_number or inv.id}" if inv.invoice_name else NO_REFERENCE,
                notes=notes,
                item_total=total,
                item_remaining=remaining,
                original_amount=total,
                paid_amount=used,
                remaining_amount=remaining,
            )
        )
    return lines


def _sales_invoice_lines(invoices: Sequence[SalesInvoice]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for inv in invoices:
        total = inv.total_amount
        paid = inv.paid_amount
        remaining = total - paid
        lines.append(
            LedgerLine(
                id=f"{SALES_INVOICE}-{inv.id}",
                date=inv.invoice_date or inv.created_at,
                kind=SALES_INVOICE,
                description=inv.title,
                debit=total,
                reference=f"مبيعات-{inv.invoice_number or inv.id}" if inv.invoice_name else NO_REFERENCE,
                notes=inv.notes or NO_REFERENCE,
                details=(
                    f"القيمة: {fmt_amount(total)} | المدفوع: {fmt_amount(paid)}"
                    f" | المتبقي: {fmt_amount(remaining)}"
                ),
                item_total=total,
                item_remaining=max(0.0, remaining),
                original_amount=total,
                paid_amount=paid,
                remaining_amount=remaining,
            )
        )
    return lines


def _friend_rental_lines(rentals: Sequence[FriendBillboardRental]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for r in rentals:
        cost = r.cost
        used = r.used_as_payment
        remaining = cost - used
        if remaining <= 0:
            continue
        billboard = r.billboard_name or f"لوحة {r.billboard_id or ''}".strip()
        if used > 0:
            notes = f"المبلغ الأصلي: {fmt_amount(cost)} - مستخدم: {fmt_amount(used)}"
        else:
            notes = f"{r.start_date or ''} - {r.end_date or ''}"
        lines.append(
            LedgerLine(
                id=f"{FRIEND_BILLBOARD_RENTAL}-{r.id}",
                date=r.start_date,
                kind=FRIEND_BILLBOARD_RENTAL,
                description=f"إيجار لوحة: {billboard}{' (جزئي)' if used > 0 else ''}",
                credit=remaining,
                reference=f"إيجار-{r.id[:8]}",
                notes=notes,
                item_total=cost,
                item_remaining=remaining,
                original_amount=cost,
                paid_amount=used,
                remaining_amount=remaining,
            )
        )
    return lines


def _contract_friend_rental_lines(contracts: Sequence[Contract]) -> List[LedgerLine]:
    lines: List[LedgerLine] = []
    for c in contracts:
        for entry in c.friend_rentals:
            if entry.rental_cost is None or entry.rental_cost <= 0:
                continue
            lines.append(
                LedgerLine(
                    id=f"{FRIEND_RENTAL_CONTRACT}-{c.contract_number}-{entry.billboard_id}",
                    date=c.contract_date,
                    kind=FRIEND_RENTAL_CONTRACT,
                    description=f"إيجار لوحة صديقة - عقد {c.contract_number or NO_REFERENCE}",
                    credit=entry.rental_cost,
                    reference=f"عقد-{c.contract_number or NO_REFERENCE}",
                    notes=entry.company_name or NO_REFERENCE,
                    item_total=entry.rental_cost,
                )
            )
    return lines


def _ensure_unique_ids(lines: List[LedgerLine]) -> None:
    seen: Dict[str, int] = {}
    for line in lines:
        n = seen.get(line.id, 0)
        seen[line.id] = n + 1
        if n:
            _log.warning("Duplicate ledger line id %s; source data repeats a record", line.id)
            line.id = f"{line.id}#{n + 1}"


def build_ledger_lines(
    sources: StatementSources,
    *,
    date_range: Optional[DateRange] = None,
    exclude_friend_rentals: bool = False,
) -> List[LedgerLine]:
    """One line per financial event, in construction (not chronological) order."""
    payments = list(sources.payments)
    if date_range is not None:
        payments = filter_payments(payments, date_range)
    purchase_invoices = [inv for inv in sources.purchase_invoices if not inv.is_void]
    rolled_up_ids = {t.combined_invoice_id for t in sources.composite_tasks if t.combined_invoice_id}

    lines: List[LedgerLine] = []
    lines += _contract_lines(sources.contracts, payments)
    lines += _discount_lines(sources.general_discounts)
    lines += _printed_invoice_lines(sources.printed_invoices, rolled_up_ids)
    lines += _composite_task_lines(sources.composite_tasks)
    lines += _purchase_invoice_lines(purchase_invoices)
    lines += _sales_invoice_lines(sources.sales_invoices)
    if not exclude_friend_rentals:
        lines += _friend_rental_lines(sources.friend_rentals)
        lines += _contract_friend_rental_lines(sources.contracts)

    ctx = PaymentContext.build(
        contracts=sources.contracts,
        payments=payments,
        sales_invoices=sources.sales_invoices,
        printed_invoices=sources.printed_invoices,
        purchase_invoices=purchase_invoices,
    )
    lines += [build_payment_line(p, ctx) for p in payments]

    _ensure_unique_ids(lines)
    return lines


# =============================================================================
# Stage 2: chronological pass
# =============================================================================

def apply_chronology(lines: Iterable[LedgerLine]) -> List[LedgerLine]:
    """
    Return new lines sorted by date (missing/unparseable dates first, ties in
    input order) with running balance, per-contract remaining and
    distributed-payment totals filled in. Input lines are not modified.
    """
    ordered = [replace(line) for line in sorted(lines, key=lambda l: timestamp_key(l.date))]

    distributed_totals: Dict[str, float] = defaultdict(float)
    for line in ordered:
        if line.distributed_payment_id:
            distributed_totals[line.distributed_payment_id] += line.credit

    running = 0.0
    paid_so_far: Dict[str, float] = {}

    for line in ordered:
        running += line.debit - line.credit
        line.running_balance = running

        if line.distributed_payment_id:
            line.distributed_payment_total = distributed_totals[line.distributed_payment_id]

        key = line.tracking_contract
        if not key or not line.item_total:
            continue
        if line.kind == CONTRACT:
            # the contract line opens the debt: fully remaining
            paid_so_far[key] = 0.0
            line.item_remaining = line.item_total
        elif line.credit > 0:
            # measured against the line's own document total
            paid = paid_so_far.get(key, 0.0) + line.credit
            paid_so_far[key] = paid
            line.item_remaining = max(0.0, line.item_total - paid)

    return ordered


# =============================================================================
# Stage 3: summary
# =============================================================================

def summarize(
    lines: Sequence[LedgerLine],
    *,
    contracts: Sequence[Contract] = (),
    payments: Sequence[Payment] = (),
    now: Optional[datetime] = None,
) -> LedgerSummary:
    total_debits = 0.0
    total_credits = 0.0
    total_friend_rentals = 0.0
    total_purchase = 0.0
    total_sales = 0.0
    for line in lines:
        total_debits += line.debit
        total_credits += line.credit
        if line.kind in FRIEND_RENTAL_KINDS:
            total_friend_rentals += line.credit
        elif line.kind == PURCHASE_INVOICE:
            total_purchase += line.credit
        elif line.kind == SALES_INVOICE:
            total_sales += line.debit

    now = now or datetime.now(timezone.utc)
    active = sum(1 for c in contracts if contract_status(c.end_date, now) == "active")

    return LedgerSummary(
        total_debits=total_debits,
        total_credits=total_credits,
        balance=total_debits - total_credits,
        total_friend_rentals=total_friend_rentals,
        # friend rentals are passed on to the partner, not collected from this customer
        balance_without_friend_rentals=total_debits - (total_credits - total_friend_rentals),
        total_purchase_invoices=total_purchase,
        total_sales_invoices=total_sales,
        total_contracts=len(contracts),
        active_contracts=active,
        total_payments=len(payments),
    )


# =============================================================================
# Public entry point
# =============================================================================

def build_customer_ledger(
    customer_id,
    customer_name: Optional[str],
    date_range: Optional[DateRange],
    exclude_friend_rentals: bool,
    sources: Optional[StatementSources],
    *,
    now: Optional[datetime] = None,
) -> CustomerLedger:
    """
    Build the account statement for one customer from already-fetched records.

    Pure and deterministic for identical inputs (and `now`, which only affects
    the active-contract count).
    """
    sources = sources or StatementSources()
    payments = filter_payments(sources.payments, date_range)
    lines = build_ledger_lines(
        replace(sources, payments=payments),
        exclude_friend_rentals=exclude_friend_rentals,
    )
    ordered = apply_chronology(lines)
    summary = summarize(
        ordered,
        contracts=sources.contracts,
        payments=payments,
        now=now,
    )
    _log.debug(
        "Built ledger for customer %s (%s): %d lines, balance %.2f",
        customer_id, customer_name, len(ordered), summary.balance,
    )
    return CustomerLedger(lines=ordered, summary=summary)
