from __future__ import annotations

import logging
import time
from datetime import datetime
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Template

from ...constants import (
    CURRENCIES,
    DEFAULT_CURRENCY_CODE,
    STATEMENT_TEMPLATE_NAME,
    STATEMENT_TEMPLATES_PACKAGE,
)
from ...utils.helpers import date_only, fmt_money
from .entries import LedgerLine, LedgerSummary
from .labels import NO_REFERENCE, kind_label
from .service import AccountStatement

_log = logging.getLogger(__name__)

__all__ = [
    "currency_for",
    "statement_rows",
    "statement_totals",
    "render_statement_html",
    "export_statement_pdf",
]


def currency_for(code: Optional[str]) -> Dict[str, str]:
    """Currency dict for `code`, falling back to the default currency."""
    by_code = {c["code"]: c for c in CURRENCIES}
    return by_code.get((code or "").upper()) or by_code[DEFAULT_CURRENCY_CODE]


def _money(symbol: str, v: Optional[float]) -> str:
    return f"{symbol} {fmt_money(v)}"


def _display_notes(line: LedgerLine) -> str:
    notes = line.notes if line.notes and line.notes != NO_REFERENCE else ""
    if line.ad_type and line.ad_type not in notes:
        notes = f"{notes} | نوع: {line.ad_type}" if notes else f"نوع: {line.ad_type}"
    return notes


def _line_row(line: LedgerLine, symbol: str, index: str, date: str, balance: str) -> Dict[str, Any]:
    return {
        "index": index,
        "date": date,
        "description": line.description,
        "badge": kind_label(line.kind, line.entry_type, bool(line.distributed_payment_id)),
        "kind": line.kind,
        "reference": line.reference or NO_REFERENCE,
        "debit": _money(symbol, line.debit) if line.debit > 0 else "—",
        "credit": _money(symbol, line.credit) if line.credit > 0 else "—",
        "balance": balance,
        "item_total": _money(symbol, line.item_total) if line.item_total is not None else "—",
        "item_remaining": _money(symbol, line.item_remaining) if line.item_remaining is not None else "—",
        "notes": _display_notes(line),
        "row_class": "",
    }


def statement_rows(lines: Sequence[LedgerLine], currency: Dict[str, str]) -> List[Dict[str, Any]]:
    """
    Printable rows for the ledger. Lines of one distributed payment are
    grouped under a header row showing the distributed total; the group's
    balance is printed once, on its last child row.
    """
    symbol = currency["symbol"]
    groups: Dict[str, List[LedgerLine]] = {}
    for line in lines:
        if line.distributed_payment_id:
            groups.setdefault(line.distributed_payment_id, []).append(line)

    rows: List[Dict[str, Any]] = []
    done: set[str] = set()
    index = 1
    for line in lines:
        group_id = line.distributed_payment_id
        if group_id and group_id in done:
            continue
        if group_id:
            members = groups[group_id]
            total = line.distributed_payment_total or sum(m.credit for m in members)
            rows.append({
                "index": "●",
                "date": date_only(line.date),
                "description": f"دفعة موزعة - إجمالي: {_money(symbol, total)}",
                "badge": kind_label(line.kind, line.entry_type, True),
                "kind": line.kind,
                "reference": "",
                "debit": "—",
                "credit": _money(symbol, total),
                "balance": "",
                "item_total": "",
                "item_remaining": "",
                "notes": f"عدد التوزيعات: {len(members)}",
                "row_class": "distributed-header",
            })
            for n, member in enumerate(members, start=1):
                last = n == len(members)
                row = _line_row(
                    member,
                    symbol,
                    index=f"↳ {n}",
                    date="",
                    balance=_money(symbol, member.running_balance) if last else "",
                )
                row["description"] = f"└─ {member.description}"
                row["row_class"] = "distributed-child"
                rows.append(row)
            done.add(group_id)
        else:
            rows.append(_line_row(line, symbol, str(index), date_only(line.date), _money(symbol, line.running_balance)))
        index += 1
    return rows


def statement_totals(summary: LedgerSummary, currency: Dict[str, str]) -> List[Dict[str, Any]]:
    symbol = currency["symbol"]
    if summary.balance > 0:
        balance_label = "الرصيد النهائي (مستحق على العميل)"
    elif summary.balance < 0:
        balance_label = "الرصيد النهائي (رصيد دائن للعميل)"
    else:
        balance_label = "الرصيد النهائي (مسدد بالكامل)"
    totals = [
        {"label": "إجمالي المدين", "value": _money(symbol, summary.total_debits), "highlight": False},
        {"label": "إجمالي الدائن", "value": _money(symbol, summary.total_credits), "highlight": False},
    ]
    if summary.total_friend_rentals:
        totals.append({
            "label": "الرصيد بدون إيجارات اللوحات الصديقة",
            "value": _money(symbol, summary.balance_without_friend_rentals),
            "highlight": False,
        })
    totals.append({"label": balance_label, "value": _money(symbol, abs(summary.balance)), "highlight": True})
    return totals


def _balance_in_words(summary: LedgerSummary, currency: Dict[str, str]) -> str:
    if summary.balance < 0:
        state = " (رصيد دائن)"
    elif summary.balance == 0:
        state = " (مسدد بالكامل)"
    else:
        state = ""
    return f"الرصيد بالكلمات: {fmt_money(abs(summary.balance))} {currency['written_name']}{state}"


def _load_template() -> Template:
    try:
        tpl_str = importlib_resources.files(STATEMENT_TEMPLATES_PACKAGE).joinpath(
            STATEMENT_TEMPLATE_NAME
        ).read_text(encoding="utf-8")
    except (FileNotFoundError, OSError, ModuleNotFoundError) as e:
        _log.error("Failed to load account statement template: %s", e, exc_info=True)
        # Fallback: minimal template that surfaces the error visibly
        tpl_str = (
            "<html><body><p>Failed to load account statement template."
            " See logs for details.</p></body></html>"
        )
    return Template(tpl_str, autoescape=True)


def render_statement_html(
    statement: AccountStatement,
    currency_code: Optional[str] = None,
    *,
    statement_number: Optional[str] = None,
    printed_at: Optional[datetime] = None,
) -> str:
    """Render the printable (RTL, A4 landscape) account statement as HTML."""
    currency = currency_for(currency_code)
    printed_at = printed_at or datetime.now()
    statement_number = statement_number or f"STMT-{int(time.time() * 1000)}"
    dr = statement.date_range
    lines = statement.ledger.lines
    summary = statement.ledger.summary

    return _load_template().render(
        title="كشف حساب",
        statement_number=statement_number,
        statement_date=printed_at.strftime("%Y-%m-%d"),
        period_start=date_only(dr.start) if dr and dr.start else "بداية السجل",
        period_end=date_only(dr.end) if dr and dr.end else "حتى الآن",
        customer=statement.customer,
        currency=currency,
        rows=statement_rows(lines, currency),
        totals=statement_totals(summary, currency),
        line_count=len(lines),
        payment_count=summary.total_payments,
        balance_in_words=_balance_in_words(summary, currency),
        exclude_friend_rentals=statement.exclude_friend_rentals,
    )


def export_statement_pdf(html: str, path: str | Path) -> Path:
    """Write `html` to a PDF at `path` (parent dirs created). Returns the path."""
    from weasyprint import HTML

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    HTML(string=html).write_pdf(str(target))
    _log.info("Account statement PDF written to %s", target)
    return target
