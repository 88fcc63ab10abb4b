# billboard_accounts/tests/test_statement_printing.py
from __future__ import annotations

from datetime import datetime

import pytest

from billboard_accounts.modules.account_statement import build_customer_ledger
from billboard_accounts.modules.account_statement.printing import (
    currency_for,
    export_statement_pdf,
    render_statement_html,
    statement_rows,
    statement_totals,
)
from billboard_accounts.modules.account_statement.records import (
    Contract,
    Customer,
    DateRange,
    Payment,
    StatementSources,
)
from billboard_accounts.modules.account_statement.service import AccountStatement


def _statement(name: str = "شركة النور", date_range=None) -> AccountStatement:
    sources = StatementSources(
        contracts=[Contract("1", ad_type="تجاري", total=5000.0, contract_date="2024-01-01")],
        payments=[
            Payment("a", amount=1000.0, paid_at="2024-02-01", contract_number="1", distributed_payment_id="g1"),
            Payment("b", amount=500.0, paid_at="2024-02-01", notes="توزيع على عقد #1", distributed_payment_id="g1"),
            Payment("c", amount=200.0, entry_type="receipt", paid_at="2024-03-01", contract_number="1"),
        ],
    )
    ledger = build_customer_ledger(1, name, date_range, False, sources)
    return AccountStatement(customer=Customer(id=1, name=name, phone="091"), ledger=ledger, date_range=date_range)


def test_currency_lookup_falls_back_to_default() -> None:
    assert currency_for("usd")["symbol"] == "$"
    assert currency_for("XXX")["code"] == "LYD"
    assert currency_for(None)["code"] == "LYD"


def test_distributed_payments_are_grouped() -> None:
    st = _statement()
    rows = statement_rows(st.ledger.lines, currency_for("LYD"))

    # contract, group header, two children, receipt
    assert [r["row_class"] for r in rows] == ["", "distributed-header", "distributed-child", "distributed-child", ""]
    header = rows[1]
    assert header["credit"] == "د.ل 1,500.00"
    assert header["notes"] == "عدد التوزيعات: 2"
    children = rows[2:4]
    assert children[0]["balance"] == ""
    assert children[1]["balance"] == "د.ل 3,500.00"
    assert rows[4]["index"] == "3"
    assert rows[4]["balance"] == "د.ل 3,300.00"


def test_totals_label_follows_balance_sign() -> None:
    st = _statement()
    totals = statement_totals(st.ledger.summary, currency_for("LYD"))
    assert totals[-1]["label"] == "الرصيد النهائي (مستحق على العميل)"
    assert totals[-1]["value"] == "د.ل 3,300.00"
    assert totals[-1]["highlight"] is True


def test_render_html() -> None:
    st = _statement(date_range=DateRange("2024-01-01", "2024-12-31"))
    html = render_statement_html(st, "USD", printed_at=datetime(2024, 6, 1))

    assert 'dir="rtl"' in html
    assert "STMT-" in html
    assert "2024-06-01" in html
    assert "شركة النور" in html
    assert "$ 5,000.00" in html
    assert "دولار أمريكي" in html
    assert "دفعة موزعة - إجمالي" in html

    fixed = render_statement_html(st, statement_number="STMT-1")
    assert "STMT-1" in fixed
    assert "بداية السجل" not in html


def test_render_escapes_customer_text() -> None:
    html = render_statement_html(_statement(name="<b>x</b>"))
    assert "<b>x</b>" not in html
    assert "&lt;b&gt;x&lt;/b&gt;" in html


def test_export_pdf(tmp_path) -> None:
    pytest.importorskip("weasyprint")
    html = render_statement_html(_statement(), statement_number="STMT-1")
    out = export_statement_pdf(html, tmp_path / "out" / "statement.pdf")
    assert out.exists()
    assert out.read_bytes().startswith(b"%PDF")
