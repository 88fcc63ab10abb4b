# billboard_accounts/tests/test_account_statement_ui.py
"""
Qt layer: ledger table model and the account statement controller.
"""
from __future__ import annotations

import pytest
from PySide6.QtCore import QDate, Qt

from billboard_accounts.modules.account_statement import controller as controller_mod
from billboard_accounts.modules.account_statement.controller import AccountStatementController
from billboard_accounts.modules.account_statement.entries import LedgerLine
from billboard_accounts.modules.account_statement.model import LedgerTableModel


def _lines() -> list[LedgerLine]:
    return [
        LedgerLine(id="contract-1", date="2024-01-01", kind="contract", description="عقد رقم 1 - تجاري",
                   debit=5000.0, running_balance=5000.0, item_total=5000.0, item_remaining=5000.0,
                   reference="عقد-1 (تجاري)", notes="", details="القيمة: 5,000"),
        LedgerLine(id="payment-p1", date="2024-02-01T10:00:00", kind="payment", entry_type="payment",
                   description="دفعة موزعة", credit=2000.0, running_balance=3000.0,
                   item_total=5000.0, item_remaining=3000.0, distributed_payment_id="g1"),
    ]


def test_ledger_model_basics(qtbot) -> None:
    model = LedgerTableModel(_lines())
    assert model.rowCount() == 2
    assert model.columnCount() == len(LedgerTableModel.HEADERS) == 11

    def cell(row, col, role=Qt.DisplayRole):
        return model.data(model.index(row, col), role)

    assert cell(0, 0) == 1
    assert cell(0, 1) == "2024-01-01"
    assert cell(1, 1) == "2024-02-01"
    assert cell(0, 3) == "عقد"
    assert cell(1, 3) == "دفعة موزعة"
    assert cell(0, 5) == "5,000.00"
    assert cell(0, 6) == ""
    assert cell(1, 6) == "2,000.00"
    assert cell(1, 8) == "3,000.00"
    assert cell(1, 9) == "3,000.00"
    assert cell(1, 10) == "—"
    assert cell(0, 2, Qt.ToolTipRole) == "القيمة: 5,000"
    assert cell(0, 5, Qt.TextAlignmentRole) == Qt.AlignRight | Qt.AlignVCenter
    assert cell(1, 0, LedgerTableModel.KIND_ROLE) == "payment"
    assert cell(1, 0, LedgerTableModel.LINE_ROLE).id == "payment-p1"
    assert model.headerData(2, Qt.Horizontal) == "البيان"

    model.replace([])
    assert model.rowCount() == 0


@pytest.fixture()
def statement_rows(seed, customer):
    cid = customer["id"]
    seed('"Contract"', **{"Contract_Number": 1, "customer_id": cid, "Contract Date": "2024-01-01",
                          "End Date": "2030-01-01", "Total": 5000})
    seed("customer_payments", id="p1", customer_id=cid, amount=2000, entry_type="receipt",
         contract_number=1, paid_at="2024-02-01")
    return customer


@pytest.mark.usefixtures("app")
def test_controller_loads_statement(conn, statement_rows, qtbot) -> None:
    ctrl = AccountStatementController(conn)
    qtbot.addWidget(ctrl.get_widget())
    v = ctrl.view

    assert not v.btn_print.isEnabled()
    v.customer_id.setText(str(statement_rows["id"]))
    v.btn_load.click()

    assert ctrl.base.rowCount() == 2
    assert v.summary_labels["balance"].text() == "3,000.00"
    assert v.summary_labels["total_contracts"].text() == "1"
    assert v.summary_labels["active_contracts"].text() == "1"
    assert statement_rows["name"] in v.lbl_customer.text()
    assert v.btn_print.isEnabled()

    # filter change rebuilds from scratch
    v.chk_date_range.setChecked(True)
    v.date_from.setDate(QDate.fromString("2024-03-01", "yyyy-MM-dd"))
    v.date_to.setDate(QDate.fromString("2024-12-31", "yyyy-MM-dd"))
    assert ctrl.base.rowCount() == 1
    assert v.summary_labels["balance"].text() == "5,000.00"


@pytest.mark.usefixtures("app")
def test_controller_requires_customer(conn, qtbot, monkeypatch) -> None:
    shown = []
    monkeypatch.setattr(controller_mod, "info", lambda parent, title, text: shown.append(text))
    ctrl = AccountStatementController(conn)
    qtbot.addWidget(ctrl.get_widget())

    assert ctrl.reload() is None
    assert len(shown) == 1
    assert ctrl.base.rowCount() == 0


@pytest.mark.usefixtures("app")
def test_controller_print_exports_pdf(conn, statement_rows, qtbot, monkeypatch) -> None:
    exported = {}

    def fake_export(html, path):
        exported["html"] = html
        exported["path"] = path
        return path

    monkeypatch.setattr(controller_mod, "export_statement_pdf", fake_export)
    monkeypatch.setattr(AccountStatementController, "_open_file", staticmethod(lambda path: exported.setdefault("opened", path)))

    ctrl = AccountStatementController(conn)
    qtbot.addWidget(ctrl.get_widget())
    ctrl.view.customer_name.setText("النور")
    ctrl.view.currency.setCurrentIndex(ctrl.view.currency.findData("USD"))
    ctrl.reload()
    ctrl.view.btn_print.click()

    assert statement_rows["name"] in exported["html"]
    assert "$ 5,000.00" in exported["html"]
    assert exported["path"].endswith(".pdf")
    assert exported["opened"] == exported["path"]


@pytest.mark.usefixtures("app")
def test_summary_amounts_use_shared_money_format(conn, statement_rows, qtbot, monkeypatch) -> None:
    monkeypatch.setattr(controller_mod, "fmt_money", lambda v: f"<{v:.1f}>")
    ctrl = AccountStatementController(conn)
    qtbot.addWidget(ctrl.get_widget())
    ctrl.view.customer_id.setText(str(statement_rows["id"]))
    ctrl.reload()

    labels = ctrl.view.summary_labels
    assert labels["balance"].text() == "<3000.0>"
    assert labels["total_debits"].text() == "<5000.0>"
    assert labels["total_friend_rentals"].text() == "<0.0>"
    assert labels["total_payments"].text() == "1"
