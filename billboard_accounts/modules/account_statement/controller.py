from __future__ import annotations

import logging
import os
import sqlite3
import subprocess
import sys
import tempfile
from typing import Optional

from PySide6.QtWidgets import QWidget

from ..base_module import BaseModule
from ...utils.helpers import fmt_money
from ...utils.ui_helpers import error, info
from .model import LedgerTableModel
from .printing import export_statement_pdf, render_statement_html
from .records import DateRange
from .service import AccountStatement, AccountStatementService
from .view import AccountStatementView

_log = logging.getLogger(__name__)


class AccountStatementController(BaseModule):
    """
    Customer account statement screen.

    Key behavior:
      - The statement is rebuilt from scratch whenever a filter changes
        (customer, date range, friend-rental toggle); nothing is cached
        between builds.
      - The currency selector only relabels printed amounts.
      - Print renders the statement to a temporary PDF and opens it with the
        platform viewer.
    """

    title = "كشف حساب"

    def __init__(self, conn: sqlite3.Connection):
        super().__init__()
        self.conn = conn
        self.service = AccountStatementService(conn)
        self.view = AccountStatementView()
        self.base = LedgerTableModel([])
        self.view.table.setModel(self.base)
        self.statement: Optional[AccountStatement] = None
        self._wire()

    # ------------------------------------------------------------------ #
    # BaseModule API
    # ------------------------------------------------------------------ #

    def get_widget(self) -> QWidget:
        return self.view

    def on_db_reopened(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.service = AccountStatementService(conn)
        self.reload()

    # ------------------------------------------------------------------ #
    # Wiring
    # ------------------------------------------------------------------ #

    def _wire(self):
        v = self.view
        v.btn_load.clicked.connect(self.reload)
        v.customer_id.returnPressed.connect(self.reload)
        v.customer_name.returnPressed.connect(self.reload)
        v.chk_date_range.toggled.connect(self._on_date_range_toggled)
        v.date_from.dateChanged.connect(self._on_filter_changed)
        v.date_to.dateChanged.connect(self._on_filter_changed)
        v.chk_exclude_friend_rentals.toggled.connect(self._on_filter_changed)
        v.btn_print.clicked.connect(self._on_print)

    def _on_date_range_toggled(self, on: bool):
        self.view.set_date_range_enabled(on)
        self._on_filter_changed()

    def _on_filter_changed(self, *_):
        # only rebuild once a statement has been requested
        if self.statement is not None:
            self.reload()

    # ------------------------------------------------------------------ #
    # Filters
    # ------------------------------------------------------------------ #

    def _customer_id(self) -> Optional[int]:
        text = self.view.customer_id.text().strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return None

    def _customer_name(self) -> Optional[str]:
        return self.view.customer_name.text().strip() or None

    def _date_range(self) -> Optional[DateRange]:
        if not self.view.chk_date_range.isChecked():
            return None
        return DateRange(
            start=self.view.date_from.date().toString("yyyy-MM-dd"),
            end=self.view.date_to.date().toString("yyyy-MM-dd"),
        )

    def _currency_code(self) -> str:
        return self.view.currency.currentData() or ""

    # ------------------------------------------------------------------ #
    # Build
    # ------------------------------------------------------------------ #

    def reload(self, *_) -> Optional[AccountStatement]:
        customer_id = self._customer_id()
        customer_name = self._customer_name()
        if customer_id is None and not customer_name:
            info(self.view, "كشف حساب", "أدخل رقم الزبون أو اسمه.")
            return None

        self.statement = self.service.build(
            customer_id,
            customer_name,
            self._date_range(),
            self.view.chk_exclude_friend_rentals.isChecked(),
        )
        self._show(self.statement)
        return self.statement

    def _show(self, statement: AccountStatement) -> None:
        self.base.replace(statement.ledger.lines)
        self.view.table.resizeColumnsToContents()

        c = statement.customer
        who = c.name or "—"
        if c.id is not None:
            who = f"{who} (#{c.id})"
        self.view.lbl_customer.setText(f"الزبون: {who}")

        s = statement.ledger.summary
        money = {
            k: fmt_money(getattr(s, k))
            for k in (
                "total_debits",
                "total_credits",
                "balance",
                "total_friend_rentals",
                "balance_without_friend_rentals",
                "total_purchase_invoices",
                "total_sales_invoices",
            )
        }
        counts = {k: str(getattr(s, k)) for k in ("total_contracts", "active_contracts", "total_payments")}
        self.view.set_summary({**money, **counts})
        self.view.btn_print.setEnabled(True)

    # ------------------------------------------------------------------ #
    # Print
    # ------------------------------------------------------------------ #

    def _on_print(self):
        if self.statement is None:
            return
        html = render_statement_html(self.statement, self._currency_code())

        pdf_dir = os.path.join(tempfile.gettempdir(), "billboard_account_statements")
        safe_name = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in (self.statement.customer.name or "customer"))
        file_path = os.path.join(pdf_dir, f"statement_{safe_name}.pdf")

        try:
            export_statement_pdf(html, file_path)
        except Exception as e:
            _log.error("Failed to render account statement PDF to %s: %s", file_path, e, exc_info=True)
            error(self.view, "كشف حساب", f"تعذر إنشاء ملف PDF:\n{e}")
            return

        self._open_file(file_path)

    @staticmethod
    def _open_file(path: str) -> None:
        try:
            if sys.platform.startswith("win"):
                os.startfile(path)  # type: ignore[attr-defined]
                return
            opener = "open" if sys.platform.startswith("darwin") else "xdg-open"
            cp = subprocess.run([opener, path], check=False, timeout=5)
            if cp.returncode != 0:
                _log.warning("PDF viewer returned non-zero exit code %s for %s", cp.returncode, path)
        except subprocess.TimeoutExpired:
            _log.warning("Timed out while trying to open account statement PDF: %s", path)
        except OSError as e:
            _log.warning("Failed to open account statement PDF %s: %s", path, e)
