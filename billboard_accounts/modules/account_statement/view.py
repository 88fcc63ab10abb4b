from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QGridLayout,
    QPushButton,
    QLineEdit,
    QLabel,
    QCheckBox,
    QComboBox,
    QDateEdit,
    QGroupBox,
)
from PySide6.QtCore import Qt, QDate

from ...constants import CURRENCIES, DEFAULT_CURRENCY_CODE
from ...widgets.table_view import TableView


class AccountStatementView(QWidget):
    """
    Account statement screen:
      - Filter bar: customer id/name, optional date range, exclude friend rentals, currency
      - Ledger table (chronological, not sortable)
      - Summary panel + Print button
    """

    SUMMARY_FIELDS = [
        ("total_debits", "إجمالي المدين"),
        ("total_credits", "إجمالي الدائن"),
        ("balance", "الرصيد"),
        ("total_friend_rentals", "إيجارات اللوحات الصديقة"),
        ("balance_without_friend_rentals", "الرصيد بدون الإيجارات"),
        ("total_purchase_invoices", "فواتير المشتريات"),
        ("total_sales_invoices", "فواتير المبيعات"),
        ("total_contracts", "عدد العقود"),
        ("active_contracts", "العقود النشطة"),
        ("total_payments", "عدد الدفعات"),
    ]

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setLayoutDirection(Qt.RightToLeft)
        root = QVBoxLayout(self)

        # ---- Filter bar ---------------------------------------------------
        bar = QHBoxLayout()

        bar.addWidget(QLabel("رقم الزبون:"))
        self.customer_id = QLineEdit()
        self.customer_id.setPlaceholderText("ID")
        self.customer_id.setMaximumWidth(90)
        bar.addWidget(self.customer_id)

        bar.addWidget(QLabel("اسم الزبون:"))
        self.customer_name = QLineEdit()
        self.customer_name.setPlaceholderText("الاسم (بحث جزئي)")
        bar.addWidget(self.customer_name, 2)

        self.chk_date_range = QCheckBox("تصفية الدفعات حسب التاريخ")
        bar.addWidget(self.chk_date_range)

        today = QDate.currentDate()
        self.date_from = QDateEdit(today.addMonths(-1))
        self.date_from.setCalendarPopup(True)
        self.date_from.setDisplayFormat("yyyy-MM-dd")
        self.date_to = QDateEdit(today)
        self.date_to.setCalendarPopup(True)
        self.date_to.setDisplayFormat("yyyy-MM-dd")
        bar.addWidget(QLabel("من:"))
        bar.addWidget(self.date_from)
        bar.addWidget(QLabel("إلى:"))
        bar.addWidget(self.date_to)

        self.chk_exclude_friend_rentals = QCheckBox("استبعاد إيجارات اللوحات الصديقة")
        bar.addWidget(self.chk_exclude_friend_rentals)

        bar.addWidget(QLabel("العملة:"))
        self.currency = QComboBox()
        for c in CURRENCIES:
            self.currency.addItem(f"{c['name']} ({c['symbol']})", c["code"])
        self.currency.setCurrentIndex(max(0, self.currency.findData(DEFAULT_CURRENCY_CODE)))
        bar.addWidget(self.currency)

        self.btn_load = QPushButton("عرض الكشف")
        bar.addWidget(self.btn_load)

        root.addLayout(bar)
        self.set_date_range_enabled(False)

        # ---- Header: resolved customer ------------------------------------
        self.lbl_customer = QLabel("")
        self.lbl_customer.setObjectName("statementCustomer")
        root.addWidget(self.lbl_customer)

        # ---- Ledger table -------------------------------------------------
        self.table = TableView(rtl=True, sortable=False)
        root.addWidget(self.table, 1)

        # ---- Summary + actions --------------------------------------------
        box = QGroupBox("ملخص الحساب")
        grid = QGridLayout(box)
        self.summary_labels: dict[str, QLabel] = {}
        for i, (key, caption) in enumerate(self.SUMMARY_FIELDS):
            value = QLabel("0")
            value.setTextInteractionFlags(Qt.TextSelectableByMouse)
            grid.addWidget(QLabel(f"{caption}:"), i // 5, (i % 5) * 2)
            grid.addWidget(value, i // 5, (i % 5) * 2 + 1)
            self.summary_labels[key] = value
        root.addWidget(box)

        actions = QHBoxLayout()
        actions.addStretch(1)
        self.btn_print = QPushButton("طباعة الكشف")
        self.btn_print.setEnabled(False)
        actions.addWidget(self.btn_print)
        root.addLayout(actions)

    def set_date_range_enabled(self, on: bool) -> None:
        self.date_from.setEnabled(on)
        self.date_to.setEnabled(on)

    def set_summary(self, values: dict[str, str]) -> None:
        for key, label in self.summary_labels.items():
            label.setText(values.get(key, "0"))
