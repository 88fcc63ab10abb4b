from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QBrush, QColor

from ...utils.helpers import date_only, fmt_money
from .entries import LedgerLine
from .labels import NO_REFERENCE, kind_label


class LedgerTableModel(QAbstractTableModel):
    """
    Read-only table model over chronologically ordered ledger lines.

    - Amount columns are right-aligned; empty debit/credit cells show blank.
    - KIND_ROLE exposes the raw line kind for delegates and filters.
    - LINE_ROLE returns the LedgerLine itself.
    """

    HEADERS = [
        "#",
        "التاريخ",
        "البيان",
        "النوع",
        "المرجع",
        "مدين",
        "دائن",
        "إجمالي البند",
        "المتبقي من البند",
        "الرصيد",
        "ملاحظات",
    ]

    KIND_ROLE = Qt.UserRole + 1
    LINE_ROLE = Qt.UserRole + 2

    _AMOUNT_COLUMNS = {5, 6, 7, 8, 9}

    def __init__(self, rows: list[LedgerLine] | None = None):
        super().__init__()
        self._rows = list(rows or [])

    # --- Qt model basics ----------------------------------------------------

    def rowCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return 0 if parent.isValid() else len(self.HEADERS)

    @staticmethod
    def _money_or_blank(v: float | None) -> str:
        return fmt_money(v) if v else ""

    def _display(self, row: int, r: LedgerLine, c: int):
        if c == 0:
            return row + 1
        if c == 1:
            return date_only(r.date) or "—"
        if c == 2:
            return r.description
        if c == 3:
            return kind_label(r.kind, r.entry_type, bool(r.distributed_payment_id))
        if c == 4:
            return r.reference or NO_REFERENCE
        if c == 5:
            return self._money_or_blank(r.debit)
        if c == 6:
            return self._money_or_blank(r.credit)
        if c == 7:
            return fmt_money(r.item_total) if r.item_total is not None else "—"
        if c == 8:
            return fmt_money(r.item_remaining) if r.item_remaining is not None else "—"
        if c == 9:
            return fmt_money(r.running_balance)
        if c == 10:
            return r.notes or NO_REFERENCE
        return None

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None

        r = self._rows[index.row()]
        c = index.column()

        if role in (Qt.DisplayRole, Qt.EditRole):
            return self._display(index.row(), r, c)

        if role == Qt.TextAlignmentRole and c in self._AMOUNT_COLUMNS:
            return Qt.AlignRight | Qt.AlignVCenter

        if role == Qt.ToolTipRole and c in (2, 4, 10):
            return r.details or None

        if role == Qt.ForegroundRole:
            if c == 5 and r.debit:
                return QBrush(QColor("#b91c1c"))
            if c == 6 and r.credit:
                return QBrush(QColor("#15803d"))
            if c == 9 and r.running_balance < 0:
                return QBrush(QColor("#15803d"))

        if role == self.KIND_ROLE:
            return r.kind

        if role == self.LINE_ROLE:
            return r

        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    # --- helpers ------------------------------------------------------------

    def at(self, row: int) -> LedgerLine:
        return self._rows[row]

    def replace(self, rows: list[LedgerLine]):
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()
