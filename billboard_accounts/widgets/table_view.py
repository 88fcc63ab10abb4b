from PySide6.QtCore import Qt
from PySide6.QtWidgets import QTableView


class TableView(QTableView):
    """Read-only row-selecting table; `rtl=True` lays columns out right-to-left."""

    def __init__(self, parent=None, *, rtl: bool = False, sortable: bool = True):
        super().__init__(parent)
        self.setSortingEnabled(sortable)
        self.setAlternatingRowColors(True)
        self.setSelectionBehavior(QTableView.SelectRows)
        self.setSelectionMode(QTableView.SingleSelection)
        self.setEditTriggers(QTableView.NoEditTriggers)
        self.horizontalHeader().setStretchLastSection(True)
        if rtl:
            self.setLayoutDirection(Qt.RightToLeft)
