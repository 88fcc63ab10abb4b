from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QListWidget,
    QListWidgetItem,
    QStackedWidget,
    QLabel,
    QSizePolicy,
)
from PySide6.QtCore import Qt
from importlib import import_module
from pathlib import Path
import logging
import sys

from .constants import APP_NAME, STYLE_FILE
from .database import get_connection
from .modules.base_module import BaseModule
from .utils.loggers import get_logger

_log = logging.getLogger(__name__)


def load_qss() -> str:
    qss = ""
    f = Path(__file__).resolve().parent / STYLE_FILE
    if f.exists():
        qss = f.read_text(encoding="utf-8")
    return qss


def _lazy_get(name: str, attr: str):
    """Import a module by name and fetch an attribute from it, with a clear error if missing."""
    try:
        mod = import_module(name)
    except Exception as e:
        raise ImportError(f"Failed to import module '{name}': {e}") from e
    try:
        return getattr(mod, attr)
    except AttributeError as e:
        raise ImportError(f"'{attr}' not found in module '{name}'.") from e


class MainWindow(QMainWindow):
    def __init__(self, conn):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setLayoutDirection(Qt.RightToLeft)
        self.setMinimumSize(1000, 600)

        self.conn = conn

        # ---- Central layout: side nav + stacked pages ----
        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(130)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()

        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.addWidget(self.nav)
        row_lay.addWidget(self.stack, 1)
        layout.addWidget(row, 1)

        self.modules: list[tuple[str, BaseModule]] = []
        self.nav.currentRowChanged.connect(self.stack.setCurrentIndex)

        self._add_module_safe(
            "كشف حساب",
            "billboard_accounts.modules.account_statement.controller",
            "AccountStatementController",
            self.conn,
        )

        if self.nav.count():
            self.nav.setCurrentRow(0)

    def _add_module_safe(self, title: str, module_path: str, class_name: str, *args, **kwargs):
        """Import and instantiate a controller. On any error, log it and add a placeholder."""
        try:
            Controller = _lazy_get(module_path, class_name)
            controller = Controller(*args, **kwargs)
        except Exception as e:
            _log.error("[%s] failed to load: %s", title, e, exc_info=True)
            self.add_placeholder(title)
            return
        self.add_module(title, controller)

    def add_module(self, title: str, module: BaseModule):
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(module.get_widget())
        self.modules.append((title, module))

    def add_placeholder(self, title: str):
        label = QLabel(f"{title}\n\nLoading failed")
        label.setAlignment(Qt.AlignCenter)
        self.nav.addItem(QListWidgetItem(title))
        self.stack.addWidget(label)


def main():
    get_logger()

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    # DB connection (ensure schema, etc.)
    conn = get_connection()

    qss = load_qss()
    if qss:
        app.setStyleSheet(qss)

    win = MainWindow(conn)
    win.resize(1200, 700)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
