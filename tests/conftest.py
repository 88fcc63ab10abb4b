# billboard_accounts/tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets its own in-memory SQLite DB with the app schema
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON
# - `seed` fixture inserts rows table by table (only the columns given)
# - Silence benign Qt signal warnings
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import re
import sqlite3
from typing import Any, Callable, Dict

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6 import QtCore  # noqa: E402

from billboard_accounts.database import get_connection  # noqa: E402


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Silence benign Qt warnings ----------
_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QObject::disconnect: Unexpected null parameter",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
]

@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    original = QtCore.qInstallMessageHandler(None)
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]

    def handler(msg_type, context, message):
        text = str(message)
        for r in rx:
            if r.search(text):
                return  # swallow benign messages
        QtCore.qInstallMessageHandler(None)
        try:
            QtCore.qDebug(message)
        finally:
            QtCore.qInstallMessageHandler(handler)

    QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- Per-test in-memory DB ----------
@pytest.fixture()
def conn():
    con = get_connection(":memory:")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def seed(conn: sqlite3.Connection) -> Callable[..., int]:
    """
    seed(table, **columns) -> lastrowid

    Column names with spaces (legacy "Contract" sheet) are passed through a
    dict: seed('"Contract"', **{"Contract_Number": 1, "Ad Type": "x"}).
    """
    def _insert(table: str, **cols: Any) -> int:
        names = ", ".join(f'"{k}"' for k in cols)
        marks = ", ".join("?" for _ in cols)
        cur = conn.execute(f"INSERT INTO {table} ({names}) VALUES ({marks})", tuple(cols.values()))
        conn.commit()
        return int(cur.lastrowid)

    return _insert


@pytest.fixture()
def customer(seed) -> Dict[str, Any]:
    """A plain customer with no partner company link."""
    cid = seed("customers", name="شركة النور للإعلان", company="النور", phone="0910000000")
    return {"id": cid, "name": "شركة النور للإعلان"}
