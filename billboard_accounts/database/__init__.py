# database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3

from ..config import DB_PATH
from ..constants import TABLE_SCHEMA_VERSION, SCHEMA_VERSION
from . import schema as schema_module


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)
    row = conn.execute(
        f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;"
    ).fetchone()
    if row is None:
        conn.execute(
            f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?);",
            (SCHEMA_VERSION,),
        )


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode (file databases)
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures the schema is applied idempotently.

    Pass ":memory:" for a throwaway database (tests).
    """
    target = str(db_path) if db_path is not None else str(DB_PATH)
    if target != ":memory:":
        Path(target).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(target)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    if target != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL;")

    schema_module.apply_schema(conn)
    _ensure_version_table(conn)

    conn.commit()
    return conn


__all__ = [
    "get_connection",
]
