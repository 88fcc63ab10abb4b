from __future__ import annotations
import sqlite3

from ...modules.account_statement.records import Customer


# Domain-level error the controller can surface directly (e.g., message box)
class DomainError(Exception):
    pass


_COLUMNS = "id, name, company, phone, email, linked_friend_company_id"


class CustomersRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str | None:
        if s is None:
            return None
        s = s.strip()
        return s or None

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise DomainError(f"{field_label} cannot be empty.")

    @staticmethod
    def _to_customer(r: sqlite3.Row) -> Customer:
        return Customer(**dict(r))

    # ---- Queries ----------------------------------------------------------

    def get(self, customer_id: int) -> Customer | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers WHERE id=?",
            (customer_id,),
        ).fetchone()
        return self._to_customer(r) if r else None

    def find_by_name(self, name: str) -> Customer | None:
        """
        Exact (case-insensitive) name match first, then the first partial
        LIKE match. Returns None for blank names.
        """
        term = self._normalize_text(name)
        if not term:
            return None
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers WHERE name = ? COLLATE NOCASE ORDER BY id LIMIT 1",
            (term,),
        ).fetchone()
        if r is None:
            r = self.conn.execute(
                f"SELECT {_COLUMNS} FROM customers WHERE name LIKE ? ORDER BY id LIMIT 1",
                (f"%{term}%",),
            ).fetchone()
        return self._to_customer(r) if r else None

    # ---- Mutations --------------------------------------------------------

    def create(
        self,
        name: str,
        company: str | None = None,
        phone: str | None = None,
        email: str | None = None,
        linked_friend_company_id: str | None = None,
    ) -> int:
        self._ensure_non_empty(name, "Name")
        cur = self.conn.execute(
            "INSERT INTO customers(name, company, phone, email, linked_friend_company_id) "
            "VALUES (?,?,?,?,?)",
            (
                self._normalize_text(name),
                self._normalize_text(company),
                self._normalize_text(phone),
                self._normalize_text(email),
                self._normalize_text(linked_friend_company_id),
            ),
        )
        self.conn.commit()
        return int(cur.lastrowid)
