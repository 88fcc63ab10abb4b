from pathlib import Path
import sqlite3
import sys

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== PARTIES ======================== */

CREATE TABLE IF NOT EXISTS friend_companies (
    id    TEXT PRIMARY KEY,
    name  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS customers (
    id                        INTEGER PRIMARY KEY AUTOINCREMENT,
    name                      TEXT NOT NULL,
    company                   TEXT,
    phone                     TEXT,
    email                     TEXT,
    /* a customer that is itself a partner company renting us its billboards */
    linked_friend_company_id  TEXT REFERENCES friend_companies(id) ON DELETE SET NULL
);
CREATE INDEX IF NOT EXISTS idx_customers_name ON customers(name);

/* ======================== BILLBOARDS & CONTRACTS ======================== */

CREATE TABLE IF NOT EXISTS billboards (
    "ID"              INTEGER PRIMARY KEY,
    "Billboard_Name"  TEXT,
    "Size"            TEXT,
    "Municipality"    TEXT,
    "Faces_Count"     INTEGER
);

/* Column names follow the legacy contract sheet the office imports from. */
CREATE TABLE IF NOT EXISTS "Contract" (
    "Contract_Number"   INTEGER PRIMARY KEY,
    customer_id         INTEGER REFERENCES customers(id) ON DELETE SET NULL,
    "Customer Name"     TEXT,
    "Ad Type"           TEXT,
    "Contract Date"     TEXT,
    "End Date"          TEXT,
    "Total"             REAL DEFAULT 0,
    /* JSON object keyed by billboard id: {"12": {"rental_cost": 800, "company_name": "..."}} */
    friend_rental_data  TEXT
);
CREATE INDEX IF NOT EXISTS idx_contract_customer ON "Contract"(customer_id);

/* ======================== PAYMENTS ======================== */

CREATE TABLE IF NOT EXISTS customer_payments (
    id                      TEXT PRIMARY KEY,
    customer_id             INTEGER REFERENCES customers(id) ON DELETE SET NULL,
    customer_name           TEXT,
    contract_number         INTEGER,
    sales_invoice_id        TEXT,
    printed_invoice_id      TEXT,
    composite_task_id       TEXT,
    purchase_invoice_id     TEXT,
    distributed_payment_id  TEXT,
    entry_type              TEXT DEFAULT 'payment',
    amount                  REAL DEFAULT 0,
    paid_at                 TEXT,
    notes                   TEXT,
    method                  TEXT,
    reference               TEXT
);
CREATE INDEX IF NOT EXISTS idx_customer_payments_customer ON customer_payments(customer_id, paid_at);
CREATE INDEX IF NOT EXISTS idx_customer_payments_contract ON customer_payments(contract_number);

/* ======================== INVOICES ======================== */

CREATE TABLE IF NOT EXISTS printed_invoices (
    id              TEXT PRIMARY KEY,
    customer_id     INTEGER REFERENCES customers(id) ON DELETE SET NULL,
    customer_name   TEXT,
    invoice_number  TEXT,
    invoice_type    TEXT,   /* print_only | print_install | install_only */
    invoice_date    TEXT,
    created_at      TEXT DEFAULT CURRENT_TIMESTAMP,
    total_amount    REAL DEFAULT 0,
    paid_amount     REAL DEFAULT 0,
    notes           TEXT
);

CREATE TABLE IF NOT EXISTS sales_invoices (
    id              TEXT PRIMARY KEY,
    customer_id     INTEGER REFERENCES customers(id) ON DELETE SET NULL,
    customer_name   TEXT,
    invoice_number  TEXT,   /* SALE-0001 */
    invoice_name    TEXT,
    invoice_date    TEXT,
    created_at      TEXT DEFAULT CURRENT_TIMESTAMP,
    total_amount    REAL DEFAULT 0,
    paid_amount     REAL DEFAULT 0,
    notes           TEXT
);

/* Barter: goods/services the customer sold to us, offset against their debt. */
CREATE TABLE IF NOT EXISTS purchase_invoices (
    id                TEXT PRIMARY KEY,
    customer_id       INTEGER REFERENCES customers(id) ON DELETE SET NULL,
    customer_name     TEXT,
    invoice_number    TEXT,   /* PUR-0001 */
    invoice_name      TEXT,
    invoice_date      TEXT,
    created_at        TEXT DEFAULT CURRENT_TIMESTAMP,
    total_amount      REAL DEFAULT 0,
    used_as_payment   REAL DEFAULT 0,
    notes             TEXT,
    status            TEXT,
    is_deleted        INTEGER NOT NULL DEFAULT 0 CHECK (is_deleted IN (0,1))
);

CREATE TABLE IF NOT EXISTS customer_general_discounts (
    id              TEXT PRIMARY KEY,
    customer_id     INTEGER REFERENCES customers(id) ON DELETE CASCADE,
    customer_name   TEXT,
    discount_type   TEXT NOT NULL DEFAULT 'fixed',   /* fixed | percentage */
    discount_value  REAL DEFAULT 0,
    reason          TEXT,
    applied_date    TEXT,
    status          TEXT NOT NULL DEFAULT 'active'
);

/* ======================== INSTALLATION ======================== */

CREATE TABLE IF NOT EXISTS installation_tasks (
    id            TEXT PRIMARY KEY,
    contract_id   INTEGER,
    contract_ids  TEXT   /* JSON array of contract numbers */
);

CREATE TABLE IF NOT EXISTS composite_tasks (
    id                    TEXT PRIMARY KEY,
    customer_id           INTEGER REFERENCES customers(id) ON DELETE SET NULL,
    customer_name         TEXT,
    installation_task_id  TEXT REFERENCES installation_tasks(id) ON DELETE SET NULL,
    combined_invoice_id   TEXT,
    task_type             TEXT,   /* new_installation | reinstallation */
    contract_id           INTEGER,
    customer_total        REAL DEFAULT 0,
    invoice_date          TEXT,
    created_at            TEXT DEFAULT CURRENT_TIMESTAMP,
    notes                 TEXT
);

/* ======================== FRIEND RENTALS ======================== */

CREATE TABLE IF NOT EXISTS friend_billboard_rentals (
    id                     TEXT PRIMARY KEY,
    friend_company_id      TEXT REFERENCES friend_companies(id) ON DELETE CASCADE,
    billboard_id           INTEGER,
    contract_number        INTEGER,
    start_date             TEXT,
    end_date               TEXT,
    friend_rental_cost     REAL,
    customer_rental_price  REAL,
    used_as_payment        REAL DEFAULT 0,
    notes                  TEXT
);
CREATE INDEX IF NOT EXISTS idx_friend_rentals_company ON friend_billboard_rentals(friend_company_id, start_date);
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)


def init_schema(db_path: Path | str = "billboards.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "billboards.db"
    init_schema(target)
    print(f"✓ DB applied to {target}")
