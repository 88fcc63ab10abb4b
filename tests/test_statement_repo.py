# billboard_accounts/tests/test_statement_repo.py
from __future__ import annotations

import logging
import sqlite3

import pytest

from billboard_accounts.database.repositories import (
    CustomersDomainError,
    CustomersRepo,
    StatementRepo,
)
from billboard_accounts.modules.account_statement.records import Customer, DateRange


def _contract(seed, number: int, **cols) -> None:
    seed('"Contract"', **{"Contract_Number": number, **cols})


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------

def test_customers_get_and_find_by_name(conn: sqlite3.Connection, customer: dict) -> None:
    repo = CustomersRepo(conn)
    c = repo.get(customer["id"])
    assert c is not None and c.name == customer["name"]
    assert c.phone == "0910000000"

    assert repo.find_by_name("شركة النور للإعلان").id == customer["id"]
    assert repo.find_by_name("النور").id == customer["id"]
    assert repo.find_by_name("غير موجود") is None
    assert repo.find_by_name("   ") is None
    assert repo.get(9999) is None


def test_customers_create_validates_name(conn: sqlite3.Connection) -> None:
    repo = CustomersRepo(conn)
    with pytest.raises(CustomersDomainError):
        repo.create("  ")
    new_id = repo.create("  مكتب الشروق ", phone=" ")
    c = repo.get(new_id)
    assert c.name == "مكتب الشروق"
    assert c.phone is None


# ---------------------------------------------------------------------------
# Statement sources
# ---------------------------------------------------------------------------

def test_contracts_by_id_then_name_fallback(conn: sqlite3.Connection, seed, customer: dict) -> None:
    repo = StatementRepo(conn)
    cust = Customer(id=customer["id"], name=customer["name"])

    # only a name-keyed row: found through the LIKE fallback
    _contract(seed, 10, **{"Customer Name": "شركة النور للإعلان - فرع بنغازي", "Total": 900})
    contracts = repo.fetch_contracts(cust)
    assert [c.contract_number for c in contracts] == ["10"]

    # once an id-keyed row exists the name fallback is not used
    _contract(seed, 1127, customer_id=customer["id"], **{
        "Customer Name": customer["name"],
        "Ad Type": "تجاري",
        "Contract Date": "2024-01-01",
        "End Date": "2025-01-01",
        "Total": 5000,
        "friend_rental_data": '{"12": {"rental_cost": 400, "company_name": "شركة صديقة"}}',
    })
    contracts = repo.fetch_contracts(cust)
    assert [c.contract_number for c in contracts] == ["1127"]
    c = contracts[0]
    assert c.ad_type == "تجاري"
    assert c.total == pytest.approx(5000.0)
    assert c.friend_rentals[0].billboard_id == "12"
    assert c.friend_rentals[0].rental_cost == pytest.approx(400.0)


def test_payments_date_range(conn: sqlite3.Connection, seed, customer: dict) -> None:
    for pid, paid_at in (("p1", "2024-01-15"), ("p2", "2024-03-01T09:30:00"), ("p3", None)):
        seed("customer_payments", id=pid, customer_id=customer["id"], amount=100, paid_at=paid_at,
             entry_type="receipt", contract_number=1127)
    repo = StatementRepo(conn)
    cust = Customer(id=customer["id"], name=customer["name"])

    assert {p.id for p in repo.fetch_payments(cust)} == {"p1", "p2", "p3"}
    ranged = repo.fetch_payments(cust, DateRange("2024-02-01", "2024-12-31"))
    assert [p.id for p in ranged] == ["p2"]
    assert ranged[0].contract_number == "1127"


def test_void_purchase_invoices_and_inactive_discounts_are_filtered(conn, seed, customer) -> None:
    cid = customer["id"]
    seed("purchase_invoices", id="a", customer_id=cid, total_amount=100)
    seed("purchase_invoices", id="b", customer_id=cid, total_amount=100, is_deleted=1)
    seed("purchase_invoices", id="c", customer_id=cid, total_amount=100, status="cancelled")
    seed("customer_general_discounts", id="d1", customer_id=cid, discount_value=50, status="active")
    seed("customer_general_discounts", id="d2", customer_id=cid, discount_value=70, status="cancelled")

    repo = StatementRepo(conn)
    cust = Customer(id=cid, name=customer["name"])
    assert [p.id for p in repo.fetch_purchase_invoices(cust)] == ["a"]
    assert [d.id for d in repo.fetch_general_discounts(cust)] == ["d1"]


def test_composite_tasks_carry_installation_contracts(conn, seed, customer) -> None:
    seed("installation_tasks", id="it1", contract_id=1127, contract_ids="[1127, 1128.0]")
    seed("composite_tasks", id="ct1", customer_id=customer["id"], installation_task_id="it1",
         task_type="new_installation", customer_total=300, combined_invoice_id="inv-9")
    seed("composite_tasks", id="ct2", customer_id=customer["id"], contract_id=55, customer_total=100)

    tasks = {t.id: t for t in StatementRepo(conn).fetch_composite_tasks(Customer(id=customer["id"], name=""))}
    assert tasks["ct1"].linked_contract_ids == ["1127", "1128"]
    assert tasks["ct1"].combined_invoice_id == "inv-9"
    assert tasks["ct2"].linked_contract_ids == []
    assert tasks["ct2"].contract_id == "55"


def test_friend_rentals_follow_the_linked_company(conn, seed) -> None:
    seed("friend_companies", id="fc1", name="شركة صديقة")
    seed("billboards", ID=12, Billboard_Name="لوحة الكورنيش")
    cid = seed("customers", name="شركة صديقة", linked_friend_company_id="fc1")
    seed("friend_billboard_rentals", id="r1", friend_company_id="fc1", billboard_id=12,
         friend_rental_cost=800, used_as_payment=300, start_date="2024-02-01")

    repo = StatementRepo(conn)
    rentals = repo.fetch_friend_rentals("fc1")
    assert len(rentals) == 1
    assert rentals[0].billboard_name == "لوحة الكورنيش"
    assert rentals[0].cost == pytest.approx(800.0)
    assert repo.fetch_friend_rentals(None) == []

    sources = repo.fetch_sources(CustomersRepo(conn).get(cid))
    assert [r.id for r in sources.friend_rentals] == ["r1"]


def test_failed_fetch_is_logged_and_empty(conn, customer, caplog) -> None:
    conn.execute("DROP TABLE sales_invoices")
    repo = StatementRepo(conn)
    with caplog.at_level(logging.WARNING):
        result = repo.fetch_sales_invoices(Customer(id=customer["id"], name=customer["name"]))
    assert result == []
    assert "sales invoices" in caplog.text


def test_fetch_sources_counts(conn, seed, customer) -> None:
    cid = customer["id"]
    _contract(seed, 1, customer_id=cid, Total=100)
    seed("printed_invoices", id="pr1", customer_id=cid, total_amount=20)
    seed("sales_invoices", id="s1", customer_name=customer["name"], total_amount=30)

    sources = StatementRepo(conn).fetch_sources(Customer(id=cid, name=customer["name"]))
    counts = sources.counts()
    assert counts["contracts"] == 1
    assert counts["printed_invoices"] == 1
    # name-keyed only
    assert counts["sales_invoices"] == 1
    assert counts["payments"] == 0
