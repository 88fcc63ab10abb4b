# billboard_accounts/database/repositories/statement_repo.py
from __future__ import annotations

import logging
import sqlite3
from typing import Callable, List, Optional, Sequence, TypeVar

from ...modules.account_statement.ledger import filter_payments
from ...modules.account_statement.records import (
    CompositeTask,
    Contract,
    Customer,
    DateRange,
    FriendBillboardRental,
    GeneralDiscount,
    Payment,
    PrintedInvoice,
    PurchaseInvoice,
    SalesInvoice,
    StatementSources,
)

_log = logging.getLogger(__name__)

T = TypeVar("T")


class StatementRepo:
    """
    Read-only queries feeding one customer's account statement.

    Customer-keyed fetches look rows up by customer id first; rows written by
    older screens only carry the customer's name, so an empty id lookup falls
    back to `customer_name LIKE %name%`.

    A failing query is logged and yields an empty list; a statement with a
    missing section is preferable to no statement at all.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    # ----------------------------------------------------------------------
    # helpers
    # ----------------------------------------------------------------------

    def _rows(self, label: str, sql: str, params: Sequence = ()) -> List[sqlite3.Row]:
        try:
            return list(self.conn.execute(sql, tuple(params)))
        except sqlite3.Error as e:
            _log.warning("Failed to load %s: %s", label, e)
            return []

    def _by_customer(
        self,
        label: str,
        select: str,
        customer: Customer,
        *,
        id_col: str,
        name_col: str,
        where: str = "",
        order_by: str = "",
        factory: Callable[[sqlite3.Row], T],
    ) -> List[T]:
        extra = f" AND ({where})" if where else ""
        order = f" ORDER BY {order_by}" if order_by else ""
        rows: List[sqlite3.Row] = []
        if customer.id is not None:
            rows = self._rows(label, f"{select} WHERE {id_col} = ?{extra}{order}", (customer.id,))
        if not rows and customer.name and customer.name.strip():
            rows = self._rows(
                label,
                f"{select} WHERE {name_col} LIKE ?{extra}{order}",
                (f"%{customer.name.strip()}%",),
            )
        out: List[T] = []
        for r in rows:
            try:
                out.append(factory(r))
            except (TypeError, ValueError, KeyError) as e:
                _log.warning("Skipping malformed %s row: %s", label, e)
        return out

    # ----------------------------------------------------------------------
    # collections
    # ----------------------------------------------------------------------

    def fetch_contracts(self, customer: Customer) -> List[Contract]:
        return self._by_customer(
            "contracts",
            'SELECT * FROM "Contract" c',
            customer,
            id_col="c.customer_id",
            name_col='c."Customer Name"',
            order_by='c."Contract Date"',
            factory=Contract.from_row,
        )

    def fetch_payments(self, customer: Customer, date_range: Optional[DateRange] = None) -> List[Payment]:
        payments = self._by_customer(
            "payments",
            "SELECT * FROM customer_payments p",
            customer,
            id_col="p.customer_id",
            name_col="p.customer_name",
            order_by="p.paid_at",
            factory=Payment.from_row,
        )
        if date_range is None:
            return payments
        return filter_payments(payments, date_range)

    def fetch_printed_invoices(self, customer: Customer) -> List[PrintedInvoice]:
        return self._by_customer(
            "printed invoices",
            "SELECT * FROM printed_invoices i",
            customer,
            id_col="i.customer_id",
            name_col="i.customer_name",
            order_by="i.created_at",
            factory=PrintedInvoice.from_row,
        )

    def fetch_general_discounts(self, customer: Customer) -> List[GeneralDiscount]:
        return self._by_customer(
            "general discounts",
            "SELECT * FROM customer_general_discounts d",
            customer,
            id_col="d.customer_id",
            name_col="d.customer_name",
            where="LOWER(COALESCE(d.status, 'active')) = 'active'",
            order_by="d.applied_date",
            factory=GeneralDiscount.from_row,
        )

    def fetch_purchase_invoices(self, customer: Customer) -> List[PurchaseInvoice]:
        return self._by_customer(
            "purchase invoices",
            "SELECT * FROM purchase_invoices i",
            customer,
            id_col="i.customer_id",
            name_col="i.customer_name",
            where=(
                "COALESCE(i.is_deleted, 0) = 0 "
                "AND LOWER(COALESCE(i.status, '')) NOT IN ('deleted', 'cancelled')"
            ),
            order_by="i.created_at",
            factory=PurchaseInvoice.from_row,
        )

    def fetch_sales_invoices(self, customer: Customer) -> List[SalesInvoice]:
        return self._by_customer(
            "sales invoices",
            "SELECT * FROM sales_invoices i",
            customer,
            id_col="i.customer_id",
            name_col="i.customer_name",
            order_by="i.created_at",
            factory=SalesInvoice.from_row,
        )

    def fetch_composite_tasks(self, customer: Customer) -> List[CompositeTask]:
        select = """
        SELECT
            ct.*,
            it.contract_ids AS installation_contract_ids,
            it.contract_id  AS installation_contract_id
        FROM composite_tasks ct
        LEFT JOIN installation_tasks it ON it.id = ct.installation_task_id
        """
        return self._by_customer(
            "composite tasks",
            select,
            customer,
            id_col="ct.customer_id",
            name_col="ct.customer_name",
            order_by="ct.created_at",
            factory=CompositeTask.from_row,
        )

    def fetch_friend_rentals(self, friend_company_id: Optional[str]) -> List[FriendBillboardRental]:
        """Rentals of the partner company linked to this customer (none when unlinked)."""
        if not friend_company_id:
            return []
        sql = """
        SELECT
            r.*,
            b."Billboard_Name" AS billboard_name
        FROM friend_billboard_rentals r
        LEFT JOIN billboards b ON b."ID" = r.billboard_id
        WHERE r.friend_company_id = ?
        ORDER BY r.start_date
        """
        out: List[FriendBillboardRental] = []
        for r in self._rows("friend rentals", sql, (friend_company_id,)):
            out.append(FriendBillboardRental.from_row(r))
        return out

    def fetch_sources(self, customer: Customer, date_range: Optional[DateRange] = None) -> StatementSources:
        sources = StatementSources(
            contracts=self.fetch_contracts(customer),
            general_discounts=self.fetch_general_discounts(customer),
            printed_invoices=self.fetch_printed_invoices(customer),
            composite_tasks=self.fetch_composite_tasks(customer),
            purchase_invoices=self.fetch_purchase_invoices(customer),
            sales_invoices=self.fetch_sales_invoices(customer),
            friend_rentals=self.fetch_friend_rentals(customer.linked_friend_company_id),
            payments=self.fetch_payments(customer, date_range),
        )
        _log.debug("Statement sources for customer %s: %s", customer.id, sources.counts())
        return sources
