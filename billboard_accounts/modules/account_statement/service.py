from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ...database.repositories.customers_repo import CustomersRepo
from ...database.repositories.statement_repo import StatementRepo
from .entries import CustomerLedger
from .ledger import build_customer_ledger
from .records import Customer, DateRange

_log = logging.getLogger(__name__)


@dataclass
class AccountStatement:
    customer: Customer
    ledger: CustomerLedger
    date_range: Optional[DateRange] = None
    exclude_friend_rentals: bool = False
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "customer": self.customer.__dict__,
            "lines": [line.to_dict() for line in self.ledger.lines],
            "summary": self.ledger.summary.to_dict(),
            "date_range": self.date_range.__dict__ if self.date_range else None,
            "exclude_friend_rentals": self.exclude_friend_rentals,
        }


class AccountStatementService:
    """
    Presenter/service assembling a customer's account statement for the UI.

    Resolves the customer (id first, then name), pulls every source
    collection through StatementRepo and hands them to the pure ledger
    builder. Each call rebuilds from scratch.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.customers = CustomersRepo(conn)
        self.repo = StatementRepo(conn)

    def resolve_customer(self, customer_id: Optional[int], customer_name: Optional[str]) -> Customer:
        """
        Known customer row when one matches; otherwise a placeholder carrying
        the given id/name so name-keyed rows can still be found.
        """
        customer: Optional[Customer] = None
        try:
            if customer_id is not None:
                customer = self.customers.get(customer_id)
            if customer is None and customer_name:
                customer = self.customers.find_by_name(customer_name)
        except sqlite3.Error as e:
            _log.warning("Failed to load customer id=%s name=%r: %s", customer_id, customer_name, e)
            customer = None
        if customer is None:
            _log.info("No customer row for id=%s name=%r; using name lookup only", customer_id, customer_name)
            customer = Customer(id=customer_id, name=(customer_name or "").strip())
        return customer

    def build(
        self,
        customer_id: Optional[int],
        customer_name: Optional[str] = None,
        date_range: Optional[DateRange] = None,
        exclude_friend_rentals: bool = False,
        *,
        now: Optional[datetime] = None,
    ) -> AccountStatement:
        customer = self.resolve_customer(customer_id, customer_name)
        # the ledger builder applies the date range to payments
        sources = self.repo.fetch_sources(customer)
        ledger = build_customer_ledger(
            customer.id,
            customer.name,
            date_range,
            exclude_friend_rentals,
            sources,
            now=now,
        )
        return AccountStatement(
            customer=customer,
            ledger=ledger,
            date_range=date_range,
            exclude_friend_rentals=exclude_friend_rentals,
        )
