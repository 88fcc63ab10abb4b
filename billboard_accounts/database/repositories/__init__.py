# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from billboard_accounts.database.repositories import (
        CustomersRepo, Customer, CustomersDomainError,
        StatementRepo,
    )
"""

# ---------------- Customers ----------------
from .customers_repo import (
    CustomersRepo,
    Customer,
    DomainError as CustomersDomainError,
)

# ---------------- Statements ---------------
from .statement_repo import StatementRepo

__all__ = [
    # customers_repo
    "CustomersRepo",
    "Customer",
    "CustomersDomainError",
    # statement_repo
    "StatementRepo",
]
