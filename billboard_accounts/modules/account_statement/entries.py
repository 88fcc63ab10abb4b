# billboard_accounts/modules/account_statement/entries.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LedgerLine:
    """
    One financial event on a customer's account statement.

    `debit` is owed by the customer, `credit` reduces the debt; both are
    non-negative. `running_balance` and (for payment/contract lines)
    `item_remaining` are filled by the chronological pass.
    """

    id: str
    date: Optional[str]
    kind: str
    description: str
    debit: float = 0.0
    credit: float = 0.0
    running_balance: float = 0.0
    item_total: Optional[float] = None
    item_remaining: Optional[float] = None
    reference: str = "—"
    notes: str = "—"

    # display-only extras
    entry_type: Optional[str] = None
    details: str = ""
    original_amount: Optional[float] = None
    paid_amount: Optional[float] = None
    remaining_amount: Optional[float] = None
    contract_number: Optional[str] = None
    target_contract_number: Optional[str] = None
    ad_type: Optional[str] = None
    source_invoice: Optional[str] = None
    method: Optional[str] = None
    distributed_payment_id: Optional[str] = None
    distributed_payment_total: Optional[float] = None

    @property
    def tracking_contract(self) -> Optional[str]:
        """Contract whose remaining balance this line moves (contract lines and linked payments)."""
        return self.contract_number or self.target_contract_number

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LedgerSummary:
    total_debits: float = 0.0
    total_credits: float = 0.0
    balance: float = 0.0
    total_friend_rentals: float = 0.0
    balance_without_friend_rentals: float = 0.0
    total_purchase_invoices: float = 0.0
    total_sales_invoices: float = 0.0
    total_contracts: int = 0
    active_contracts: int = 0
    total_payments: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CustomerLedger:
    lines: List[LedgerLine] = field(default_factory=list)
    summary: LedgerSummary = field(default_factory=LedgerSummary)

    def __iter__(self):
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def closing_balance(self) -> float:
        return self.lines[-1].running_balance if self.lines else 0.0
