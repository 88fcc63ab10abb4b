# billboard_accounts/modules/account_statement/records.py
"""
Typed source records consumed by the ledger builder.

Every record is a read-only projection of one table row. ``from_row`` accepts a
``sqlite3.Row`` or a plain mapping and applies typed defaults:

  - money fields that do not parse to a finite number become 0.0
  - blank text becomes None
  - ids are kept as text; contract numbers are normalised with ``contract_key``

Do not import repos or open DB connections here.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ...utils.validators import clean_text, to_amount, to_optional_amount

_log = logging.getLogger(__name__)

__all__ = [
    "contract_key",
    "Customer",
    "DateRange",
    "Contract",
    "FriendRentalEntry",
    "GeneralDiscount",
    "PrintedInvoice",
    "CompositeTask",
    "PurchaseInvoice",
    "SalesInvoice",
    "FriendBillboardRental",
    "Payment",
    "StatementSources",
]


# -----------------------------
# Row helpers
# -----------------------------

def _field(row: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    """First non-None value among `names` (sqlite3.Row and dict both supported)."""
    keys = set(row.keys())
    for name in names:
        if name in keys and row[name] is not None:
            return row[name]
    return default


def _text_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def contract_key(value: Any) -> Optional[str]:
    """
    Canonical text form of a contract number: 1127, 1127.0, "1127" and " 1127 "
    all map to "1127". Returns None for missing/blank values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if value != value:  # NaN
            return None
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, int):
        return str(value)
    s = str(value).strip()
    if not s:
        return None
    try:
        as_float = float(s)
    except ValueError:
        return s
    return str(int(as_float)) if as_float.is_integer() else s


def _json_value(raw: Any) -> Any:
    if raw is None or isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        _log.debug("Ignoring malformed JSON column value %r", raw)
        return None


# -----------------------------
# Customer / filters
# -----------------------------

@dataclass
class Customer:
    id: Optional[int]
    name: str
    company: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    linked_friend_company_id: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] filter applied to payment dates only."""

    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return not self.start and not self.end


# -----------------------------
# Source records
# -----------------------------

@dataclass
class FriendRentalEntry:
    """One entry of a contract's friend_rental_data map (keyed by billboard id)."""

    billboard_id: str
    rental_cost: Optional[float] = None
    company_name: Optional[str] = None


@dataclass
class Contract:
    contract_number: Optional[str]
    customer_name: Optional[str] = None
    ad_type: Optional[str] = None
    contract_date: Optional[str] = None
    end_date: Optional[str] = None
    total: float = 0.0
    customer_id: Optional[int] = None
    friend_rentals: List[FriendRentalEntry] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Contract":
        entries: List[FriendRentalEntry] = []
        data = _json_value(_field(row, "friend_rental_data"))
        if isinstance(data, dict):
            for billboard_id, entry in data.items():
                if not isinstance(entry, dict):
                    continue
                entries.append(
                    FriendRentalEntry(
                        billboard_id=str(billboard_id),
                        rental_cost=to_optional_amount(entry.get("rental_cost")),
                        company_name=clean_text(entry.get("company_name")),
                    )
                )
        return cls(
            contract_number=contract_key(_field(row, "Contract_Number", "contract_number")),
            customer_name=clean_text(_field(row, "Customer Name", "customer_name")),
            ad_type=clean_text(_field(row, "Ad Type", "ad_type")),
            contract_date=clean_text(_field(row, "Contract Date", "contract_date")),
            end_date=clean_text(_field(row, "End Date", "end_date")),
            total=to_amount(_field(row, "Total", "total")),
            customer_id=_field(row, "customer_id"),
            friend_rentals=entries,
        )


@dataclass
class GeneralDiscount:
    id: str
    discount_type: str = "fixed"
    discount_value: float = 0.0
    reason: Optional[str] = None
    applied_date: Optional[str] = None
    status: str = "active"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "GeneralDiscount":
        return cls(
            id=_text_id(_field(row, "id")) or "",
            discount_type=(clean_text(_field(row, "discount_type")) or "fixed").lower(),
            discount_value=to_amount(_field(row, "discount_value")),
            reason=clean_text(_field(row, "reason")),
            applied_date=clean_text(_field(row, "applied_date")),
            status=(clean_text(_field(row, "status")) or "active").lower(),
        )


@dataclass
class PrintedInvoice:
    id: str
    invoice_number: Optional[str] = None
    invoice_type: Optional[str] = None
    invoice_date: Optional[str] = None
    created_at: Optional[str] = None
    total_amount: float = 0.0
    paid_amount: float = 0.0
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PrintedInvoice":
        return cls(
            id=_text_id(_field(row, "id")) or "",
            invoice_number=_text_id(_field(row, "invoice_number")),
            invoice_type=clean_text(_field(row, "invoice_type")),
            invoice_date=clean_text(_field(row, "invoice_date")),
            created_at=clean_text(_field(row, "created_at")),
            total_amount=to_amount(_field(row, "total_amount")),
            paid_amount=to_amount(_field(row, "paid_amount")),
            notes=clean_text(_field(row, "notes")),
        )


@dataclass
class CompositeTask:
    id: str
    task_type: Optional[str] = None
    customer_total: float = 0.0
    combined_invoice_id: Optional[str] = None
    contract_id: Optional[str] = None
    # from the linked installation task
    installation_contract_ids: List[str] = field(default_factory=list)
    installation_contract_id: Optional[str] = None
    invoice_date: Optional[str] = None
    created_at: Optional[str] = None
    notes: Optional[str] = None

    @property
    def linked_contract_ids(self) -> List[str]:
        """Installation task contract_ids, falling back to its single contract_id."""
        if self.installation_contract_ids:
            return list(self.installation_contract_ids)
        if self.installation_contract_id:
            return [self.installation_contract_id]
        return []

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CompositeTask":
        ids = _json_value(_field(row, "installation_contract_ids", "contract_ids"))
        contract_ids = [k for k in (contract_key(v) for v in ids) if k] if isinstance(ids, list) else []
        return cls(
            id=_text_id(_field(row, "id")) or "",
            task_type=clean_text(_field(row, "task_type")),
            customer_total=to_amount(_field(row, "customer_total")),
            combined_invoice_id=_text_id(_field(row, "combined_invoice_id")),
            contract_id=contract_key(_field(row, "contract_id")),
            installation_contract_ids=contract_ids,
            installation_contract_id=contract_key(_field(row, "installation_contract_id")),
            invoice_date=clean_text(_field(row, "invoice_date")),
            created_at=clean_text(_field(row, "created_at")),
            notes=clean_text(_field(row, "notes")),
        )


@dataclass
class PurchaseInvoice:
    id: str
    invoice_number: Optional[str] = None
    invoice_name: Optional[str] = None
    invoice_date: Optional[str] = None
    created_at: Optional[str] = None
    total_amount: float = 0.0
    used_as_payment: float = 0.0
    notes: Optional[str] = None
    status: Optional[str] = None
    is_deleted: bool = False

    @property
    def is_void(self) -> bool:
        """Soft-deleted or cancelled invoices never reach the statement."""
        return self.is_deleted or (self.status or "").lower() in ("deleted", "cancelled")

    @property
    def title(self) -> str:
        return self.invoice_name or f"فاتورة مشتريات {self.invoice_number or ''}".strip()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "PurchaseInvoice":
        return cls(
            id=_text_id(_field(row, "id")) or "",
            invoice_number=_text_id(_field(row, "invoice_number")),
            invoice_name=clean_text(_field(row, "invoice_name")),
            invoice_date=clean_text(_field(row, "invoice_date")),
            created_at=clean_text(_field(row, "created_at")),
            total_amount=to_amount(_field(row, "total_amount")),
            used_as_payment=to_amount(_field(row, "used_as_payment")),
            notes=clean_text(_field(row, "notes")),
            status=clean_text(_field(row, "status")),
            is_deleted=bool(to_amount(_field(row, "is_deleted", default=0))),
        )


@dataclass
class SalesInvoice:
    id: str
    invoice_number: Optional[str] = None
    invoice_name: Optional[str] = None
    invoice_date: Optional[str] = None
    created_at: Optional[str] = None
    total_amount: float = 0.0
    paid_amount: float = 0.0
    notes: Optional[str] = None

    @property
    def title(self) -> str:
        return self.invoice_name or f"فاتورة مبيعات {self.invoice_number or ''}".strip()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SalesInvoice":
        return cls(
            id=_text_id(_field(row, "id")) or "",
            invoice_number=_text_id(_field(row, "invoice_number")),
            invoice_name=clean_text(_field(row, "invoice_name")),
            invoice_date=clean_text(_field(row, "invoice_date")),
            created_at=clean_text(_field(row, "created_at")),
            total_amount=to_amount(_field(row, "total_amount")),
            paid_amount=to_amount(_field(row, "paid_amount")),
            notes=clean_text(_field(row, "notes")),
        )


@dataclass
class FriendBillboardRental:
    id: str
    billboard_id: Optional[str] = None
    billboard_name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    friend_rental_cost: Optional[float] = None
    customer_rental_price: Optional[float] = None
    used_as_payment: float = 0.0

    @property
    def cost(self) -> float:
        """friend_rental_cost, falling back to customer_rental_price (0 counts as missing)."""
        return self.friend_rental_cost or self.customer_rental_price or 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FriendBillboardRental":
        return cls(
            id=_text_id(_field(row, "id")) or "",
            billboard_id=_text_id(_field(row, "billboard_id")),
            billboard_name=clean_text(_field(row, "billboard_name", "Billboard_Name")),
            start_date=clean_text(_field(row, "start_date")),
            end_date=clean_text(_field(row, "end_date")),
            friend_rental_cost=to_optional_amount(_field(row, "friend_rental_cost")),
            customer_rental_price=to_optional_amount(_field(row, "customer_rental_price")),
            used_as_payment=to_amount(_field(row, "used_as_payment")),
        )


@dataclass
class Payment:
    id: str
    amount: float = 0.0
    entry_type: str = "payment"
    paid_at: Optional[str] = None
    contract_number: Optional[str] = None
    sales_invoice_id: Optional[str] = None
    printed_invoice_id: Optional[str] = None
    composite_task_id: Optional[str] = None
    purchase_invoice_id: Optional[str] = None
    distributed_payment_id: Optional[str] = None
    notes: Optional[str] = None
    method: Optional[str] = None
    reference: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Payment":
        return cls(
            id=_text_id(_field(row, "id")) or "",
            amount=to_amount(_field(row, "amount")),
            entry_type=(clean_text(_field(row, "entry_type")) or "payment"),
            paid_at=clean_text(_field(row, "paid_at")),
            contract_number=contract_key(_field(row, "contract_number")),
            sales_invoice_id=_text_id(_field(row, "sales_invoice_id")),
            printed_invoice_id=_text_id(_field(row, "printed_invoice_id")),
            composite_task_id=_text_id(_field(row, "composite_task_id")),
            purchase_invoice_id=_text_id(_field(row, "purchase_invoice_id")),
            distributed_payment_id=_text_id(_field(row, "distributed_payment_id")),
            notes=clean_text(_field(row, "notes")),
            method=clean_text(_field(row, "method")),
            reference=clean_text(_field(row, "reference")),
        )


@dataclass
class StatementSources:
    """The eight collections fetched for one customer (any may be empty)."""

    contracts: List[Contract] = field(default_factory=list)
    general_discounts: List[GeneralDiscount] = field(default_factory=list)
    printed_invoices: List[PrintedInvoice] = field(default_factory=list)
    composite_tasks: List[CompositeTask] = field(default_factory=list)
    purchase_invoices: List[PurchaseInvoice] = field(default_factory=list)
    sales_invoices: List[SalesInvoice] = field(default_factory=list)
    friend_rentals: List[FriendBillboardRental] = field(default_factory=list)
    payments: List[Payment] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in self.__dataclass_fields__}
