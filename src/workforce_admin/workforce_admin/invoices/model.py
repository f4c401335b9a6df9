from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple

from ..clients.model import Client


@dataclass(frozen=True)
class InvoiceLine:
    category: str
    qty: int
    rate: Decimal
    amount: Decimal

    def to_dict(self) -> dict:
        return {"category": self.category, "qty": self.qty, "rate": str(self.rate), "amount": str(self.amount)}


@dataclass(frozen=True)
class Invoice:
    """Immutable billing snapshot for one client and month. total_amount includes GST."""

    invoice_id: int
    client_id: int
    month: int
    year: int
    invoice_no: str
    lines: Tuple[InvoiceLine, ...]
    subtotal: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    total_amount: Decimal
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeChart:
    """Day-of-month -> approved sessions for one billed employee (display only)."""

    employee_id: int
    name: str
    category: str
    days: Dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class InvoiceResult:
    invoice: Invoice
    client: Client
    lines: Tuple[InvoiceLine, ...]
    subtotal: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    total: Decimal
    grand_total: Decimal
    chart: Tuple[EmployeeChart, ...] = ()
