from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class ClientCategory:
    """A billable category (e.g. 'Guard') with its monthly rate."""

    name: str
    rate_per_month: Decimal


@dataclass(frozen=True)
class Client:
    """Domain entity: a client company.

    Categories keep their insertion order; invoices list them the same way.
    GST rates are percentages; ``None`` means "use the default rate".
    """

    client_id: int
    name: str
    address_line1: str = ""
    address_line2: str = ""
    contact: str = ""
    telephone: str = ""
    email: str = ""
    gst_number: str = ""
    state: str = ""
    district: str = ""
    cgst_rate: Optional[Decimal] = None
    sgst_rate: Optional[Decimal] = None
    igst_rate: Optional[Decimal] = None
    categories: Tuple[ClientCategory, ...] = field(default_factory=tuple)
