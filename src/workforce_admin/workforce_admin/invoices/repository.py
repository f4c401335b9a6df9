from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import Invoice, InvoiceLine


class InvoiceRepository(Protocol):
    def create(
        self,
        *,
        client_id: int,
        month: int,
        year: int,
        invoice_no: Optional[str],
        lines: Sequence[InvoiceLine],
        subtotal: Decimal,
        cgst_amount: Decimal,
        sgst_amount: Decimal,
        total_amount: Decimal,
    ) -> int:
        """Insert; a missing ``invoice_no`` defaults to the new id."""
        raise NotImplementedError

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def exists(self, invoice_id: int) -> bool:
        raise NotImplementedError

    def list(self, *, client_id: Optional[int] = None) -> Sequence[Invoice]:
        raise NotImplementedError

    def delete(self, invoice_id: int) -> bool:
        raise NotImplementedError
