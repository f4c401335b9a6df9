from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Invoice, InvoiceLine
from .repository import InvoiceRepository

_SELECT = """
    SELECT invoice_id, client_id, month, year, invoice_no, lines_json,
           subtotal, cgst_amount, sgst_amount, total_amount, created_at
    FROM invoices
"""


def _load_lines(raw: Any) -> tuple[InvoiceLine, ...]:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    items = json.loads(raw) if isinstance(raw, str) else (raw or [])
    return tuple(
        InvoiceLine(
            category=i["category"],
            qty=int(i["qty"]),
            rate=Decimal(str(i["rate"])),
            amount=Decimal(str(i["amount"])),
        )
        for i in items
    )


def _to_invoice(r: Dict[str, Any]) -> Invoice:
    return Invoice(
        invoice_id=int(r["invoice_id"]),
        client_id=int(r["client_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        invoice_no=r.get("invoice_no") or str(r["invoice_id"]),
        lines=_load_lines(r.get("lines_json")),
        subtotal=Decimal(str(r["subtotal"])),
        cgst_amount=Decimal(str(r["cgst_amount"])),
        sgst_amount=Decimal(str(r["sgst_amount"])),
        total_amount=Decimal(str(r["total_amount"])),
        created_at=r.get("created_at"),
    )


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        body = json.dumps([line.to_dict() for line in lines])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoices(client_id, month, year, invoice_no, lines_json,
                                     subtotal, cgst_amount, sgst_amount, total_amount)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(client_id), int(month), int(year), invoice_no, body, subtotal, cgst_amount, sgst_amount, total_amount),
            )
            invoice_id = int(cur.lastrowid)
            if not invoice_no:
                cur.execute("UPDATE invoices SET invoice_no=%s WHERE invoice_id=%s", (str(invoice_id), invoice_id))
            return invoice_id

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE invoice_id=%s", (int(invoice_id),))
            r = fetchone(cur)
            return _to_invoice(r) if r else None

    def exists(self, invoice_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS ok FROM invoices WHERE invoice_id=%s", (int(invoice_id),))
            return fetchone(cur) is not None

    def list(self, *, client_id: Optional[int] = None) -> Sequence[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            if client_id is None:
                cur.execute(_SELECT + " ORDER BY invoice_id DESC")
            else:
                cur.execute(_SELECT + " WHERE client_id=%s ORDER BY invoice_id DESC", (int(client_id),))
            return [_to_invoice(r) for r in fetchall(cur)]

    def delete(self, invoice_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM invoices WHERE invoice_id=%s", (int(invoice_id),))
            return cur.rowcount > 0
