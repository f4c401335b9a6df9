from __future__ import annotations

import csv
import io
from typing import Mapping, Optional, Protocol, Sequence

from ..clients.model import Client
from ..employees.model import Employee
from ..invoices.model import Invoice
from ..payroll.model import Salary


class DocumentRenderer(Protocol):
    """Turns committed financial records into a downloadable document."""

    media_type: str
    extension: str

    def render_invoice(self, invoice: Invoice, client: Optional[Client]) -> bytes:
        raise NotImplementedError

    def render_salary_sheet(self, salaries: Sequence[Salary], employees: Mapping[int, Employee]) -> bytes:
        raise NotImplementedError


class CsvDocumentRenderer(DocumentRenderer):
    media_type = "text/csv"
    extension = "csv"

    @staticmethod
    def _encode(out: io.StringIO) -> bytes:
        # BOM so spreadsheet apps pick up UTF-8.
        return out.getvalue().encode("utf-8-sig")

    def render_invoice(self, invoice: Invoice, client: Optional[Client]) -> bytes:
        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(["Invoice No", invoice.invoice_no])
        writer.writerow(["Client", client.name if client else invoice.client_id])
        if client and client.gst_number:
            writer.writerow(["GST Number", client.gst_number])
        writer.writerow(["Period", f"{invoice.month:02d}/{invoice.year}"])
        writer.writerow([])

        lines = csv.DictWriter(out, fieldnames=["category", "qty", "rate", "amount"])
        lines.writeheader()
        for line in invoice.lines:
            lines.writerow(line.to_dict())

        writer.writerow([])
        writer.writerow(["Subtotal", str(invoice.subtotal)])
        writer.writerow(["CGST", str(invoice.cgst_amount)])
        writer.writerow(["SGST", str(invoice.sgst_amount)])
        writer.writerow(["Grand Total", str(invoice.total_amount)])
        return self._encode(out)

    def render_salary_sheet(self, salaries: Sequence[Salary], employees: Mapping[int, Employee]) -> bytes:
        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=[
                "salary_id",
                "employee_id",
                "name",
                "category",
                "month",
                "year",
                "total_sessions",
                "basic_amount",
                "deductions",
                "net_pay",
            ],
        )
        writer.writeheader()
        for s in salaries:
            emp = employees.get(s.employee_id)
            writer.writerow(
                {
                    "salary_id": s.salary_id,
                    "employee_id": s.employee_id,
                    "name": emp.name if emp else "",
                    "category": emp.category if emp else "",
                    "month": s.month,
                    "year": s.year,
                    "total_sessions": s.total_sessions,
                    "basic_amount": str(s.basic_amount),
                    "deductions": str(s.deductions),
                    "net_pay": str(s.net_pay),
                }
            )
        return self._encode(out)
