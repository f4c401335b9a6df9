from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import nullcontext
from decimal import Decimal
from typing import Any, Callable, ContextManager, Dict, List, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..clients.repository import ClientRepository
from ..common.datetime_utils import month_window
from ..common.validators import optional_id, require_percentage, require_period, require_positive_id
from ..core.constants import DEFAULT_CGST_RATE, DEFAULT_SGST_RATE
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import NotFoundError
from ..core.permissions import Operation, require_role
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..payroll.calculator.base import SalaryCalculator
from ..payroll.calculator.standard_calculator import StandardSalaryCalculator, to_money
from .model import EmployeeChart, Invoice, InvoiceLine, InvoiceResult
from .repository import InvoiceRepository

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


def invoice_to_dict(inv: Invoice) -> dict:
    return {
        "invoice_id": inv.invoice_id,
        "invoice_no": inv.invoice_no,
        "client_id": inv.client_id,
        "month": inv.month,
        "year": inv.year,
        "lines": [line.to_dict() for line in inv.lines],
        "subtotal": str(inv.subtotal),
        "cgst_amount": str(inv.cgst_amount),
        "sgst_amount": str(inv.sgst_amount),
        "total_amount": str(inv.total_amount),
        "created_at": inv.created_at.isoformat() if inv.created_at else None,
    }


def invoice_result_to_dict(result: InvoiceResult) -> dict:
    return {
        "invoice": invoice_to_dict(result.invoice),
        "client": {"client_id": result.client.client_id, "name": result.client.name},
        "subtotal": str(result.subtotal),
        "cgst_amount": str(result.cgst_amount),
        "sgst_amount": str(result.sgst_amount),
        "total": str(result.total),
        "grand_total": str(result.grand_total),
        "chart": [
            {
                "employee_id": c.employee_id,
                "name": c.name,
                "category": c.category,
                "days": {str(day): sessions for day, sessions in sorted(c.days.items())},
            }
            for c in result.chart
        ],
    }


class InvoiceService:
    """Per-client monthly billing from APPROVED attendance.

    ``scope_by_client`` (default True) bills only the client's own employees
    for a category; False matches the category name across all clients.
    """

    def __init__(
        self,
        invoices: InvoiceRepository,
        clients: ClientRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[SalaryCalculator] = None,
        unit_of_work: Optional[Callable[[], ContextManager[Any]]] = None,
        scope_by_client: bool = True,
        default_cgst_rate: Decimal = DEFAULT_CGST_RATE,
        default_sgst_rate: Decimal = DEFAULT_SGST_RATE,
    ):
        self._invoices = invoices
        self._clients = clients
        self._employees = employees
        self._attendance = attendance
        self._calculator = calculator or StandardSalaryCalculator()
        self._uow = unit_of_work or nullcontext
        self._scope_by_client = bool(scope_by_client)
        self._default_cgst = require_percentage(default_cgst_rate, "default_cgst_rate")
        self._default_sgst = require_percentage(default_sgst_rate, "default_sgst_rate")

    def generate_invoice(
        self,
        *,
        client_id: Any,
        month: Any,
        year: Any,
        actor_role: Role,
        invoice_no: Optional[str] = None,
    ) -> InvoiceResult:
        require_role(Operation.INVOICE_GENERATE, actor_role)
        cid = require_positive_id(client_id, "client_id")
        m, y = require_period(month, year)
        start, end = month_window(m, y)

        with self._uow():
            client = self._clients.get_by_id(cid)
            if not client:
                raise NotFoundError(f"Client {cid} not found")

            pool: Sequence[Employee] = self._employees.list_all(client_id=cid if self._scope_by_client else None)

            lines: List[InvoiceLine] = []
            charts: Dict[int, EmployeeChart] = {}
            subtotal = Decimal(0)
            for category in client.categories:
                rate = self._calculator.rate_per_day(category.rate_per_month)
                members = [e for e in pool if e.in_category(category.name)]
                if not members:
                    lines.append(InvoiceLine(category=category.name, qty=0, rate=to_money(rate), amount=to_money(0)))
                    continue

                rows = self._attendance.list_in_window(
                    [e.employee_id for e in members], start, end, status=AttendanceStatus.APPROVED
                )
                qty = sum(r.session_count for r in rows)
                amount = to_money(rate * qty)
                subtotal += amount
                lines.append(InvoiceLine(category=category.name, qty=qty, rate=to_money(rate), amount=amount))

                by_employee: Dict[int, Dict[int, int]] = defaultdict(dict)
                for r in rows:
                    day = r.work_date.day
                    by_employee[r.employee_id][day] = by_employee[r.employee_id].get(day, 0) + r.session_count
                for e in members:
                    if e.employee_id not in charts:
                        charts[e.employee_id] = EmployeeChart(
                            employee_id=e.employee_id,
                            name=e.name,
                            category=e.category,
                            days=dict(by_employee.get(e.employee_id, {})),
                        )

            cgst_rate = client.cgst_rate if client.cgst_rate is not None else self._default_cgst
            sgst_rate = client.sgst_rate if client.sgst_rate is not None else self._default_sgst
            # Cents times a two-place rate over 100: at most 6 places, the stored scale.
            # Unrounded so grand_total == subtotal * (1 + rates/100).
            cgst_amount = subtotal * cgst_rate / HUNDRED
            sgst_amount = subtotal * sgst_rate / HUNDRED
            grand_total = subtotal + cgst_amount + sgst_amount

            invoice_id = self._invoices.create(
                client_id=cid,
                month=m,
                year=y,
                invoice_no=(invoice_no or "").strip() or None,
                lines=lines,
                subtotal=subtotal,
                cgst_amount=cgst_amount,
                sgst_amount=sgst_amount,
                total_amount=grand_total,
            )
            invoice = self._invoices.get_by_id(invoice_id)

        logger.info("invoice %s generated for client %s %02d/%d: %s", invoice_id, cid, m, y, grand_total)
        return InvoiceResult(
            invoice=invoice,
            client=client,
            lines=tuple(lines),
            subtotal=subtotal,
            cgst_amount=cgst_amount,
            sgst_amount=sgst_amount,
            total=subtotal,
            grand_total=grand_total,
            chart=tuple(sorted(charts.values(), key=lambda c: c.employee_id)),
        )

    def list_invoices(self, *, actor_role: Role, client_id: Any = None) -> Sequence[Invoice]:
        require_role(Operation.RECORDS_READ, actor_role)
        return self._invoices.list(client_id=optional_id(client_id, "client_id"))

    def get_invoice(self, *, actor_role: Role, invoice_id: Any) -> Invoice:
        require_role(Operation.RECORDS_READ, actor_role)
        iid = require_positive_id(invoice_id, "invoice_id")
        invoice = self._invoices.get_by_id(iid)
        if not invoice:
            raise NotFoundError(f"Invoice {iid} not found")
        return invoice

    def delete_invoice(self, *, actor_role: Role, invoice_id: Any) -> None:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        iid = require_positive_id(invoice_id, "invoice_id")
        if not self._invoices.delete(iid):
            raise NotFoundError(f"Invoice {iid} not found")
        logger.info("deleted invoice %s", iid)
