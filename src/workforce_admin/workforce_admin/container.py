from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import partial
from typing import Any

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService, apply_attendance_patch, coerce_attendance_patch
from .clients.mysql_client_repository import MySQLClientRepository
from .clients.repository import ClientRepository
from .clients.service import ClientService, coerce_client_patch
from .core.constants import DEFAULT_CGST_RATE, DEFAULT_SGST_RATE
from .core.enums import EntityTag
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_base import transaction
from .deductions.mysql_deduction_repository import MySQLDeductionRepository
from .deductions.repository import DeductionRepository
from .deductions.service import DeductionService
from .documents.renderer import CsvDocumentRenderer, DocumentRenderer
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService, coerce_employee_patch
from .invoices.mysql_invoice_repository import MySQLInvoiceRepository
from .invoices.repository import InvoiceRepository
from .invoices.service import InvoiceService
from .payroll.mysql_salary_repository import MySQLSalaryRepository
from .payroll.repository import SalaryRepository
from .payroll.service import PayrollService
from .requests.mysql_request_repository import MySQLChangeRequestRepository
from .requests.registry import EntityHandler, EntityRegistry
from .requests.repository import ChangeRequestRepository
from .requests.service import ChangeRequestService, UnitOfWork
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Policies:
    salary_approved_only: bool = False
    salary_period_deductions: bool = False
    invoice_scope_by_client: bool = True
    default_cgst_rate: Decimal = DEFAULT_CGST_RATE
    default_sgst_rate: Decimal = DEFAULT_SGST_RATE


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    clients: ClientRepository
    employees: EmployeeRepository
    attendance: AttendanceRepository
    deductions: DeductionRepository
    requests: ChangeRequestRepository
    salaries: SalaryRepository
    invoices: InvoiceRepository


@dataclass(frozen=True)
class Container:
    conn: Any
    repos: Repositories
    registry: EntityRegistry

    auth_service: AuthService
    user_service: UserService
    client_service: ClientService
    employee_service: EmployeeService
    deduction_service: DeductionService
    change_request_service: ChangeRequestService
    attendance_service: AttendanceService
    payroll_service: PayrollService
    invoice_service: InvoiceService
    document_renderer: DocumentRenderer


def build_registry(repos: Repositories, employee_service: EmployeeService) -> EntityRegistry:
    """Which entities change requests may target. Invoices and salaries are delete-only."""

    return EntityRegistry(
        {
            EntityTag.CLIENT: EntityHandler(
                exists=repos.clients.exists,
                delete=repos.clients.delete,
                update=repos.clients.update_fields,
                coerce_patch=coerce_client_patch,
            ),
            EntityTag.EMPLOYEE: EntityHandler(
                exists=repos.employees.exists,
                delete=repos.employees.delete,
                update=employee_service.apply_update,
                coerce_patch=coerce_employee_patch,
            ),
            EntityTag.ATTENDANCE: EntityHandler(
                exists=repos.attendance.exists,
                delete=repos.attendance.delete,
                update=partial(apply_attendance_patch, repos.attendance, repos.employees),
                coerce_patch=coerce_attendance_patch,
            ),
            EntityTag.INVOICE: EntityHandler(exists=repos.invoices.exists, delete=repos.invoices.delete),
            EntityTag.SALARY: EntityHandler(exists=repos.salaries.exists, delete=repos.salaries.delete),
        }
    )


def assemble(
    repos: Repositories,
    *,
    conn: Any = None,
    unit_of_work: UnitOfWork | None = None,
    policies: Policies | None = None,
    document_renderer: DocumentRenderer | None = None,
) -> Container:
    """Wire services on top of any set of repositories (MySQL in production, fakes in tests)."""

    policies = policies or Policies()

    client_service = ClientService(repos.clients)
    employee_service = EmployeeService(repos.employees, repos.clients)
    registry = build_registry(repos, employee_service)
    change_request_service = ChangeRequestService(repos.requests, registry, unit_of_work=unit_of_work)

    return Container(
        conn=conn,
        repos=repos,
        registry=registry,
        auth_service=AuthService(repos.users),
        user_service=UserService(repos.users),
        client_service=client_service,
        employee_service=employee_service,
        deduction_service=DeductionService(repos.deductions, repos.employees),
        change_request_service=change_request_service,
        attendance_service=AttendanceService(
            repos.attendance,
            repos.employees,
            change_request_service,
            unit_of_work=unit_of_work,
        ),
        payroll_service=PayrollService(
            repos.salaries,
            repos.employees,
            repos.attendance,
            repos.deductions,
            unit_of_work=unit_of_work,
            approved_only=policies.salary_approved_only,
            period_deductions=policies.salary_period_deductions,
        ),
        invoice_service=InvoiceService(
            repos.invoices,
            repos.clients,
            repos.employees,
            repos.attendance,
            unit_of_work=unit_of_work,
            scope_by_client=policies.invoice_scope_by_client,
            default_cgst_rate=policies.default_cgst_rate,
            default_sgst_rate=policies.default_sgst_rate,
        ),
        document_renderer=document_renderer or CsvDocumentRenderer(),
    )


def build_container(*, db_config: dict, policies: Policies | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        clients=MySQLClientRepository(conn),
        employees=MySQLEmployeeRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        deductions=MySQLDeductionRepository(conn),
        requests=MySQLChangeRequestRepository(conn),
        salaries=MySQLSalaryRepository(conn),
        invoices=MySQLInvoiceRepository(conn),
    )
    return assemble(repos, conn=conn, unit_of_work=partial(transaction, conn), policies=policies)
