from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, List, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_window
from ..common.validators import optional_id, require_period, require_positive_id
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.permissions import Operation, require_role
from ..deductions.repository import DeductionRepository
from ..employees.repository import EmployeeRepository
from .calculator.base import SalaryCalculator
from .calculator.standard_calculator import StandardSalaryCalculator
from .model import Salary
from .repository import SalaryRepository

logger = logging.getLogger(__name__)


def salary_to_dict(s: Salary) -> dict:
    return {
        "salary_id": s.salary_id,
        "employee_id": s.employee_id,
        "month": s.month,
        "year": s.year,
        "total_sessions": s.total_sessions,
        "basic_amount": str(s.basic_amount),
        "deductions": str(s.deductions),
        "net_pay": str(s.net_pay),
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


class PayrollService:
    """Salary generation.

    Two policies are configurable because the historical behaviour is
    surprising but relied upon:

    * ``approved_only`` (default False): by default every attendance row in the
      month counts, whatever its status.
    * ``period_deductions`` (default False): by default every deduction ever
      recorded for the employee is subtracted, not only the month's.
    """

    def __init__(
        self,
        salaries: SalaryRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        deductions: DeductionRepository,
        *,
        calculator: Optional[SalaryCalculator] = None,
        unit_of_work: Optional[Callable[[], ContextManager[Any]]] = None,
        approved_only: bool = False,
        period_deductions: bool = False,
    ):
        self._salaries = salaries
        self._employees = employees
        self._attendance = attendance
        self._deductions = deductions
        self._calculator = calculator or StandardSalaryCalculator()
        self._uow = unit_of_work or nullcontext
        self._approved_only = bool(approved_only)
        self._period_deductions = bool(period_deductions)

    def generate_salaries(self, *, month: Any, year: Any, actor_role: Role) -> List[Salary]:
        require_role(Operation.SALARY_GENERATE, actor_role)
        m, y = require_period(month, year)
        start, end = month_window(m, y)
        status = AttendanceStatus.APPROVED if self._approved_only else None

        out: List[Salary] = []
        with self._uow():
            for emp in sorted(self._employees.list_all(), key=lambda e: e.employee_id):
                sessions = self._attendance.sum_sessions(emp.employee_id, start, end, status=status)
                if self._period_deductions:
                    deducted = self._deductions.sum_for_employee(emp.employee_id, month=m, year=y)
                else:
                    deducted = self._deductions.sum_for_employee(emp.employee_id)

                figures = self._calculator.compute(
                    rate_per_month=emp.rate_per_month,
                    total_sessions=sessions,
                    deductions=deducted,
                )
                salary_id = self._salaries.create(
                    employee_id=emp.employee_id,
                    month=m,
                    year=y,
                    total_sessions=figures.total_sessions,
                    basic_amount=figures.basic_amount,
                    deductions=figures.deductions,
                    net_pay=figures.net_pay,
                )
                out.append(self._salaries.get_by_id(salary_id))

        logger.info("generated %d salaries for %02d/%d", len(out), m, y)
        return out

    def list_salaries(
        self,
        *,
        actor_role: Role,
        month: Any = None,
        year: Any = None,
        employee_id: Any = None,
    ) -> Sequence[Salary]:
        require_role(Operation.RECORDS_READ, actor_role)
        m = y = None
        if month not in (None, "") and year not in (None, ""):
            m, y = require_period(month, year)
        elif month not in (None, "") or year not in (None, ""):
            raise ValidationError("month and year must be given together")
        return self._salaries.list(month=m, year=y, employee_id=optional_id(employee_id, "employee_id"))

    def get_salary(self, *, actor_role: Role, salary_id: Any) -> Salary:
        require_role(Operation.RECORDS_READ, actor_role)
        sid = require_positive_id(salary_id, "salary_id")
        salary = self._salaries.get_by_id(sid)
        if not salary:
            raise NotFoundError(f"Salary {sid} not found")
        return salary

    def delete_salary(self, *, actor_role: Role, salary_id: Any) -> None:
        require_role(Operation.ENTITY_WRITE_DIRECT, actor_role)
        sid = require_positive_id(salary_id, "salary_id")
        if not self._salaries.delete(sid):
            raise NotFoundError(f"Salary {sid} not found")
        logger.info("deleted salary %s", sid)
