from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Salary
from .repository import SalaryRepository

_SELECT = """
    SELECT salary_id, employee_id, month, year, total_sessions, basic_amount, deductions, net_pay, created_at
    FROM salaries
"""


def _to_salary(r: Dict[str, Any]) -> Salary:
    return Salary(
        salary_id=int(r["salary_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        total_sessions=int(r["total_sessions"]),
        basic_amount=Decimal(str(r["basic_amount"])),
        deductions=Decimal(str(r["deductions"])),
        net_pay=Decimal(str(r["net_pay"])),
        created_at=r.get("created_at"),
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        total_sessions: int,
        basic_amount: Decimal,
        deductions: Decimal,
        net_pay: Decimal,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salaries(employee_id, month, year, total_sessions, basic_amount, deductions, net_pay)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), int(month), int(year), int(total_sessions), basic_amount, deductions, net_pay),
            )
            return int(cur.lastrowid)

    def get_by_id(self, salary_id: int) -> Optional[Salary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE salary_id=%s", (int(salary_id),))
            r = fetchone(cur)
            return _to_salary(r) if r else None

    def exists(self, salary_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS ok FROM salaries WHERE salary_id=%s", (int(salary_id),))
            return fetchone(cur) is not None

    def list(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[Salary]:
        clauses = []
        params: list[Any] = []
        if month is not None:
            clauses.append("month=%s")
            params.append(int(month))
        if year is not None:
            clauses.append("year=%s")
            params.append(int(year))
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY year DESC, month DESC, employee_id ASC, salary_id ASC", tuple(params))
            return [_to_salary(r) for r in fetchall(cur)]

    def delete(self, salary_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM salaries WHERE salary_id=%s", (int(salary_id),))
            return cur.rowcount > 0
