from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set_clause, db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

EMPLOYEE_COLUMNS = (
    "name",
    "category",
    "client_id",
    "rate_per_month",
    "father_name",
    "gender",
    "telephone",
    "email",
    "local_address",
    "permanent_address",
    "epf_number",
    "esic_number",
)


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        name=r["name"],
        category=r.get("category") or "",
        client_id=int(r["client_id"]) if r.get("client_id") is not None else None,
        rate_per_month=Decimal(str(r.get("rate_per_month") or 0)),
        father_name=r.get("father_name") or "",
        gender=r.get("gender") or "",
        telephone=r.get("telephone") or "",
        email=r.get("email") or "",
        local_address=r.get("local_address") or "",
        permanent_address=r.get("permanent_address") or "",
        epf_number=r.get("epf_number") or "",
        esic_number=r.get("esic_number") or "",
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def exists(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS ok FROM employees WHERE employee_id=%s", (int(employee_id),))
            return fetchone(cur) is not None

    def create(self, fields: Mapping[str, Any]) -> int:
        cols = [c for c in EMPLOYEE_COLUMNS if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO employees({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                tuple(fields[c] for c in cols),
            )
            return int(cur.lastrowid)

    def list_all(self, *, client_id: Optional[int] = None) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            if client_id is None:
                cur.execute("SELECT * FROM employees ORDER BY employee_id ASC")
            else:
                cur.execute("SELECT * FROM employees WHERE client_id=%s ORDER BY employee_id ASC", (int(client_id),))
            return [_to_employee(r) for r in fetchall(cur)]

    def update_fields(self, employee_id: int, fields: Mapping[str, Any]) -> bool:
        set_sql, params = build_set_clause(fields, EMPLOYEE_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (int(employee_id),))
            if fetchone(cur) is None:
                return False
            if set_sql:
                cur.execute(f"UPDATE employees SET {set_sql} WHERE employee_id=%s", (*params, int(employee_id)))
            return True

    def delete(self, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (int(employee_id),))
            return cur.rowcount > 0
