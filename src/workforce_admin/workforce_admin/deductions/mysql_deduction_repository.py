from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set_clause, db_cursor, fetchall, fetchone
from .model import Deduction
from .repository import DeductionRepository

DEDUCTION_COLUMNS = ("employee_id", "name", "amount", "month", "year", "note")


def _to_deduction(r: Dict[str, Any]) -> Deduction:
    return Deduction(
        deduction_id=int(r["deduction_id"]),
        employee_id=int(r["employee_id"]),
        name=r["name"],
        amount=Decimal(str(r["amount"])),
        month=int(r["month"]) if r.get("month") is not None else None,
        year=int(r["year"]) if r.get("year") is not None else None,
        note=r.get("note") or "",
    )


class MySQLDeductionRepository(DeductionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        name: str,
        amount: Decimal,
        month: Optional[int] = None,
        year: Optional[int] = None,
        note: str = "",
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO deductions(employee_id, name, amount, month, year, note) VALUES(%s,%s,%s,%s,%s,%s)",
                (int(employee_id), name, amount, month, year, note or None),
            )
            return int(cur.lastrowid)

    def get_by_id(self, deduction_id: int) -> Optional[Deduction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM deductions WHERE deduction_id=%s", (int(deduction_id),))
            row = fetchone(cur)
            return _to_deduction(row) if row else None

    def list(self, *, employee_id: Optional[int] = None) -> Sequence[Deduction]:
        with db_cursor(self._conn_factory) as (_, cur):
            if employee_id is None:
                cur.execute("SELECT * FROM deductions ORDER BY deduction_id ASC")
            else:
                cur.execute(
                    "SELECT * FROM deductions WHERE employee_id=%s ORDER BY deduction_id ASC",
                    (int(employee_id),),
                )
            return [_to_deduction(r) for r in fetchall(cur)]

    def update_fields(self, deduction_id: int, fields: Mapping[str, Any]) -> bool:
        if "note" in fields:
            fields = {**fields, "note": fields["note"] or None}
        set_sql, params = build_set_clause(fields, DEDUCTION_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT deduction_id FROM deductions WHERE deduction_id=%s FOR UPDATE", (int(deduction_id),))
            if fetchone(cur) is None:
                return False
            if set_sql:
                cur.execute(f"UPDATE deductions SET {set_sql} WHERE deduction_id=%s", (*params, int(deduction_id)))
            return True

    def delete(self, deduction_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM deductions WHERE deduction_id=%s", (int(deduction_id),))
            return cur.rowcount > 0

    def sum_for_employee(self, employee_id: int, *, month: Optional[int] = None, year: Optional[int] = None) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            if month is None or year is None:
                cur.execute(
                    "SELECT COALESCE(SUM(amount), 0) AS total FROM deductions WHERE employee_id=%s",
                    (int(employee_id),),
                )
            else:
                cur.execute(
                    """
                    SELECT COALESCE(SUM(amount), 0) AS total
                    FROM deductions
                    WHERE employee_id=%s AND month=%s AND year=%s
                    """,
                    (int(employee_id), int(month), int(year)),
                )
            row = fetchone(cur) or {}
            return Decimal(str(row.get("total") or 0))
