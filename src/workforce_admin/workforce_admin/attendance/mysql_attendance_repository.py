from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_set_clause, db_cursor, fetchall, fetchone
from .model import Attendance
from .repository import AttendanceRepository

_SELECT = "SELECT attendance_id, employee_id, work_date, session_count, status, submitted_by FROM attendances"
EDITABLE_COLUMNS = ("employee_id", "work_date", "session_count", "status", "submitted_by")


def _to_attendance(r: Dict[str, Any]) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        session_count=int(r["session_count"]),
        status=AttendanceStatus(r["status"]),
        submitted_by=r.get("submitted_by"),
    )


def _db_value(v: Any) -> Any:
    return v.value if isinstance(v, AttendanceStatus) else v


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_attendance(r) if r else None

    def exists(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS ok FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
            return fetchone(cur) is not None

    def find_active(self, employee_id: int, work_date: date, *, exclude_id: Optional[int] = None) -> Optional[Attendance]:
        sql = f"{_SELECT} WHERE employee_id=%s AND work_date=%s AND status<>%s"
        params: list[Any] = [int(employee_id), work_date, AttendanceStatus.REJECTED.value]
        if exclude_id is not None:
            sql += " AND attendance_id<>%s"
            params.append(int(exclude_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            r = fetchone(cur)
            return _to_attendance(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        session_count: int,
        status: AttendanceStatus,
        submitted_by: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(employee_id, work_date, session_count, status, submitted_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, int(session_count), status.value, submitted_by),
            )
            return int(cur.lastrowid)

    def set_status(self, attendance_id: int, status: AttendanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT attendance_id FROM attendances WHERE attendance_id=%s FOR UPDATE", (int(attendance_id),))
            if fetchone(cur) is None:
                return False
            cur.execute("UPDATE attendances SET status=%s WHERE attendance_id=%s", (status.value, int(attendance_id)))
            return True

    def list(self, *, status: Optional[AttendanceStatus] = None) -> Sequence[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute(f"{_SELECT} ORDER BY work_date ASC, attendance_id ASC")
            else:
                cur.execute(f"{_SELECT} WHERE status=%s ORDER BY work_date ASC, attendance_id ASC", (status.value,))
            return [_to_attendance(r) for r in fetchall(cur)]

    def update_fields(self, attendance_id: int, fields: Mapping[str, Any]) -> bool:
        set_sql, params = build_set_clause({k: _db_value(v) for k, v in fields.items()}, EDITABLE_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT attendance_id FROM attendances WHERE attendance_id=%s FOR UPDATE", (int(attendance_id),))
            if fetchone(cur) is None:
                return False
            if set_sql:
                cur.execute(f"UPDATE attendances SET {set_sql} WHERE attendance_id=%s", (*params, int(attendance_id)))
            return True

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def sum_sessions(
        self,
        employee_id: int,
        start: date,
        end: date,
        *,
        status: Optional[AttendanceStatus] = None,
    ) -> int:
        sql = """
            SELECT COALESCE(SUM(session_count), 0) AS total
            FROM attendances
            WHERE employee_id=%s AND work_date>=%s AND work_date<%s
        """
        params: list[Any] = [int(employee_id), start, end]
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur) or {}
            return int(row.get("total") or 0)

    def list_in_window(
        self,
        employee_ids: Iterable[int],
        start: date,
        end: date,
        *,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[Attendance]:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return []
        sql = f"{_SELECT} WHERE employee_id IN ({','.join(['%s'] * len(ids))}) AND work_date>=%s AND work_date<%s"
        params: list[Any] = [*ids, start, end]
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY work_date ASC, attendance_id ASC", tuple(params))
            return [_to_attendance(r) for r in fetchall(cur)]
