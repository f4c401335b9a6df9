from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import Attendance


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def exists(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def find_active(self, employee_id: int, work_date: date, *, exclude_id: Optional[int] = None) -> Optional[Attendance]:
        """A non-REJECTED row for (employee, day), if any."""
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        session_count: int,
        status: AttendanceStatus,
        submitted_by: Optional[str],
    ) -> int:
        raise NotImplementedError

    def set_status(self, attendance_id: int, status: AttendanceStatus) -> bool:
        raise NotImplementedError

    def list(self, *, status: Optional[AttendanceStatus] = None) -> Sequence[Attendance]:
        """Ascending by work_date, then attendance_id."""
        raise NotImplementedError

    def update_fields(self, attendance_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def sum_sessions(
        self,
        employee_id: int,
        start: date,
        end: date,
        *,
        status: Optional[AttendanceStatus] = None,
    ) -> int:
        """Sum of session_count with start <= work_date < end."""
        raise NotImplementedError

    def list_in_window(
        self,
        employee_ids: Iterable[int],
        start: date,
        end: date,
        *,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[Attendance]:
        raise NotImplementedError
