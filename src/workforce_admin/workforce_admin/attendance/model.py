from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class Attendance:
    """Domain entity: sessions one employee worked on one day (0, 1 or 2)."""

    attendance_id: int
    employee_id: int
    work_date: date
    session_count: int
    status: AttendanceStatus
    submitted_by: Optional[str] = None


@dataclass(frozen=True)
class BatchRowResult:
    """Outcome of one row in a batch submission; exactly one of record/error is set."""

    index: int
    record: Optional[Attendance] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None
