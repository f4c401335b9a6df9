from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Dict, Iterable, List, Mapping, Optional, Sequence

from ..common.validators import require_date, require_positive_id, require_session_count
from ..core.constants import SUPERVISOR_MARKER
from ..core.enums import AttendanceStatus, EntityTag, RequestAction, Role
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..core.permissions import Operation, require_role
from ..employees.repository import EmployeeRepository
from ..requests.model import ChangeRequest
from ..requests.service import ChangeRequestService
from .model import Attendance, BatchRowResult
from .repository import AttendanceRepository
from .status_policy import initial_status

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"employee_id", "work_date", "session_count", "status", "submitted_by"})


def parse_attendance_status(value: Any) -> Optional[AttendanceStatus]:
    if value is None or value == "":
        return None
    try:
        return AttendanceStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError("status must be PENDING, APPROVED or REJECTED")


def coerce_attendance_patch(payload: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(payload, Mapping) or not payload:
        raise ValidationError("payload must be a non-empty object")
    unknown = sorted(set(payload) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields not editable on attendances: {', '.join(unknown)}")

    fields: Dict[str, Any] = {}
    for key, value in payload.items():
        if key == "employee_id":
            fields[key] = require_positive_id(value, "employee_id")
        elif key == "work_date":
            fields[key] = require_date(value, "work_date")
        elif key == "session_count":
            fields[key] = require_session_count(value)
        elif key == "status":
            status = parse_attendance_status(value)
            if status is None:
                raise ValidationError("status cannot be empty")
            fields[key] = status
        else:
            fields[key] = (str(value).strip() or None) if value is not None else None
    return fields


def apply_attendance_patch(
    attendance: AttendanceRepository,
    employees: EmployeeRepository,
    attendance_id: int,
    fields: Mapping[str, Any],
) -> None:
    """Write already-coerced fields (direct admin edit or approved change request)."""

    current = attendance.get_by_id(attendance_id)
    if not current:
        raise NotFoundError(f"Attendance {attendance_id} not found")

    employee_id = fields.get("employee_id", current.employee_id)
    work_date = fields.get("work_date", current.work_date)
    status = fields.get("status", current.status)
    if "employee_id" in fields and not employees.exists(employee_id):
        raise NotFoundError(f"Employee {employee_id} not found")
    if status != AttendanceStatus.REJECTED and attendance.find_active(employee_id, work_date, exclude_id=attendance_id):
        raise ConflictError(f"Attendance for employee {employee_id} on {work_date.isoformat()} already exists")

    attendance.update_fields(attendance_id, fields)


def attendance_to_dict(a: Attendance) -> dict:
    return {
        "attendance_id": a.attendance_id,
        "employee_id": a.employee_id,
        "date": a.work_date.isoformat(),
        "session_count": a.session_count,
        "status": a.status.value,
        "submitted_by": a.submitted_by,
    }


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        change_requests: Optional[ChangeRequestService] = None,
        *,
        unit_of_work: Optional[Callable[[], ContextManager[Any]]] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._change_requests = change_requests
        self._uow = unit_of_work or nullcontext

    def create(
        self,
        *,
        employee_id: Any,
        work_date: Any,
        session_count: Any,
        actor_role: Role,
        submitted_by: Optional[str] = None,
    ) -> Attendance:
        role = require_role(Operation.ATTENDANCE_CREATE, actor_role)
        eid = require_positive_id(employee_id, "employee_id")
        day = require_date(work_date, "date")
        sessions = require_session_count(session_count)
        marker = (submitted_by or "").strip() or None
        if marker is None and role == Role.SUPERVISOR:
            marker = SUPERVISOR_MARKER
        status = initial_status(submitted_by=marker, actor_role=role)

        with self._uow():
            if not self._employees.exists(eid):
                raise NotFoundError(f"Employee {eid} not found")
            if self._attendance.find_active(eid, day):
                raise ConflictError(f"Attendance for employee {eid} on {day.isoformat()} already exists")

            attendance_id = self._attendance.create(
                employee_id=eid,
                work_date=day,
                session_count=sessions,
                status=status,
                submitted_by=marker,
            )
            record = self._attendance.get_by_id(attendance_id)

        logger.info("attendance %s created for employee %s on %s as %s", attendance_id, eid, day, status.value)
        return record

    def create_batch(self, *, rows: Iterable[Mapping[str, Any]], actor_role: Role) -> List[BatchRowResult]:
        require_role(Operation.ATTENDANCE_CREATE, actor_role)
        results: List[BatchRowResult] = []
        for index, row in enumerate(rows):
            try:
                if not isinstance(row, Mapping):
                    raise ValidationError("row must be an object")
                record = self.create(
                    employee_id=row.get("employee_id"),
                    work_date=row.get("date", row.get("work_date")),
                    session_count=row.get("session_count"),
                    actor_role=actor_role,
                    submitted_by=row.get("submitted_by"),
                )
            except DomainError as e:
                results.append(BatchRowResult(index=index, error_kind=e.kind, error_message=str(e)))
                continue
            results.append(BatchRowResult(index=index, record=record))

        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.warning("attendance batch: %d of %d rows rejected", failed, len(results))
        return results

    def approve(self, *, attendance_id: Any, actor_role: Role) -> Attendance:
        return self._decide(attendance_id, AttendanceStatus.APPROVED, actor_role)

    def reject(self, *, attendance_id: Any, actor_role: Role) -> Attendance:
        return self._decide(attendance_id, AttendanceStatus.REJECTED, actor_role)

    def _decide(self, attendance_id: Any, status: AttendanceStatus, actor_role: Role) -> Attendance:
        require_role(Operation.ATTENDANCE_DECIDE, actor_role)
        aid = require_positive_id(attendance_id, "attendance_id")
        # No prior-state check: re-deciding simply overwrites.
        with self._uow():
            if not self._attendance.set_status(aid, status):
                raise NotFoundError(f"Attendance {aid} not found")
            record = self._attendance.get_by_id(aid)
        logger.info("attendance %s set to %s", aid, status.value)
        return record

    def list(self, *, actor_role: Role, status: Any = None) -> Sequence[Attendance]:
        require_role(Operation.ATTENDANCE_LIST, actor_role)
        return self._attendance.list(status=parse_attendance_status(status))

    def get(self, *, actor_role: Role, attendance_id: Any) -> Attendance:
        require_role(Operation.ATTENDANCE_LIST, actor_role)
        aid = require_positive_id(attendance_id, "attendance_id")
        record = self._attendance.get_by_id(aid)
        if not record:
            raise NotFoundError(f"Attendance {aid} not found")
        return record

    def edit_request(
        self,
        *,
        attendance_id: Any,
        payload: Mapping[str, Any],
        actor_role: Role,
        actor_id: int,
    ) -> ChangeRequest:
        require_role(Operation.ATTENDANCE_CHANGE_REQUEST, actor_role)
        return self._change_request_service().submit(
            table_name=EntityTag.ATTENDANCE,
            row_id=attendance_id,
            action=RequestAction.EDIT,
            requester_id=actor_id,
            actor_role=actor_role,
            payload=payload,
        )

    def delete_request(self, *, attendance_id: Any, actor_role: Role, actor_id: int) -> ChangeRequest:
        require_role(Operation.ATTENDANCE_CHANGE_REQUEST, actor_role)
        return self._change_request_service().submit(
            table_name=EntityTag.ATTENDANCE,
            row_id=attendance_id,
            action=RequestAction.DELETE,
            requester_id=actor_id,
            actor_role=actor_role,
        )

    def _change_request_service(self) -> ChangeRequestService:
        if self._change_requests is None:
            raise RuntimeError("AttendanceService was built without a ChangeRequestService")
        return self._change_requests
