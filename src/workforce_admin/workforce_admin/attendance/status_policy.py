from __future__ import annotations

from typing import Optional

from ..core.constants import SUPERVISOR_MARKER
from ..core.enums import AttendanceStatus, Role

AUTO_APPROVE_ROLES = frozenset({Role.HR, Role.ADMIN})


def is_supervisor_submission(submitted_by: Optional[str]) -> bool:
    return (submitted_by or "").strip().lower() == SUPERVISOR_MARKER


def initial_status(*, submitted_by: Optional[str], actor_role: Optional[Role]) -> AttendanceStatus:
    """Status a new attendance row starts in.

    Rules are checked in order:
      1. marked as submitted by a supervisor -> PENDING, whoever sends it
      2. HR/Admin -> APPROVED
      3. anyone else -> PENDING
    """

    if is_supervisor_submission(submitted_by):
        return AttendanceStatus.PENDING
    if actor_role in AUTO_APPROVE_ROLES:
        return AttendanceStatus.APPROVED
    return AttendanceStatus.PENDING
