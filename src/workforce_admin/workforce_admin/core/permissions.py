"""Per-operation role allow-lists.

Services call ``require_role`` at the top of every public operation; the
controllers never compare role strings themselves.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from .enums import Role
from .exceptions import AuthorizationError


class Operation(str, Enum):
    ATTENDANCE_CREATE = "attendance.create"
    ATTENDANCE_LIST = "attendance.list"
    ATTENDANCE_DECIDE = "attendance.decide"
    ATTENDANCE_CHANGE_REQUEST = "attendance.change_request"

    CHANGE_REQUEST_SUBMIT = "change_request.submit"
    CHANGE_REQUEST_LIST = "change_request.list"
    CHANGE_REQUEST_DECIDE = "change_request.decide"

    CLIENT_CREATE = "client.create"
    EMPLOYEE_CREATE = "employee.create"
    DEDUCTION_WRITE = "deduction.write"
    ENTITY_WRITE_DIRECT = "entity.write_direct"
    RECORDS_READ = "records.read"

    SALARY_GENERATE = "salary.generate"
    INVOICE_GENERATE = "invoice.generate"


_ALL = frozenset(Role)
_OFFICE = frozenset({Role.ADMIN, Role.HR, Role.ACCOUNTANT})

ALLOWED_ROLES: dict[Operation, frozenset[Role]] = {
    Operation.ATTENDANCE_CREATE: _ALL,
    Operation.ATTENDANCE_LIST: _OFFICE,
    Operation.ATTENDANCE_DECIDE: frozenset({Role.HR, Role.ADMIN}),
    Operation.ATTENDANCE_CHANGE_REQUEST: frozenset({Role.HR}),
    Operation.CHANGE_REQUEST_SUBMIT: frozenset({Role.HR, Role.ACCOUNTANT, Role.SUPERVISOR}),
    Operation.CHANGE_REQUEST_LIST: _ALL,
    Operation.CHANGE_REQUEST_DECIDE: frozenset({Role.ADMIN}),
    Operation.CLIENT_CREATE: frozenset({Role.ADMIN, Role.ACCOUNTANT}),
    Operation.EMPLOYEE_CREATE: frozenset({Role.ADMIN, Role.HR}),
    Operation.DEDUCTION_WRITE: _OFFICE,
    Operation.ENTITY_WRITE_DIRECT: frozenset({Role.ADMIN}),
    Operation.RECORDS_READ: _OFFICE,
    Operation.SALARY_GENERATE: frozenset({Role.ADMIN, Role.ACCOUNTANT}),
    Operation.INVOICE_GENERATE: frozenset({Role.ADMIN, Role.ACCOUNTANT}),
}


def to_role(value: Union[Role, str, None]) -> Optional[Role]:
    if value is None or isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        return None


def is_allowed(operation: Operation, role: Union[Role, str, None]) -> bool:
    resolved = to_role(role)
    return resolved is not None and resolved in ALLOWED_ROLES[operation]


def require_role(operation: Operation, role: Union[Role, str, None]) -> Role:
    if not is_allowed(operation, role):
        raise AuthorizationError(f"Role {role!r} may not perform {operation.value}")
    return to_role(role)
